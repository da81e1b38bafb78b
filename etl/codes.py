"""
Free-text status codes used in the application sheet, and what they mean.

The sheet is kept in Japanese; English equivalents are accepted too so rows
typed by other staff (and test fixtures) map the same way.
"""
from placements import states

from .normalizers import clean_text

UNKNOWN_NAME = '名前不明'
PLACEHOLDER_NAME = '未定'

# Inquiry outcome (application status)
APPLICATION_STATUS_MAP = {
    '新規': 'new',
    '有効': 'valid',
    '有効応募': 'valid',
    '無効': 'invalid',
    '無効応募': 'invalid',
    '不通': 'no_answer',
    '電話出ず': 'no_answer',
    '繋ぎ済み': 'connected',
    '繋ぎ': 'connected',
    '稼働中': 'working',
    '稼働前': 'working',
    '完了': 'completed',
}

# Pipeline stage of the application
PROGRESS_STATUS_MAP = {
    '電話面談予約済み': 'phone_interview_scheduled',
    '電話面談済み': 'phone_interview_done',
    '紹介済み': 'referred',
    '繋ぎ': 'referred',
    '派遣面接予定': 'dispatch_interview_scheduled',
    '派遣面接済み': 'dispatch_interview_done',
    '済み': 'dispatch_interview_done',
    '採用': 'hired',
    '赴任前': 'pre_assignment',
    '赴任済み': 'assigned',
    '稼働中': 'working',
    '全額入金': 'full_paid',
    '確定': 'full_paid',
}

REFERRAL_STATUS_MAP = {
    '紹介済み': states.REFERRED,
    '繋ぎ': states.REFERRED,
    '面接予定': states.INTERVIEW_SCHEDULED,
    '面接済み': states.INTERVIEW_DONE,
    '済み': states.INTERVIEW_DONE,
    '採用': states.HIRED,
    '赴任前': states.PRE_ASSIGNMENT,
    '赴任済み': states.ASSIGNED,
    '稼働中': states.WORKING,
    'キャンセル': states.CANCELLED,
    '流れ': states.CANCELLED,
    '不採用': states.DECLINED,
    '辞退': states.DECLINED,
}

# Progress stages that have a referral-state counterpart
PROGRESS_TO_REFERRAL_STATUS = {
    'referred': states.REFERRED,
    'dispatch_interview_scheduled': states.INTERVIEW_SCHEDULED,
    'dispatch_interview_done': states.INTERVIEW_DONE,
    'hired': states.HIRED,
    'pre_assignment': states.PRE_ASSIGNMENT,
    'assigned': states.ASSIGNED,
    'working': states.WORKING,
    'full_paid': states.FULL_PAID,
}

# Phone-screen outcome -> interview result
SCREENING_OUTCOME_MAP = {
    '済み': 'completed',
    '流れ': 'cancelled',
    '辞退': 'declined',
    'completed': 'completed',
    'cancelled': 'cancelled',
    'declined': 'declined',
}

CONNECTED_MARKERS = frozenset({'繋ぎ', 'connected', 'referred'})
HIRED_MARKERS = frozenset({'採用', 'hired'})
PAYMENT_CONFIRMED_MARKER = '確定'


def _lookup(mapping, raw):
    text = clean_text(raw)
    if not text:
        return None
    return mapping.get(text) or mapping.get(text.lower())


def application_status(raw):
    return _lookup(APPLICATION_STATUS_MAP, raw) or 'new'


def screening_result(raw):
    return _lookup(SCREENING_OUTCOME_MAP, raw)


def is_connected(raw):
    return clean_text(raw).lower() in CONNECTED_MARKERS


def is_hired(raw):
    return clean_text(raw).lower() in HIRED_MARKERS


def progress_status(payment_raw, progress_raw, connection_raw):
    """
    Application pipeline stage.

    A confirmed payment wins, then the progress code, then the connection
    code (which defaults to "referred" when present but unknown).
    """
    if PAYMENT_CONFIRMED_MARKER in clean_text(payment_raw):
        return 'full_paid'
    if clean_text(progress_raw):
        return _lookup(PROGRESS_STATUS_MAP, progress_raw)
    if clean_text(connection_raw):
        return _lookup(PROGRESS_STATUS_MAP, connection_raw) or 'referred'
    return None


def referral_status(progress_raw, connection_raw):
    """
    Snapshot referral state read from the row.

    The progress code is tried against the referral vocabulary, then the
    progress vocabulary; without a progress code the connection code is
    used. Anything unrecognised is "referred".
    """
    if clean_text(progress_raw):
        status = _lookup(REFERRAL_STATUS_MAP, progress_raw)
        if status is None:
            status = PROGRESS_TO_REFERRAL_STATUS.get(_lookup(PROGRESS_STATUS_MAP, progress_raw))
        return status or states.REFERRED
    if clean_text(connection_raw):
        return _lookup(REFERRAL_STATUS_MAP, connection_raw) or states.REFERRED
    return states.REFERRED
