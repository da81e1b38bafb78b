import pytest

from etl import codes
from placements import states


@pytest.mark.parametrize("raw,expected", [
    ('有効応募', 'valid'),
    ('電話出ず', 'no_answer'),
    ('繋ぎ済み', 'connected'),
    ('完了', 'completed'),
    ('', 'new'),
    ('謎の値', 'new'),
])
def test_application_status(raw, expected):
    assert codes.application_status(raw) == expected


class TestProgressStatus:
    def test_confirmed_payment_wins(self):
        assert codes.progress_status('入金確定', '採用', '繋ぎ') == 'full_paid'

    def test_progress_code_next(self):
        assert codes.progress_status('', '赴任前', '繋ぎ') == 'pre_assignment'

    def test_unknown_progress_code_is_null_even_with_connection(self):
        assert codes.progress_status('', '保留', '繋ぎ') is None

    def test_connection_code_defaults_to_referred(self):
        assert codes.progress_status('', '', '繋ぎ') == 'referred'
        assert codes.progress_status('', '', 'connected') == 'referred'

    def test_nothing_set(self):
        assert codes.progress_status('', '', '') is None


class TestReferralStatus:
    @pytest.mark.parametrize("progress,expected", [
        ('面接予定', states.INTERVIEW_SCHEDULED),
        ('済み', states.INTERVIEW_DONE),
        ('採用', states.HIRED),
        ('流れ', states.CANCELLED),
        ('辞退', states.DECLINED),
        ('全額入金', states.FULL_PAID),
        ('派遣面接予定', states.INTERVIEW_SCHEDULED),
        ('保留', states.REFERRED),
    ])
    def test_from_progress_code(self, progress, expected):
        assert codes.referral_status(progress, '繋ぎ') == expected

    def test_connection_code_when_progress_empty(self):
        assert codes.referral_status('', '繋ぎ') == states.REFERRED
        assert codes.referral_status('', 'referred') == states.REFERRED

    def test_always_a_valid_state(self):
        for progress in ('', 'x', '採用', 'キャンセル'):
            assert states.is_valid_status(codes.referral_status(progress, '繋ぎ'))


def test_connection_markers():
    assert codes.is_connected('繋ぎ')
    assert codes.is_connected('Referred')
    assert not codes.is_connected('繋げず')
    assert not codes.is_connected('')


def test_screening_result():
    assert codes.screening_result('済み') == 'completed'
    assert codes.screening_result('Completed') == 'completed'
    assert codes.screening_result('流れ') == 'cancelled'
    assert codes.screening_result('辞退') == 'declined'
    assert codes.screening_result('予約済み') is None
