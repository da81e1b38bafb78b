"""
Field normalizers for the application sheet.

The sheet is maintained by hand, so every parser here is total: malformed
input degrades to None (or an empty string / False) and never raises.
"""
import re
import unicodedata
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from django.utils import timezone

PHONE_MAX_LENGTH = 20

# Whitespace (incl. U+3000), ASCII/full-width hyphens and dashes, parentheses
PHONE_NOISE_RE = re.compile(r"[\s　\-‐‑‒–—―－ー()（）]")

AMOUNT_NOISE_RE = re.compile(r"[,，円¥￥\\\"'\s]")
NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")

FULL_DATE_RE = re.compile(r"^(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})")
KANJI_DATE_RE = re.compile(r"^(\d{4})年(\d{1,2})月(\d{1,2})日")
US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})$")
SHORT_YEAR_DATE_RE = re.compile(r"^(\d{2})[/\-](\d{1,2})[/\-](\d{1,2})$")
MONTH_DAY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})$")
MONTH_DAY_PREFIX_RE = re.compile(r"^(\d{1,2})/(\d{1,2})")
TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?")

# Two-digit years below the pivot are 20xx, the rest 19xx
TWO_DIGIT_YEAR_PIVOT = 50

PRESENT_MARKERS = ('あり', '有')
PRESENT_SYMBOL = '○'


def clean_text(raw):
    """NFKC-normalize and strip a cell; None and non-strings become ''"""
    if raw is None:
        return ''
    if not isinstance(raw, str):
        raw = str(raw)
    return unicodedata.normalize('NFKC', raw).strip()


def normalize_phone(raw):
    if not raw:
        return ''
    # Stripping separators can leave a base character next to a combining mark
    phone = unicodedata.normalize('NFKC', PHONE_NOISE_RE.sub('', clean_text(raw)))
    return phone[:PHONE_MAX_LENGTH]


def expand_two_digit_year(year):
    if year >= 100:
        return year
    return 2000 + year if year < TWO_DIGIT_YEAR_PIVOT else 1900 + year


def _safe_date(year, month, day):
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw, today=None):
    """
    Parse the date formats found in the sheet.

    Accepts YYYY/M/D, YYYY-M-D (anything after the date is ignored),
    YYYY年M月D日, M/D/YYYY, M/D/YY, YY-M-D or YY/M/D with a 50-year pivot,
    and bare M/D in the current year. An ambiguous NN/NN/NN is read as
    M/D/YY when that is a real date. Returns None for anything else.
    """
    text = clean_text(raw)
    if not text:
        return None

    match = FULL_DATE_RE.match(text) or KANJI_DATE_RE.match(text)
    if match:
        return _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    match = US_DATE_RE.match(text)
    if match:
        year = expand_two_digit_year(int(match.group(3)))
        value = _safe_date(year, int(match.group(1)), int(match.group(2)))
        if value is not None:
            return value

    match = SHORT_YEAR_DATE_RE.match(text)
    if match:
        year = expand_two_digit_year(int(match.group(1)))
        return _safe_date(year, int(match.group(2)), int(match.group(3)))

    match = MONTH_DAY_RE.match(text)
    if match:
        year = (today or date.today()).year
        return _safe_date(year, int(match.group(1)), int(match.group(2)))

    return None


def parse_month_day(raw, year):
    """Parse an M/D cell against an explicit year (used for dispatch and work dates)"""
    text = clean_text(raw)
    if not text or not year:
        return None
    match = MONTH_DAY_PREFIX_RE.match(text)
    if not match:
        return None
    return _safe_date(int(year), int(match.group(1)), int(match.group(2)))


def parse_year(raw):
    text = clean_text(raw)
    if not text.isdigit():
        return None
    year = expand_two_digit_year(int(text))
    return year if 1900 <= year <= 2999 else None


def parse_month_marker(year_raw, month_raw, day=1):
    """Date for a (year, month)-only marker (first of the month by default), or None"""
    year = parse_year(year_raw)
    month_text = clean_text(month_raw).rstrip('月')
    if year is None or not month_text.isdigit():
        return None
    return _safe_date(year, int(month_text), day)


def parse_time(raw):
    text = clean_text(raw)
    match = TIME_RE.match(text)
    if not match:
        return None
    try:
        return time(int(match.group(1)), int(match.group(2)), int(match.group(3) or 0))
    except ValueError:
        return None


def _parse_decimal(text):
    if not NUMBER_RE.match(text):
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def parse_amount(raw):
    """Money cell -> Decimal; thousands separators and currency marks are dropped"""
    text = AMOUNT_NOISE_RE.sub('', clean_text(raw))
    if not text:
        return None
    return _parse_decimal(text)


def parse_number(raw):
    text = clean_text(raw).replace(',', '')
    if not text:
        return None
    return _parse_decimal(text)


def parse_boolean(raw):
    """
    True only when the cell says something is present.

    Anything else, including explicit "none" answers and unknown text, is
    False. Import is one-way so this loses information on purpose.
    """
    text = clean_text(raw)
    if not text:
        return False
    return any(marker in text for marker in PRESENT_MARKERS) or text == PRESENT_SYMBOL


def parse_gender(raw):
    text = clean_text(raw)
    if not text:
        return None
    lowered = text.lower()
    if '女' in text or lowered == 'female':
        return 'female'
    if '男' in text or lowered == 'male':
        return 'male'
    return None


def month_key(value):
    """'YYYY-MM' for a date or datetime; aware datetimes are bucketed in local time"""
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, date):
        return f"{value.year:04d}-{value.month:02d}"
    return None


def to_local_datetime(day, at=None):
    """Combine a date and optional time into an aware datetime in the project time zone"""
    if day is None:
        return None
    return timezone.make_aware(datetime.combine(day, at or time.min))
