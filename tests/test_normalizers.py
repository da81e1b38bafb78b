from datetime import date, datetime, time, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.utils import timezone

from etl.normalizers import (
    month_key,
    normalize_phone,
    parse_amount,
    parse_boolean,
    parse_date,
    parse_gender,
    parse_month_day,
    parse_month_marker,
    parse_number,
    parse_time,
    to_local_datetime,
)


class TestNormalizePhone:
    @pytest.mark.parametrize("raw,expected", [
        ('090-1234-5678', '09012345678'),
        ('090 1234 5678', '09012345678'),
        ('090　1234　5678', '09012345678'),
        ('０９０－１２３４－５６７８', '09012345678'),
        ('(03) 1234-5678', '0312345678'),
        ('090ー1234ー5678', '09012345678'),
        ('', ''),
        (None, ''),
    ])
    def test_strips_separators(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_truncates_to_twenty_characters(self):
        assert normalize_phone('1' * 30) == '1' * 20

    @pytest.mark.parametrize("raw", [
        '090-1234-5678', ' 080 1111 2222 ', '０３－１２３４', 'abc-def', '1' * 40, '', 'か-\u3099', 'は \u309a',
    ])
    def test_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once

    def test_combining_marks_compose_after_separators_are_removed(self):
        assert normalize_phone('か-\u3099') == 'が'


class TestParseDate:
    TODAY = date(2025, 6, 1)

    @pytest.mark.parametrize("raw,expected", [
        ('2025/1/15', date(2025, 1, 15)),
        ('2025-01-15', date(2025, 1, 15)),
        ('2025.1.5', date(2025, 1, 5)),
        ('2025/01/15 10:00:00', date(2025, 1, 15)),
        ('2025年3月9日', date(2025, 3, 9)),
        ('1/15/2025', date(2025, 1, 15)),
        ('３/７', date(2025, 3, 7)),
        ('12/31', date(2025, 12, 31)),
    ])
    def test_accepted_formats(self, raw, expected):
        assert parse_date(raw, today=self.TODAY) == expected

    def test_two_digit_year_pivot(self):
        assert parse_date('99-3-1') == date(1999, 3, 1)
        assert parse_date('05-3-1') == date(2005, 3, 1)
        assert parse_date('49-3-1') == date(2049, 3, 1)
        assert parse_date('50-3-1') == date(1950, 3, 1)

    def test_slashed_two_digit_years(self):
        assert parse_date('1/15/25') == date(2025, 1, 15)
        # not a valid M/D/YY, so read as YY/M/D
        assert parse_date('25/1/15') == date(2025, 1, 15)

    @pytest.mark.parametrize("raw", [
        '', None, 'not a date', '2025/13/01', '2025/2/30', '2/30', '99/99/9999',
        '未定', '----', '2025', '0/0', '   ', '\x00', '12345678901234567890',
    ])
    def test_total_on_bad_input(self, raw):
        assert parse_date(raw, today=self.TODAY) is None

    def test_bare_month_day_uses_current_year(self):
        assert parse_date('4/1') == date(date.today().year, 4, 1)


class TestParseAmount:
    @pytest.mark.parametrize("raw,expected", [
        ('300,000', Decimal('300000')),
        ('¥150,000', Decimal('150000')),
        ('￥1,200円', Decimal('1200')),
        ('３００，０００', Decimal('300000')),
        ('"12,500"', Decimal('12500')),
        ('-5000', Decimal('-5000')),
        ('1234.5', Decimal('1234.5')),
    ])
    def test_parses_money(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ['', None, '未定', 'NaN', 'Infinity', '1e5', '12-34'])
    def test_non_numeric_is_none(self, raw):
        assert parse_amount(raw) is None

    def test_parse_number(self):
        assert parse_number('158.5') == Decimal('158.5')
        assert parse_number('不明') is None


class TestParseBoolean:
    @pytest.mark.parametrize("raw", ['あり', '有', '有り', '持病あり', '○'])
    def test_present_markers(self, raw):
        assert parse_boolean(raw) is True

    @pytest.mark.parametrize("raw", ['', None, 'なし', '無', '×', '不明', 'yes', '○×'])
    def test_everything_else_is_false(self, raw):
        assert parse_boolean(raw) is False


class TestParseGender:
    @pytest.mark.parametrize("raw,expected", [
        ('男', 'male'),
        ('男性', 'male'),
        ('女', 'female'),
        ('女性', 'female'),
        ('Female', 'female'),
        ('', None),
        ('不明', None),
    ])
    def test_gender(self, raw, expected):
        assert parse_gender(raw) == expected


class TestMonthHelpers:
    def test_month_marker(self):
        assert parse_month_marker('2025', '3') == date(2025, 3, 1)
        assert parse_month_marker('2025', '3月', day=15) == date(2025, 3, 15)
        assert parse_month_marker('', '3') is None
        assert parse_month_marker('2025', '13') is None

    def test_month_day_with_year(self):
        assert parse_month_day('3/1', 2025) == date(2025, 3, 1)
        assert parse_month_day('03/01(土)', 2025) == date(2025, 3, 1)
        assert parse_month_day('3/1', None) is None
        assert parse_month_day('2/30', 2025) is None

    def test_parse_time(self):
        assert parse_time('10:30') == time(10, 30)
        assert parse_time('9:05:10') == time(9, 5, 10)
        assert parse_time('25:00') is None
        assert parse_time('') is None

    def test_month_key_uses_local_time(self):
        # 2025-01-31 20:00 UTC is already February in Tokyo
        value = datetime(2025, 1, 31, 20, 0, tzinfo=dt_timezone.utc)
        assert month_key(value) == '2025-02'

    def test_month_key_for_dates(self):
        assert month_key(date(2025, 3, 15)) == '2025-03'
        assert month_key(None) is None

    def test_to_local_datetime(self):
        value = to_local_datetime(date(2025, 1, 15), time(10, 30))
        assert timezone.is_aware(value)
        local = timezone.localtime(value)
        assert (local.year, local.month, local.day, local.hour, local.minute) == (2025, 1, 15, 10, 30)
        assert to_local_datetime(None) is None
