"""
Fixed column layout of the application sheet.

The export has no stable header names, so columns are addressed by
zero-based position. Every position the import reads is listed here once,
with the header labels it is known under; `ColumnLayout.validate` checks the
header row against this table before any data row is touched, so a
reordered sheet fails loudly instead of silently shifting fields.
"""
import re
import unicodedata
from dataclasses import dataclass

from .exceptions import ColumnLayoutError

WHITESPACE_RE = re.compile(r"\s+")

# Row 1 is a summary row, row 2 the header, data starts on row 3
SUMMARY_ROWS = 1
HEADER_ROWS = 1


def column_letter(index):
    """0 -> A, 25 -> Z, 26 -> AA"""
    letters = ''
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord('A') + remainder) + letters
    return letters


def normalize_header(text):
    return WHITESPACE_RE.sub('', unicodedata.normalize('NFKC', text or ''))


@dataclass(frozen=True)
class Column:
    key: str
    index: int
    headers: tuple

    @property
    def letter(self):
        return column_letter(self.index)

    def accepts(self, header_text):
        found = normalize_header(header_text)
        return any(found == normalize_header(label) for label in self.headers)


APPLICATION_SHEET_COLUMNS = (
    # Application
    Column('applied_date', 5, ('日付', '応募日')),
    Column('notes', 7, ('備考',)),
    Column('source', 9, ('媒体',)),
    Column('job_type', 10, ('職種',)),
    # Job seeker
    Column('name_last', 13, ('氏名(姓)', '姓')),
    Column('name_first', 14, ('氏名(名)', '名')),
    Column('name', 15, ('氏名',)),
    Column('kana_last', 16, ('カナ(姓)', 'セイ')),
    Column('kana_first', 17, ('カナ(名)', 'メイ')),
    Column('kana', 18, ('カナ', 'フリガナ')),
    Column('phone', 19, ('電話番号',)),
    Column('birth_date', 20, ('生年月日',)),
    Column('postal_code', 23, ('郵便番号',)),
    Column('prefecture', 24, ('都道府県',)),
    Column('city', 25, ('市区町村群', '市区町村')),
    Column('gender', 26, ('性別',)),
    Column('tattoo', 27, ('タトゥー',)),
    Column('medical', 29, ('持病',)),
    Column('spouse', 30, ('配偶者',)),
    Column('children', 31, ('子供',)),
    Column('height', 32, ('身長',)),
    Column('weight', 33, ('体重',)),
    Column('inquiry_status', 35, ('問い合わせ状態',)),
    # Phone screening
    Column('schedule_year', 46, ('日程_年',)),
    Column('schedule_month', 47, ('日程_月',)),
    Column('screening_time', 49, ('面談時間', '日程_時間')),
    Column('screening_date', 50, ('面談日程',)),
    Column('screening_outcome', 51, ('面談ステータス', '状態')),
    Column('coordinator', 53, ('担当CD', '担当')),
    # Referral
    Column('connection_status', 57, ('繋ぎ状況',)),
    Column('dispatch_year', 58, ('派遣予定_年',)),
    Column('dispatch_month', 59, ('派遣予定_月',)),
    Column('dispatch_interview_date', 61, ('面接日',)),
    Column('company', 63, ('紹介先',)),
    Column('progress', 64, ('進捗',)),
    Column('hiring_result', 65, ('合否',)),
    Column('job_title', 66, ('案件',)),
    Column('assignment_date', 70, ('赴任予定日',)),
    # Revenue
    Column('expected_revenue', 75, ('見込み売上', '売上見込')),
    Column('start_work_day', 83, ('稼働日',)),
    Column('confirmed_revenue', 84, ('確定売上', '売上確定')),
    Column('paid_amount', 85, ('入金金額',)),
    Column('payment_progress', 87, ('入金進捗',)),
)


class ColumnLayout:
    def __init__(self, columns=APPLICATION_SHEET_COLUMNS):
        self.columns = {column.key: column for column in columns}
        if len(self.columns) != len(columns):
            raise ValueError("Duplicate column keys in layout")
        indexes = [column.index for column in columns]
        if len(set(indexes)) != len(indexes):
            raise ValueError("Two columns share the same position")
        self.width = max(indexes) + 1

    def __getitem__(self, key):
        return self.columns[key]

    def __iter__(self):
        return iter(self.columns.values())

    def validate(self, header_row):
        """Raise ColumnLayoutError listing every column whose header does not match"""
        mismatches = []
        for column in self:
            found = header_row[column.index] if column.index < len(header_row) else ''
            if not column.accepts(found):
                mismatches.append((column, found))
        if mismatches:
            raise ColumnLayoutError(mismatches)

    def header_row(self):
        """Header row this layout expects, blank where no column is read"""
        row = [''] * self.width
        for column in self:
            row[column.index] = column.headers[0]
        return row

    def row(self, cells, line_number=None):
        return SheetRow(self, cells, line_number)


class SheetRow:
    """One data row, read by column key rather than position"""

    def __init__(self, layout, cells, line_number=None):
        self.layout = layout
        self.cells = list(cells)
        self.line_number = line_number

    def get(self, key):
        """Cell text with surrounding whitespace removed ('' when absent)"""
        index = self.layout[key].index
        if index >= len(self.cells):
            return ''
        value = self.cells[index]
        return value.strip() if isinstance(value, str) else ''

    def is_blank(self):
        return not any(isinstance(cell, str) and cell.strip() for cell in self.cells)

    def __repr__(self):
        return f"<SheetRow line={self.line_number}>"
