"""Shared fixtures for sheet import tests."""

import csv
import io
from datetime import date

import pytest

from etl.columns import ColumnLayout
from etl.config import ImportConfig
from placements.models import Coordinator, Organization

# The example row used throughout: a referred candidate with expected revenue
SCENARIO_ROW = {
    'applied_date': '2025/1/15',
    'phone': '090-1234-5678',
    'screening_outcome': 'completed',
    'connection_status': 'referred',
    'expected_revenue': '300,000',
}

HIRED_ROW = {
    'applied_date': '2025/2/3',
    'name': '山田 花子',
    'phone': '080-1111-2222',
    'source': 'Indeed',
    'gender': '女',
    'tattoo': 'なし',
    'medical': '有（腰痛）',
    'height': '158',
    'schedule_year': '2025',
    'schedule_month': '2',
    'screening_date': '2025/2/5',
    'screening_time': '10:30',
    'screening_outcome': '済み',
    'coordinator': '佐藤',
    'connection_status': '繋ぎ',
    'company': '株式会社テスト',
    'job_title': '製造スタッフ',
    'progress': '採用',
    'hiring_result': '採用',
    'dispatch_year': '2025',
    'dispatch_month': '3',
    'dispatch_interview_date': '2/10',
    'start_work_day': '3/1',
    'expected_revenue': '200,000',
    'confirmed_revenue': '200000',
    'paid_amount': '¥150,000',
}

CANCELLED_ROW = {
    'applied_date': '2025/2/4',
    'name_last': '鈴木',
    'name_first': '太郎',
    'phone': '070-3333-4444',
    'schedule_year': '2025',
    'schedule_month': '2',
    'screening_outcome': '流れ',
    'connection_status': '繋げず',
}

NO_IDENTITY_ROW = {
    'applied_date': '2025/2/5',
    'notes': '問い合わせのみ',
}

PHONELESS_ROW = {
    'applied_date': '2025/2/6',
    'name': '田中',
}

SAMPLE_ROWS = [SCENARIO_ROW, HIRED_ROW, CANCELLED_ROW, NO_IDENTITY_ROW, PHONELESS_ROW]


@pytest.fixture
def layout():
    return ColumnLayout()


def sheet_cells(layout, values):
    cells = [''] * layout.width
    for key, value in values.items():
        cells[layout[key].index] = value
    return cells


def sheet_csv(rows, layout=None, header=None):
    """CSV text shaped like the export: summary row, header row, data rows"""
    layout = layout or ColumnLayout()
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(['集計'] + [''] * (layout.width - 1))
    writer.writerow(header or layout.header_row())
    for values in rows:
        writer.writerow(sheet_cells(layout, values))
    return buffer.getvalue()


@pytest.fixture
def make_row(layout):
    def _make_row(line_number=3, **values):
        return layout.row(sheet_cells(layout, values), line_number=line_number)
    return _make_row


@pytest.fixture
def write_sheet(tmp_path):
    def _write_sheet(rows, header=None, name='sheet.csv'):
        path = tmp_path / name
        path.write_text(sheet_csv(rows, header=header), encoding='utf-8')
        return path
    return _write_sheet


@pytest.fixture
def csv_text():
    return sheet_csv


@pytest.fixture
def organization(db):
    return Organization.objects.create(name='テスト派遣', code='test')


@pytest.fixture
def coordinator(organization):
    return Coordinator.objects.create(organization=organization, name='佐藤 一郎')


@pytest.fixture
def import_config():
    # Small sizes so paging and batching are exercised
    return ImportConfig(batch_size=2, page_size=2, delete_chunk_size=2)


@pytest.fixture
def today():
    return date(2025, 6, 1)
