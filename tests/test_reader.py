import io

import pytest

from etl.exceptions import ColumnLayoutError, ImportSetupError, SheetNotFoundError
from etl.reader import read_sheet

from conftest import SAMPLE_ROWS, SCENARIO_ROW


def test_reads_data_rows_after_summary_and_header(write_sheet):
    sheet = read_sheet(write_sheet(SAMPLE_ROWS))

    assert len(sheet) == len(SAMPLE_ROWS)
    assert sheet.rows[0].line_number == 3
    assert sheet.rows[0].get('phone') == '090-1234-5678'
    assert sheet.rows[1].get('name') == '山田 花子'


def test_blank_rows_are_skipped_and_counted(write_sheet):
    sheet = read_sheet(write_sheet([SCENARIO_ROW, {}, SCENARIO_ROW]))

    assert len(sheet) == 2
    assert sheet.blank_rows == 1
    assert [row.line_number for row in sheet.rows] == [3, 5]


def test_values_are_kept_as_text(write_sheet):
    sheet = read_sheet(write_sheet([{'phone': '0312345678', 'expected_revenue': 'NA'}]))

    assert sheet.rows[0].get('phone') == '0312345678'
    assert sheet.rows[0].get('expected_revenue') == 'NA'


def test_reads_from_a_buffer(csv_text):
    buffer = io.BytesIO(('\ufeff' + csv_text([SCENARIO_ROW])).encode('utf-8'))
    sheet = read_sheet(buffer)
    assert len(sheet) == 1


def test_missing_file(tmp_path):
    with pytest.raises(SheetNotFoundError):
        read_sheet(tmp_path / 'missing.csv')


def test_empty_file(tmp_path):
    path = tmp_path / 'empty.csv'
    path.write_text('')
    with pytest.raises(ImportSetupError):
        read_sheet(path)


def test_shift_jis_export_is_a_setup_error(tmp_path, csv_text):
    path = tmp_path / 'sjis.csv'
    path.write_bytes(csv_text([SCENARIO_ROW]).encode('cp932'))
    with pytest.raises(ImportSetupError, match='UTF-8'):
        read_sheet(path)


def test_reordered_columns_fail_loudly(write_sheet, layout):
    header = layout.header_row()
    phone, company = layout['phone'].index, layout['company'].index
    header[phone], header[company] = header[company], header[phone]

    with pytest.raises(ColumnLayoutError):
        read_sheet(write_sheet([SCENARIO_ROW], header=header))


def test_header_check_can_be_skipped(write_sheet, layout):
    header = [''] * layout.width
    sheet = read_sheet(write_sheet([SCENARIO_ROW], header=header), validate_headers=False)
    assert len(sheet) == 1
