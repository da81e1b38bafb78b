import logging
import os
from dataclasses import dataclass, field

import pandas as pd

from .columns import HEADER_ROWS, SUMMARY_ROWS, ColumnLayout
from .exceptions import ImportSetupError, SheetNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Sheet:
    header: list
    rows: list = field(default_factory=list)
    blank_rows: int = 0

    def __len__(self):
        return len(self.rows)


def read_sheet(source, layout=None, validate_headers=True):
    """
    Load the application sheet export.

    `source` is a path or a file-like object holding the CSV export. Every
    cell is read as text; nothing is coerced to NaN. The first row is the
    spreadsheet's summary row and the second its header.
    """
    layout = layout or ColumnLayout()

    if isinstance(source, (str, os.PathLike)) and not os.path.exists(source):
        raise SheetNotFoundError(f"CSV file not found: {source}")

    try:
        frame = pd.read_csv(
            source,
            header=None,
            dtype=str,
            keep_default_na=False,
            encoding='utf-8-sig',
            skip_blank_lines=False,
        )
    except pd.errors.EmptyDataError:
        raise ImportSetupError("CSV file is empty")
    except pd.errors.ParserError as e:
        raise ImportSetupError(f"CSV file could not be parsed: {e}")
    except UnicodeDecodeError as e:
        raise ImportSetupError(f"CSV file is not UTF-8: {e}")

    records = frame.values.tolist()
    if len(records) < SUMMARY_ROWS + HEADER_ROWS:
        raise ImportSetupError("CSV file has no header row")

    header = ['' if pd.isna(cell) else str(cell) for cell in records[SUMMARY_ROWS]]
    if validate_headers:
        layout.validate(header)
    else:
        logger.warning("Skipping sheet header validation; column positions are trusted as-is")

    sheet = Sheet(header=header)
    first_data_line = SUMMARY_ROWS + HEADER_ROWS + 1
    for offset, cells in enumerate(records[SUMMARY_ROWS + HEADER_ROWS:]):
        cells = ['' if pd.isna(cell) else str(cell) for cell in cells]
        if len(cells) < layout.width:
            cells.extend([''] * (layout.width - len(cells)))
        row = layout.row(cells, line_number=first_data_line + offset)
        if row.is_blank():
            sheet.blank_rows += 1
            continue
        sheet.rows.append(row)

    logger.info(f"Read {len(sheet.rows)} data rows ({sheet.blank_rows} blank rows skipped)")
    return sheet
