"""Errors raised by the sheet import. Row-level problems are counted, not raised."""


class ImportSetupError(Exception):
    """Fatal problem found before any row is processed"""


class SheetNotFoundError(ImportSetupError):
    pass


class OrganizationNotFoundError(ImportSetupError):
    pass


class ColumnLayoutError(ImportSetupError):
    """The header row does not match the fixed column layout"""

    def __init__(self, mismatches):
        self.mismatches = mismatches
        details = '; '.join(
            f"{column.letter} ({column.key}) expected {'/'.join(column.headers)!r}, found {found!r}"
            for column, found in mismatches
        )
        super().__init__(f"Sheet columns do not match the expected layout: {details}")
