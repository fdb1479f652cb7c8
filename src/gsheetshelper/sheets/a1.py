from enum import IntFlag
import re

from . import GoogleSheetsMaxColumnIndex


class CellRangeOptions(IntFlag):
    """Which parts of a range reference get the absolute '$' marker"""
    NONE = 0
    FIX_COLUMN = 1
    FIX_ROW = 2


class A1Notation():
    """
    Building blocks for Google Sheets A1 references.
    See https://developers.google.com/sheets/api/guides/concepts#cell
    A general reference has the form:

    '<title>'!<col><row>:<col><row>

    Notes on the above:
        Columns are zero-based ints here but letters A-ZZ on the wire.
        Rows are 1-based on the wire, callers pass the wire row.
        The sheet title is always quoted, Sheets accepts a quoted title
        even when quoting wasn't needed, and a quote inside the title is doubled.
    """
    _A1COLREGEXSTR = r"^[A-Z]{1,2}$"
    _a1_col_re = re.compile(_A1COLREGEXSTR)

    @classmethod
    def index_to_col(cls, index: int) -> str:
        """
        Translate a zero-based column index to its letter name, 0 -> 'A', 27 -> 'AB'.
        Only indices up to 701 ('ZZ') are addressable this way.
        """
        i = int(index)
        if i < 0 or i > GoogleSheetsMaxColumnIndex:
            raise ValueError(f"column index out of range [0, {GoogleSheetsMaxColumnIndex}]: {index}")
        if i <= 25:
            return chr(ord('A') + i)
        # index 26 is "AA", index 52 is "BA"
        return chr(ord('A') + i // 26 - 1) + chr(ord('A') + i % 26)

    @classmethod
    def col_to_index(cls, column: str) -> int:
        """
        Translate a column letter name back to a zero-based index.
        Returns -1 for anything that isn't A-ZZ.
        """
        c = str(column).upper()
        if not cls._a1_col_re.match(c):
            return -1
        num = 0
        for ch in c:
            num = num * 26 + (ord(ch) - 64)
        return num - 1

    @staticmethod
    def quote_sheet(sheet: str) -> str:
        return "'" + str(sheet).replace("'", "''") + "'"

    @classmethod
    def _prefix(cls, sheet: str | None) -> str:
        return f"{cls.quote_sheet(sheet)}!" if sheet else ""

    @classmethod
    def _col(cls, column: str | int) -> str:
        return cls.index_to_col(column) if isinstance(column, int) else str(column)

    @classmethod
    def cell(cls, column: str | int, row: int, sheet: str | None = None) -> str:
        """Single cell reference, optionally prefixed by the sheet: 'Data'!C4"""
        return f"{cls._prefix(sheet)}{cls._col(column)}{row}"

    @classmethod
    def range(cls, start_cell: str, end_cell: str, sheet: str | None = None) -> str:
        """Range from two already formed cell references: 'Data'!A1:B2"""
        return f"{cls._prefix(sheet)}{start_cell}:{end_cell}"

    @classmethod
    def grid_range(cls, start_col: str | int, start_row: int,
                   end_col: str | int, end_row: int,
                   options: CellRangeOptions = CellRangeOptions.NONE,
                   sheet: str | None = None) -> str:
        """
        Range from coordinates with optional fixed ('$') columns and/or rows.
        grid_range("A", 1, "B", 2, CellRangeOptions.FIX_COLUMN | CellRangeOptions.FIX_ROW)
        gives $A$1:$B$2
        """
        col_prefix = "$" if options & CellRangeOptions.FIX_COLUMN else ""
        row_prefix = "$" if options & CellRangeOptions.FIX_ROW else ""
        start = f"{col_prefix}{cls._col(start_col)}{row_prefix}{start_row}"
        end = f"{col_prefix}{cls._col(end_col)}{row_prefix}{end_row}"
        return cls.range(start, end, sheet)

    @classmethod
    def column_range(cls, column: str | int, start_row: int, end_row: int,
                     options: CellRangeOptions = CellRangeOptions.NONE,
                     sheet: str | None = None) -> str:
        """Range within a single column, e.g. A1:A14"""
        return cls.grid_range(column, start_row, column, end_row, options, sheet)

    @classmethod
    def sheet_range(cls, sheet: str) -> str:
        """A bare quoted title addresses every cell of that sheet"""
        return cls.quote_sheet(sheet)
