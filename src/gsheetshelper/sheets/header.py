from collections.abc import Callable, Iterable

from .a1 import A1Notation
from .cells import Cell, Row


class HeaderRow():
    """
    Column lookups by the labels of a sheet's header row.
    Typically built from the first row read back with get_values().
    """
    def __init__(self, columns: Iterable[str]) -> None:
        self.columns = [str(c) for c in columns]

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, header: str) -> bool:
        return header in self.columns

    def index_of(self, header: str) -> int:
        """Zero-based column index of header, -1 if it isn't there"""
        try:
            return self.columns.index(header)
        except ValueError:
            return -1

    def column_of(self, header: str) -> str | None:
        """Column letter of header, None if it isn't there"""
        idx = self.index_of(header)
        return A1Notation.index_to_col(idx) if idx >= 0 else None

    @staticmethod
    def create_row(headers: Iterable[str],
                   formatter: Callable[[Cell], None] | None = None) -> Row:
        """
        A row of text cells, one per header.  formatter gets each cell to
        set bold, colors and so on.
        """
        row = []
        for h in headers:
            cell = Cell(str(h))
            if formatter is not None:
                formatter(cell)
            row.append(cell)
        return row
