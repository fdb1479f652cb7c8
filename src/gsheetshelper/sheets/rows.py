"""
What to write and where.  These describe a write against a sheet by title,
the client resolves the title and translates the rows when it runs them.
"""
from dataclasses import dataclass, field

from .cells import Row


@dataclass
class AppendRequest():
    """Rows to add after the last row with data in sheet_name"""
    sheet_name: str
    rows: list[Row] = field(default_factory=list)


@dataclass
class UpdateRequest():
    """
    Rows to write into sheet_name with the first cell of the first row
    landing on the zero-based (column_start, row_start).
    """
    sheet_name: str
    column_start: int = 0
    row_start: int = 0
    rows: list[Row] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.column_start < 0 or self.row_start < 0:
            raise ValueError("column_start and row_start are zero-based and must be >= 0")

    @property
    def width(self) -> int:
        """Cells in the widest row"""
        return max((len(r) for r in self.rows), default=0)
