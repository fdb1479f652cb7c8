"""
The caller side cell model.  A Cell holds one entered value, whose python
type decides what kind of cell it is, plus optional formatting.  The mapper
module turns these into the wire CellData.
"""
from dataclasses import dataclass, field
from enum import Enum
import datetime
from typing import Any, Union

from .resources import Color

_EPOCH = datetime.datetime(1899, 12, 30)


class Formula(str):
    """A string that should be entered as a formula, e.g. Formula("=SUM(A1:A4)")"""
    __slots__ = ()

    def __repr__(self) -> str:
        return f"Formula({str.__repr__(self)})"


class CellKind(Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    FORMULA = "formula"


class HorizontalAlignment(Enum):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#horizontalalign"""
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    CENTER = "CENTER"


CellValue = Union[None, str, Formula, int, float, bool, datetime.date, datetime.datetime]


@dataclass
class Cell():
    """
    A single cell to write.
    The kind is taken from the value's type so there is never a question of
    which of several values wins:
        None -> EMPTY, Formula -> FORMULA, str -> TEXT, bool -> BOOLEAN,
        int/float -> NUMBER, date/datetime -> DATE
    Anything else is stored as its str().
    Formatting is independent of the kind and only applied when set.
    """
    value: CellValue = None
    number_format: str | None = field(default=None, kw_only=True)
    date_format: str | None = field(default=None, kw_only=True)
    bold: bool | None = field(default=None, kw_only=True)
    background_color: Color | None = field(default=None, kw_only=True)
    foreground_color: Color | None = field(default=None, kw_only=True)
    horizontal_alignment: HorizontalAlignment | None = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        if not isinstance(self.value, (type(None), str, int, float, datetime.date)):
            self.value = str(self.value)
        if self.horizontal_alignment is not None and not isinstance(self.horizontal_alignment, HorizontalAlignment):
            self.horizontal_alignment = HorizontalAlignment(str(self.horizontal_alignment).upper())

    @property
    def kind(self) -> CellKind:
        v = self.value
        if v is None:
            return CellKind.EMPTY
        if isinstance(v, Formula):
            return CellKind.FORMULA
        if isinstance(v, str):
            return CellKind.TEXT
        # bool first, it is an int too
        if isinstance(v, bool):
            return CellKind.BOOLEAN
        if isinstance(v, (int, float)):
            return CellKind.NUMBER
        return CellKind.DATE

    @classmethod
    def create(cls, value: Any) -> "Cell | None":
        """Wrap a plain value, None stays None (an empty cell on the wire)"""
        if value is None:
            return None
        return cls(value)


Row = list[Cell | None]


def to_serial(value: datetime.date | datetime.datetime) -> float:
    """
    Days since 1899-12-30, the fractional part being the time of day.
    This is the number Sheets stores for a date/time.
    Timezone aware values are taken at their wall clock time.
    """
    if isinstance(value, datetime.datetime):
        delta = value.replace(tzinfo=None) - _EPOCH
        return delta.total_seconds() / 86400
    return float((value - _EPOCH.date()).days)


def from_serial(value: float) -> datetime.datetime:
    return _EPOCH + datetime.timedelta(days=float(value))


def try_parse_datetime(obj: Any) -> tuple[bool, datetime.datetime | None]:
    """
    Best effort conversion of a value read back from a sheet into a datetime.
    Numbers are taken as serial dates, strings as serial numbers or ISO format.
    Never raises, the first element says whether it worked.
    """
    if obj is None or isinstance(obj, bool):
        return False, None
    if isinstance(obj, datetime.datetime):
        return True, obj
    if isinstance(obj, datetime.date):
        return True, datetime.datetime.combine(obj, datetime.time())
    try:
        if isinstance(obj, (int, float)):
            return True, from_serial(obj)
        s = str(obj).strip()
        try:
            return True, from_serial(float(s))
        except ValueError:
            return True, datetime.datetime.fromisoformat(s)
    except (ValueError, TypeError, OverflowError):
        return False, None


def try_parse_float(obj: Any) -> tuple[bool, float | None]:
    """Best effort float conversion, never raises"""
    if obj is None:
        return False, None
    try:
        return True, float(obj)
    except (ValueError, TypeError, OverflowError):
        return False, None
