import datetime

from . import DEFAULT_DATE_PATTERN
from .cells import Cell, CellKind, Row, to_serial
from .resources import CellData, Color, ExtendedValue, NumberFormat, RowData


def _entered_value(cell: Cell) -> ExtendedValue | None:
    kind = cell.kind
    if kind is CellKind.EMPTY:
        return None
    if kind is CellKind.FORMULA:
        return ExtendedValue(formulaValue=str(cell.value))
    if kind is CellKind.TEXT:
        return ExtendedValue(stringValue=cell.value)
    if kind is CellKind.BOOLEAN:
        return ExtendedValue(boolValue=cell.value)
    if kind is CellKind.NUMBER:
        return ExtendedValue(numberValue=cell.value)
    return ExtendedValue(numberValue=to_serial(cell.value))


def _copy_color(color: Color | dict) -> Color:
    c = Color.from_dict(color)
    return Color(c.red, c.green, c.blue, c.alpha)


def cell_data(cell: Cell | None) -> CellData:
    """
    Translate a Cell into the wire CellData.
    None is an empty CellData, no value and no formatting.
    Formatting attributes only show up when they were set on the cell, an
    unset attribute leaves the corresponding wire field out entirely.
    """
    data = CellData()
    if cell is None:
        return data
    data.userEnteredValue = _entered_value(cell)

    kind = cell.kind
    if kind is CellKind.DATE:
        # dates go out as serial numbers so without a pattern they'd just show the number
        pattern = cell.date_format or DEFAULT_DATE_PATTERN
        ftype = "DATE_TIME" if isinstance(cell.value, datetime.datetime) else "DATE"
        data.format().numberFormat = NumberFormat(ftype, pattern)
    elif kind is CellKind.NUMBER and cell.number_format:
        data.format().numberFormat = NumberFormat("NUMBER", cell.number_format)

    if cell.bold is not None:
        data.text_format().bold = bool(cell.bold)
    if cell.background_color is not None:
        data.format().backgroundColor = _copy_color(cell.background_color)
    if cell.foreground_color is not None:
        data.text_format().foregroundColor = _copy_color(cell.foreground_color)
    if cell.horizontal_alignment is not None:
        data.format().horizontalAlignment = cell.horizontal_alignment.value
    return data


def row_data(row: Row) -> RowData:
    return RowData([cell_data(c) for c in row])
