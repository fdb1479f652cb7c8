
from gsheetshelper.sheets.cells import CellKind
from gsheetshelper.sheets.header import HeaderRow
from gsheetshelper.sheets.resources import Color

def test_lookups():
    header = HeaderRow(["Date", "Amount", "Notes"])
    assert(len(header) == 3)
    assert("Amount" in header)
    assert(header.index_of("Notes") == 2)
    assert(header.column_of("Notes") == 'C')
    assert(header.index_of("Missing") == -1)
    assert(header.column_of("Missing") is None)

def test_create_row():
    def style(cell):
        cell.bold = True
        cell.background_color = Color(0.9, 0.9, 0.9)
    row = HeaderRow.create_row(["Date", "Amount"], style)
    assert([c.value for c in row] == ["Date", "Amount"])
    assert(all(c.kind == CellKind.TEXT and c.bold for c in row))
    assert(HeaderRow.create_row([]) == [])
