"""
batchUpdate request resources and the functions that build them.
The builders are pure: parameters in, one request out, nothing is sent
and nothing is looked up.
https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request
"""
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
import re

from ..errors import InvalidArgumentError
from ..resources import GoogleWorkSpaceResourceBase
from .a1 import A1Notation
from .cells import Row
from .mapper import row_data
from .resources import *


class RepeatDirection(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class FormatField(Enum):
    """
    The CellFormat properties a formatting request can declare as changed.
    Values are the exact wire names, they end up in the field mask.
    """
    NUMBER_FORMAT = "numberFormat"
    BACKGROUND_COLOR = "backgroundColor"
    BACKGROUND_COLOR_STYLE = "backgroundColorStyle"
    BORDERS = "borders"
    PADDING = "padding"
    HORIZONTAL_ALIGNMENT = "horizontalAlignment"
    VERTICAL_ALIGNMENT = "verticalAlignment"
    WRAP_STRATEGY = "wrapStrategy"
    TEXT_DIRECTION = "textDirection"
    TEXT_FORMAT = "textFormat"
    HYPERLINK_DISPLAY_TYPE = "hyperlinkDisplayType"
    TEXT_ROTATION = "textRotation"


ALL_FIELDS = "*"
USER_ENTERED_VALUE = "userEnteredValue"
USER_ENTERED_FORMAT = "userEnteredFormat"


def format_fields_mask(changed: Iterable[FormatField] = ()) -> str:
    """
    Field mask for a userEnteredFormat write, e.g.
    userEnteredFormat(backgroundColor,textFormat)
    Order is kept.  Nothing declared means every field.
    """
    names = [FormatField(c).value for c in changed]
    if not names:
        return ALL_FIELDS
    return f"{USER_ENTERED_FORMAT}({','.join(names)})"


class GoogleSheetsUpdateRequestBase(GoogleWorkSpaceResourceBase):
    """
    Base class for sheet batchUpdate requests to get the actual
    request dict into the right format.
    """
    def to_request(self) -> dict[str, dict]:
        name = self.__class__.__name__
        # the wire key is the class name minus the trailing 'Request'
        # with the first letter lower cased
        m = re.match("^([a-zA-Z])([a-zA-Z]+)Request$", name)
        if not m:
            raise RuntimeError("Invalid Google Sheets request format for class name")
        return {m.group(1).lower() + m.group(2): self.to_base()}


@dataclass
class RepeatCellRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#repeatcellrequest"""
    range: GridRange
    cell: CellData
    fields: str


@dataclass
class SetDataValidationRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#setdatavalidationrequest"""
    range: GridRange
    rule: DataValidationRule


@dataclass
class AppendCellsRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#appendcellsrequest"""
    sheetId: int
    rows: list[RowData]
    fields: str = field(default=ALL_FIELDS)


@dataclass
class UpdateCellsRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatecellsrequest"""
    rows: list[RowData]
    fields: str = field(default=ALL_FIELDS)
    start: GridCoordinate | None = field(default=None)
    range: GridRange | None = field(default=None)


@dataclass
class AutoResizeDimensionsRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#autoresizedimensionsrequest"""
    dimensions: DimensionRange


@dataclass
class UpdateSheetPropertiesRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatesheetpropertiesrequest"""
    properties: SheetProperties
    fields: str


@dataclass
class UpdateSpreadsheetPropertiesRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatespreadsheetpropertiesrequest"""
    properties: SpreadsheetProperties
    fields: str


@dataclass
class AddSheetRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addsheetrequest"""
    properties: SheetProperties


@dataclass
class DeleteSheetRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletesheetrequest"""
    sheetId: int


@dataclass
class BatchUpdateRequest(GoogleWorkSpaceResourceBase):
    """
    The batchUpdate request body.
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate#request-body
    """
    requests: list[GoogleSheetsUpdateRequestBase | dict]
    includeSpreadsheetInResponse: bool = field(default=False)
    responseRanges: list[str] = field(default_factory=list)
    responseIncludeGridData: bool = field(default=False)

    def to_base(self) -> dict:
        b = {
            'requests': [r.to_request() if isinstance(r, GoogleSheetsUpdateRequestBase) else r
                         for r in self.requests],
            'includeSpreadsheetInResponse': self.includeSpreadsheetInResponse,
        }
        if self.responseRanges:
            b['responseRanges'] = list(self.responseRanges)
            b['responseIncludeGridData'] = self.responseIncludeGridData
        return b


def row_formatting(sheet_id: int, row_index: int, start_col: int, end_col: int,
                   cell_factory: Callable[[], CellData],
                   changed: Iterable[FormatField] = ()) -> RepeatCellRequest:
    """
    Format the cells of a single row from start_col to end_col inclusive.
    cell_factory supplies the CellData with the format set, changed names the
    CellFormat properties that were set so nothing else gets overwritten.
    """
    return RepeatCellRequest(
        range=GridRange(sheetId=sheet_id,
                        startRowIndex=row_index, endRowIndex=row_index + 1,
                        startColumnIndex=start_col, endColumnIndex=end_col + 1),
        cell=cell_factory(),
        fields=format_fields_mask(changed))


def _span(start_row: int, start_col: int, extent: int, direction: RepeatDirection) -> tuple[int, int]:
    """end row and end column (exclusive) of an extent grown in direction"""
    direction = RepeatDirection(direction)
    if direction is RepeatDirection.VERTICAL:
        return start_row + extent, start_col + 1
    return start_row + 1, start_col + extent


def repeated_formula(sheet_id: int, start_row: int, start_col: int, count: int, formula: str,
                     direction: RepeatDirection = RepeatDirection.VERTICAL) -> RepeatCellRequest:
    """
    Fill count cells down a column (or along a row) with the same formula,
    relative references shift per cell the way they would with a drag fill.
    """
    end_row, end_col = _span(start_row, start_col, count, direction)
    return RepeatCellRequest(
        range=GridRange(sheetId=sheet_id,
                        startRowIndex=start_row, endRowIndex=end_row,
                        startColumnIndex=start_col, endColumnIndex=end_col),
        cell=CellData(userEnteredValue=ExtendedValue(formulaValue=formula)),
        fields=USER_ENTERED_VALUE)


def data_validation_dropdown(source_sheet: str, first_cell: str, last_cell: str,
                             target_sheet_id: int, start_row: int, start_col: int, extent: int,
                             direction: RepeatDirection = RepeatDirection.VERTICAL) -> SetDataValidationRequest:
    """
    Drop-down menu restricting the target cells to one of the values
    found in source_sheet!first_cell:last_cell.
    extent is how many rows (VERTICAL) or columns (HORIZONTAL) get the rule.
    """
    if extent < 1:
        raise InvalidArgumentError(f"extent must be >= 1, got {extent}")
    end_row, end_col = _span(start_row, start_col, extent, direction)
    source = A1Notation.range(first_cell, last_cell, source_sheet)
    return SetDataValidationRequest(
        range=GridRange(sheetId=target_sheet_id,
                        startRowIndex=start_row, endRowIndex=end_row,
                        startColumnIndex=start_col, endColumnIndex=end_col),
        rule=DataValidationRule(
            condition=BooleanCondition(type="ONE_OF_RANGE",
                                       values=[ConditionValue(userEnteredValue=f"={source}")]),
            strict=True,
            showCustomUi=True))


def append_cells(sheet_id: int, rows: Iterable[Row]) -> AppendCellsRequest:
    """Rows go after the last row with data, every field of every cell is written"""
    return AppendCellsRequest(sheetId=sheet_id, rows=[row_data(r) for r in rows], fields=ALL_FIELDS)


def update_cells(sheet_id: int, column: int, row: int, rows: Iterable[Row]) -> UpdateCellsRequest:
    """Rows written starting at the zero-based (column, row) anchor"""
    return UpdateCellsRequest(rows=[row_data(r) for r in rows], fields=ALL_FIELDS,
                              start=GridCoordinate(sheetId=sheet_id, rowIndex=row, columnIndex=column))


def resize_column_to_fit(sheet_id: int, column: int) -> AutoResizeDimensionsRequest:
    return AutoResizeDimensionsRequest(
        DimensionRange(sheetId=sheet_id, dimension="COLUMNS", startIndex=column, endIndex=column + 1))


def rename_sheet(sheet_id: int, title: str) -> UpdateSheetPropertiesRequest:
    return UpdateSheetPropertiesRequest(SheetProperties(sheetId=sheet_id, title=title), fields="title")


def rename_spreadsheet(title: str) -> UpdateSpreadsheetPropertiesRequest:
    return UpdateSpreadsheetPropertiesRequest(SpreadsheetProperties(title=title), fields="title")


def clear_formatting(sheet_id: int, grid_range: GridRange | None = None) -> RepeatCellRequest:
    """
    Reset the format of every cell of the sheet, or just grid_range.
    Values are left alone, the mask only covers userEnteredFormat.
    """
    if grid_range is None:
        r = GridRange(sheetId=sheet_id)
    else:
        # a copy, the caller may use the same range for several sheets
        r = replace(grid_range, sheetId=grid_range.sheetId if grid_range.sheetId is not None else sheet_id)
    return RepeatCellRequest(range=r, cell=CellData(), fields=USER_ENTERED_FORMAT)


def add_sheet(title: str, column_count: int | None = None, row_count: int | None = None) -> AddSheetRequest:
    grid = None
    if column_count is not None or row_count is not None:
        grid = GridProperties(rowCount=row_count, columnCount=column_count)
    return AddSheetRequest(SheetProperties(title=title, gridProperties=grid))


def delete_sheet(sheet_id: int) -> DeleteSheetRequest:
    return DeleteSheetRequest(sheetId=sheet_id)
