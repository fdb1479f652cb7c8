"""
Class implementations of sheets request resources.
As these are just logical groupings of data fields we use dataclasses
to implement.  Every optional field defaults to None and None never goes
out on the wire, so a resource only carries what the caller actually set.
Coming back the other way from_dict() builds the nested dataclasses from the
raw response and ignores keys we don't model.
Not all resources/fields are implemented, only what the client needs.
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..resources import GoogleWorkSpaceResourceBase


def _as(cls, value):
    return value if value is None or isinstance(value, cls) else cls.from_dict(value)


def _as_list(cls, values) -> list:
    return [_as(cls, v) for v in (values or [])]


class GoogleSheetsEnum():
    """
    An 'enum' in the sheets client is just a string so this is
    just to translate and validate input.
    """
    _VALID_VALUE_RENDER_OPTIONS = {
        "FORMATTED": "FORMATTED_VALUE",
        "FORMATTED_VALUE": "FORMATTED_VALUE",
        "UNFORMATTED": "UNFORMATTED_VALUE",
        "UNFORMATTED_VALUE": "UNFORMATTED_VALUE",
        "FORMULA": "FORMULA"
    }
    _VALID_DATE_TIME_RENDER_OPTIONS = {
        "SERIAL": "SERIAL_NUMBER",
        "SERIAL_NUMBER": "SERIAL_NUMBER",
        "FORMATTED": "FORMATTED_STRING",
        "FORMATTED_STRING": "FORMATTED_STRING"
    }
    _VALID_DIMENSION_OPTIONS = {
        "ROWS": "ROWS",
        "R": "ROWS",
        "C": "COLUMNS",
        "COLS": "COLUMNS",
        "COLUMNS": "COLUMNS"
    }
    _VALID_VALUE_INPUT_OPTIONS = {
        "RAW": "RAW",
        "USER": "USER_ENTERED",
        "USER_ENTERED": "USER_ENTERED"
    }

    @classmethod
    def valueRenderOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueRenderOption"""
        return cls._VALID_VALUE_RENDER_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def dateTimeRenderOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/DateTimeRenderOption"""
        return cls._VALID_DATE_TIME_RENDER_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def dimension(cls, dim: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/Dimension"""
        return cls._VALID_DIMENSION_OPTIONS.get(str(dim).upper(), "")

    @classmethod
    def valueInputOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueInputOption"""
        return cls._VALID_VALUE_INPUT_OPTIONS.get(str(option).upper(), "")


@dataclass
class Color(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#color
    Components are 0-1 floats.  Sheets leaves out components at their default
    when sending a color back, so a missing alpha means 1 and a missing
    red/green/blue means 0, which is exactly what the field defaults give
    from_dict().  Going out all four are always populated.
    """
    red: float = field(default=0.0)
    green: float = field(default=0.0)
    blue: float = field(default=0.0)
    alpha: float = field(default=1.0)

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int, alpha: int = 255) -> "Color":
        """From the usual 0-255 byte components"""
        return cls(red / 255, green / 255, blue / 255, alpha / 255)

    def same_as(self, other: "Color | dict") -> bool:
        o = _as(Color, other)
        return (self.red, self.green, self.blue, self.alpha) == (o.red, o.green, o.blue, o.alpha)


@dataclass
class NumberFormat(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#numberformat
    """
    type: str | None = field(default=None)
    pattern: str | None = field(default=None)

    valid_values: ClassVar[list[str]] = ['TEXT', 'NUMBER', 'PERCENT',
                                         'CURRENCY', 'DATE', 'TIME',
                                         'DATE_TIME', 'SCIENTIFIC']

    def __post_init__(self):
        self.fixup()

    def fixup(self) -> None:
        if self.type:
            t = str(self.type).upper()
            if t not in self.valid_values:
                raise ValueError('Invalid number format type: ' + t)
            self.type = t


@dataclass
class TextFormat(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#textformat"""
    foregroundColor: Color | dict | None = field(default=None)
    fontFamily: str | None = field(default=None)
    fontSize: int | None = field(default=None)
    bold: bool | None = field(default=None)
    italic: bool | None = field(default=None)
    strikethrough: bool | None = field(default=None)
    underline: bool | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.foregroundColor = _as(Color, self.foregroundColor)


@dataclass
class CellFormat(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#cellformat"""
    numberFormat: NumberFormat | dict | None = field(default=None)
    backgroundColor: Color | dict | None = field(default=None)
    horizontalAlignment: str | None = field(default=None)
    verticalAlignment: str | None = field(default=None)
    wrapStrategy: str | None = field(default=None)
    textFormat: TextFormat | dict | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.numberFormat = _as(NumberFormat, self.numberFormat)
        self.backgroundColor = _as(Color, self.backgroundColor)
        self.textFormat = _as(TextFormat, self.textFormat)


@dataclass
class ExtendedValue(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#extendedvalue
    Only one of the values should ever be set.
    """
    numberValue: float | None = field(default=None)
    stringValue: str | None = field(default=None)
    boolValue: bool | None = field(default=None)
    formulaValue: str | None = field(default=None)
    errorValue: dict | None = field(default=None)

    @property
    def value(self) -> Any:
        for v in (self.stringValue, self.formulaValue, self.numberValue, self.boolValue):
            if v is not None:
                return v
        return None


@dataclass
class CellData(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#celldata"""
    userEnteredValue: ExtendedValue | dict | None = field(default=None)
    effectiveValue: ExtendedValue | dict | None = field(default=None)
    formattedValue: str | None = field(default=None)
    userEnteredFormat: CellFormat | dict | None = field(default=None)
    effectiveFormat: CellFormat | dict | None = field(default=None)
    hyperlink: str | None = field(default=None)
    note: str | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.userEnteredValue = _as(ExtendedValue, self.userEnteredValue)
        self.effectiveValue = _as(ExtendedValue, self.effectiveValue)
        self.userEnteredFormat = _as(CellFormat, self.userEnteredFormat)
        self.effectiveFormat = _as(CellFormat, self.effectiveFormat)

    def format(self) -> CellFormat:
        """userEnteredFormat, created on demand"""
        if self.userEnteredFormat is None:
            self.userEnteredFormat = CellFormat()
        return self.userEnteredFormat

    def text_format(self) -> TextFormat:
        """userEnteredFormat.textFormat, created on demand"""
        f = self.format()
        if f.textFormat is None:
            f.textFormat = TextFormat()
        return f.textFormat


@dataclass
class RowData(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#rowdata"""
    values: list[CellData | dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.values = _as_list(CellData, self.values)


@dataclass
class GridRange(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#gridrange
    Indexes are zero-based and half open, missing means unbounded.
    """
    sheetId: int | None = field(default=None)
    startRowIndex: int | None = field(default=None)
    endRowIndex: int | None = field(default=None)
    startColumnIndex: int | None = field(default=None)
    endColumnIndex: int | None = field(default=None)


@dataclass
class GridCoordinate(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#gridcoordinate"""
    sheetId: int | None = field(default=None)
    rowIndex: int | None = field(default=None)
    columnIndex: int | None = field(default=None)


@dataclass
class DimensionRange(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/DimensionRange"""
    sheetId: int | None = field(default=None)
    dimension: str | None = field(default=None)
    startIndex: int | None = field(default=None)
    endIndex: int | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if self.dimension:
            d = str(self.dimension)
            self.dimension = GoogleSheetsEnum.dimension(d)
            if not self.dimension:
                raise ValueError(f"Invalid dimension value: {d}")


@dataclass
class DimensionProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#dimensionproperties"""
    hiddenByFilter: bool | None = field(default=None)
    hiddenByUser: bool | None = field(default=None)
    pixelSize: int | None = field(default=None)


@dataclass
class GridData(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#griddata"""
    startRow: int | None = field(default=None)
    startColumn: int | None = field(default=None)
    rowData: list[RowData | dict] = field(default_factory=list)
    rowMetadata: list[DimensionProperties | dict] = field(default_factory=list)
    columnMetadata: list[DimensionProperties | dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.rowData = _as_list(RowData, self.rowData)
        self.rowMetadata = _as_list(DimensionProperties, self.rowMetadata)
        self.columnMetadata = _as_list(DimensionProperties, self.columnMetadata)


@dataclass
class GridProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#gridproperties"""
    rowCount: int | None = field(default=None)
    columnCount: int | None = field(default=None)
    frozenRowCount: int | None = field(default=None)
    frozenColumnCount: int | None = field(default=None)


@dataclass
class SheetProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheetproperties"""
    sheetId: int | None = field(default=None)
    title: str | None = field(default=None)
    index: int | None = field(default=None)
    sheetType: str | None = field(default=None)
    gridProperties: GridProperties | dict | None = field(default=None)
    hidden: bool | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.gridProperties = _as(GridProperties, self.gridProperties)

    def __str__(self) -> str:
        return f"{self.title}({self.sheetId}[{self.index}])"


@dataclass
class Sheet(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheet
    Representation of a sheet within a spreadsheet
    """
    properties: SheetProperties | dict = field(default_factory=SheetProperties)
    data: list[GridData | dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.properties = _as(SheetProperties, self.properties) or SheetProperties()
        self.data = _as_list(GridData, self.data)

    @property
    def title(self) -> str | None:
        return self.properties.title

    @property
    def sheet_id(self) -> int | None:
        return self.properties.sheetId

    def __str__(self) -> str:
        return str(self.properties)


@dataclass
class SpreadsheetProperties(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets#SpreadsheetProperties
    """
    title: str | None = field(default=None)
    locale: str | None = field(default=None)
    timeZone: str | None = field(default=None)


@dataclass
class Spreadsheet(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets#resource:-spreadsheet
    The representation of a spreadsheet.
    """
    spreadsheetId: str | None = field(default=None)
    properties: SpreadsheetProperties | dict = field(default_factory=SpreadsheetProperties)
    sheets: list[Sheet | dict] = field(default_factory=list)
    spreadsheetUrl: str | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.properties = _as(SpreadsheetProperties, self.properties) or SpreadsheetProperties()
        self.sheets = _as_list(Sheet, self.sheets)

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

    @property
    def title(self) -> str | None:
        return self.properties.title

    def __str__(self) -> str:
        if not self.spreadsheetId:
            return 'unconnected'
        return f"{self.title}[{','.join(str(s) for s in self.sheets)}]"


@dataclass
class ConditionValue(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#conditionvalue"""
    userEnteredValue: str | None = field(default=None)
    relativeDate: str | None = field(default=None)


@dataclass
class BooleanCondition(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#booleancondition"""
    type: str | None = field(default=None)
    values: list[ConditionValue | dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.values = _as_list(ConditionValue, self.values)


@dataclass
class DataValidationRule(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/cells#datavalidationrule"""
    condition: BooleanCondition | dict | None = field(default=None)
    inputMessage: str | None = field(default=None)
    strict: bool | None = field(default=None)
    showCustomUi: bool | None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.condition = _as(BooleanCondition, self.condition)
