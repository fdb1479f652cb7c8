from collections.abc import Awaitable, Callable, Iterable
import datetime
import logging
from typing import Any, Self

from ..access import GoogleAccess
from ..config import SheetsHelperConfig
from ..errors import InvalidArgumentError, NotBoundError, SheetNotFoundError, UnexpectedResponseError
from .a1 import A1Notation
from .cache import SheetIdentity, SpreadsheetStateCache
from .cells import Cell, CellKind, Row
from .requests import *
from .resources import CellData, GridRange, RowData, Spreadsheet, SpreadsheetProperties
from .retry import RateLimitTracker, RetryingInvoker, default_tracker
from .rows import AppendRequest, UpdateRequest
from .service import GoogleSheetsService, SpreadsheetService

logger = logging.getLogger(__name__)


_STRUCTURAL_REQUESTS = {'addSheet', 'deleteSheet', 'duplicateSheet',
                        'updateSheetProperties', 'updateSpreadsheetProperties'}


def _is_structural(request: GoogleSheetsUpdateRequestBase | dict) -> bool:
    """Whether a request changes the sheets or titles the client caches"""
    wire = request.to_request() if isinstance(request, GoogleSheetsUpdateRequestBase) else request
    return bool(_STRUCTURAL_REQUESTS.intersection(wire))


def _literal(cell: Cell | None) -> Any:
    """
    The plain value of a cell for the values API.  These are sent as
    USER_ENTERED so dates go as text Sheets will recognise as a date.
    """
    if cell is None:
        return ""
    kind = cell.kind
    if kind is CellKind.EMPTY:
        return ""
    if kind in (CellKind.TEXT, CellKind.FORMULA):
        return str(cell.value)
    if kind is CellKind.DATE:
        if isinstance(cell.value, datetime.datetime):
            return cell.value.strftime("%Y-%m-%d %H:%M:%S")
        return cell.value.isoformat()
    return cell.value


class SheetsClient():
    """
    High level operations on one spreadsheet.
    A client starts unbound; create_spreadsheet() or load_spreadsheet()
    (or passing spreadsheet_id) binds it, everything else needs a bound client.
    Sheets are addressed by title, the ids are looked up in a cached copy of
    the spreadsheet's structure which is refreshed from the response of every
    call that changes that structure.
    Not safe for concurrent use, await one call before making the next.
    """
    def __init__(self, service: SpreadsheetService,
                 spreadsheet_id: str | None = None,
                 invoker: RetryingInvoker | None = None) -> None:
        self._service = service
        self._invoker = invoker if invoker is not None else RetryingInvoker()
        self._spreadsheet_id = spreadsheet_id or None
        self._cache = SpreadsheetStateCache(self._fetch_spreadsheet)

    @classmethod
    def from_config(cls, config: SheetsHelperConfig | dict | None = None,
                    spreadsheet_id: str | None = None,
                    tracker: RateLimitTracker | None = None) -> Self:
        """
        Client talking to Google with the credentials described by config.
        Clients share the process wide quota tracker unless given their own.
        """
        if not isinstance(config, SheetsHelperConfig):
            config = SheetsHelperConfig.from_dict(config or {})
        if tracker is None:
            tracker = default_tracker(config.quota_window_seconds)
        invoker = RetryingInvoker(tracker, config.max_retries)
        service = GoogleSheetsService(access=GoogleAccess(config))
        return cls(service, spreadsheet_id, invoker)

    def __bool__(self) -> bool:
        return self.bound

    def __str__(self) -> str:
        snapshot = self._cache.snapshot
        if snapshot is not None:
            return str(snapshot)
        return self._spreadsheet_id or 'unconnected'

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    @property
    def bound(self) -> bool:
        return self._spreadsheet_id is not None

    @property
    def spreadsheet_id(self) -> str | None:
        return self._spreadsheet_id

    @property
    def spreadsheet(self) -> Spreadsheet | None:
        """The cached spreadsheet structure, None until something loads it"""
        return self._cache.snapshot

    @property
    def cache(self) -> SpreadsheetStateCache:
        return self._cache

    def _require_bound(self, operation: str) -> str:
        if self._spreadsheet_id is None:
            raise NotBoundError(operation)
        return self._spreadsheet_id

    async def _call(self, call: Callable[[], Awaitable[dict]]) -> dict:
        return await self._invoker.invoke(call)

    async def _fetch_spreadsheet(self) -> Spreadsheet:
        sid = self._require_bound("load")
        response = await self._call(lambda: self._service.get(sid))
        return Spreadsheet.from_dict(response)

    async def _batch_update(self, requests: list,
                            include_spreadsheet: bool = True,
                            response_ranges: Iterable[str] = (),
                            include_grid_data: bool = False) -> dict:
        sid = self._require_bound("batch_update")
        body = BatchUpdateRequest(list(requests), include_spreadsheet,
                                  list(response_ranges), include_grid_data).to_base()
        response = await self._call(lambda: self._service.batch_update(sid, body))
        # with responseRanges the spreadsheet only carries the sheets those ranges touch,
        # it is not a snapshot of the whole document
        if include_spreadsheet and not body.get('responseRanges'):
            updated = response.get('updatedSpreadsheet')
            if updated:
                self._cache.replace_with(Spreadsheet.from_dict(updated))
        return response

    async def _resolve(self, title: str) -> SheetIdentity:
        self._require_bound("resolve")
        identity = await self._cache.resolve(title)
        if identity is None:
            raise SheetNotFoundError(title)
        return identity

    # spreadsheet

    async def create_spreadsheet(self, title: str) -> Spreadsheet:
        body = {'properties': SpreadsheetProperties(title=title).to_base()}
        response = await self._call(lambda: self._service.create(body))
        spreadsheet = Spreadsheet.from_dict(response)
        if not spreadsheet:
            raise UnexpectedResponseError("create returned no spreadsheetId")
        self._spreadsheet_id = spreadsheet.spreadsheetId
        self._cache.replace_with(spreadsheet)
        logger.info("created spreadsheet '%s' (%s)", title, self._spreadsheet_id)
        return spreadsheet

    async def load_spreadsheet(self, spreadsheet_id: str) -> Spreadsheet:
        """Bind to an existing spreadsheet, the previous binding stays if it can't be loaded"""
        previous = self._spreadsheet_id
        self._spreadsheet_id = spreadsheet_id
        self._cache.invalidate()
        try:
            return await self._cache.load()
        except BaseException:
            self._spreadsheet_id = previous
            raise

    async def rename_spreadsheet(self, title: str) -> None:
        self._require_bound("rename_spreadsheet")
        await self._batch_update([rename_spreadsheet(title)])

    async def execute_requests(self, requests: Iterable[GoogleSheetsUpdateRequestBase | dict]) -> dict:
        """Send already built requests as one batchUpdate"""
        self._require_bound("execute_requests")
        return await self._batch_update(list(requests))

    def requests(self) -> "BatchUpdateChain":
        """
        Start a chain of requests to send as one batchUpdate:
        await client.requests().format_row(...).resize_column(...).execute()
        """
        self._require_bound("requests")
        return BatchUpdateChain(self)

    # sheets

    async def get_sheet_names(self, refresh: bool = False) -> list[str]:
        self._require_bound("get_sheet_names")
        if refresh:
            self._cache.invalidate()
        await self._cache.load()
        return self._cache.titles

    async def get_sheet(self, title: str) -> SheetIdentity | None:
        self._require_bound("get_sheet")
        return await self._cache.resolve(title)

    async def add_sheet(self, title: str, column_count: int | None = None,
                        row_count: int | None = None) -> SheetIdentity:
        """
        Add a sheet.  Titles are not checked for duplicates, Google itself
        rejects an exact duplicate but a case variant goes through and
        title lookups then find whichever sheet comes first.
        """
        self._require_bound("add_sheet")
        response = await self._batch_update([add_sheet(title, column_count, row_count)])
        replies = response.get('replies') or [{}]
        props = (replies[0] or {}).get('addSheet', {}).get('properties', {})
        if props.get('sheetId') is not None:
            identity = SheetIdentity(props.get('title', title), props['sheetId'])
        else:
            identity = self._cache.lookup(title)
            if identity is None:
                raise UnexpectedResponseError(f"added sheet '{title}' missing from the response")
        logger.info("added sheet '%s' (%d)", identity.title, identity.sheet_id)
        return identity

    async def get_or_add_sheet(self, title: str, column_count: int | None = None,
                               row_count: int | None = None) -> SheetIdentity:
        # two callers racing here can both end up adding the sheet
        identity = await self.get_sheet(title)
        if identity is not None:
            return identity
        return await self.add_sheet(title, column_count, row_count)

    async def delete_sheet(self, title: str) -> Spreadsheet:
        identity = await self._resolve(title)
        await self._batch_update([delete_sheet(identity.sheet_id)])
        logger.info("deleted sheet '%s' (%d)", identity.title, identity.sheet_id)
        return self._cache.snapshot

    async def rename_sheet(self, old_title: str, new_title: str) -> SheetIdentity:
        identity = await self._resolve(old_title)
        await self._batch_update([rename_sheet(identity.sheet_id, new_title)])
        logger.info("renamed sheet '%s' to '%s'", identity.title, new_title)
        return SheetIdentity(new_title, identity.sheet_id)

    async def clear_sheet(self, title: str) -> None:
        """Clear both the values and the formatting of every cell of a sheet"""
        identity = await self._resolve(title)
        await self._batch_update([clear_formatting(identity.sheet_id)], include_spreadsheet=False)
        await self.clear_values(A1Notation.sheet_range(identity.title))

    async def clear_values(self, range: str) -> dict:
        """Clear values (not formatting) of a range, a bare sheet title means the whole sheet"""
        sid = self._require_bound("clear_values")
        return await self._call(lambda: self._service.values_clear(sid, range))

    # data

    async def get_values(self, range: str) -> list[list[Any]]:
        """
        Unformatted values of a range, dates as serial numbers.
        Google trims trailing empty cells and rows so rows can be ragged.
        """
        sid = self._require_bound("get_values")
        response = await self._call(lambda: self._service.values_get(sid, range))
        return response.get('values', [])

    async def get_row_data(self, ranges: str | Iterable[str]) -> list[RowData] | list[list[RowData]]:
        """
        Values and cell metadata of one range, or of several ranges in one call.
        A single range gives its rows, several give one list of rows per
        range in the order Google returns them (sheet order).
        """
        sid = self._require_bound("get_row_data")
        single = isinstance(ranges, str)
        range_list = [ranges] if single else [str(r) for r in ranges]
        response = await self._call(lambda: self._service.get(sid, range_list, True))
        spreadsheet = Spreadsheet.from_dict(response)
        blocks = [gd.rowData for s in spreadsheet.sheets for gd in s.data]
        if single:
            return blocks[0] if blocks else []
        return blocks

    async def append(self, requests: Iterable[AppendRequest]) -> None:
        """
        Append rows after the last row with data.  Each request is its own
        call and they run one at a time: where 'the end of the data' is
        depends on the previous append having landed.
        """
        self._require_bound("append")
        pending = []
        for r in requests:
            identity = await self._resolve(r.sheet_name)
            pending.append((identity, r))
        for identity, r in pending:
            await self._batch_update([append_cells(identity.sheet_id, r.rows)], include_spreadsheet=False)
            logger.debug("appended %d rows to '%s'", len(r.rows), identity.title)

    async def update(self, requests: Iterable[UpdateRequest]) -> None:
        """Write rows with their formatting at fixed positions, all in one batchUpdate"""
        self._require_bound("update")
        batch = []
        for r in requests:
            identity = await self._resolve(r.sheet_name)
            batch.append(update_cells(identity.sheet_id, r.column_start, r.row_start, r.rows))
        if batch:
            await self._batch_update(batch, include_spreadsheet=False)

    async def update_values(self, requests: Iterable[UpdateRequest]) -> None:
        """
        Write plain values only, no formatting.  Values are USER_ENTERED so
        Sheets parses them the same as typing them in (numbers, dates, formulas).
        """
        sid = self._require_bound("update_values")
        for r in requests:
            if not r.rows or not r.width:
                continue
            identity = await self._resolve(r.sheet_name)
            range = A1Notation.grid_range(r.column_start, r.row_start + 1,
                                          r.column_start + r.width - 1, r.row_start + len(r.rows),
                                          sheet=identity.title)
            values = [[_literal(c) for c in row] for row in r.rows]
            await self._call(lambda: self._service.values_update(sid, range, values))

    # columns

    async def auto_resize_column(self, sheet_name: str, column: int) -> int:
        """Resize a column to fit its longest value, returns the new width in pixels"""
        identity = await self._resolve(sheet_name)
        # ask for the first cell of the column back to get the new width
        response_range = A1Notation.cell(column, 1, identity.title)
        response = await self._batch_update([resize_column_to_fit(identity.sheet_id, column)],
                                            include_spreadsheet=True,
                                            response_ranges=[response_range],
                                            include_grid_data=True)
        updated = Spreadsheet.from_dict(response.get('updatedSpreadsheet') or {})
        candidates = [s for s in updated.sheets if s.sheet_id == identity.sheet_id and s.data]
        candidates += [s for s in updated.sheets if s.data and s not in candidates]
        for s in candidates:
            metadata = s.data[0].columnMetadata
            if metadata and metadata[0].pixelSize is not None:
                return metadata[0].pixelSize
        raise UnexpectedResponseError(f"no column metadata for column {column} of '{identity.title}' in response")


class BatchUpdateChain():
    """
    Utility class for building up a chain of update requests.
    The batchUpdate method takes a list of requests and it is more efficient
    to send a number of them at once rather than request/response/etc.
    Sheet titles are resolved when the chain is executed:
    response = await client.requests().request1(params).request2(params).execute()
    """
    def __init__(self, client: SheetsClient) -> None:
        self._client = client
        self._pending = []

    def __len__(self) -> int:
        return len(self._pending)

    def _add(self, sheet: str | None, build: Callable[[int | None], Any]) -> Self:
        self._pending.append((sheet, build))
        return self

    async def execute(self, includeSpreadsheetInResponse: bool = True) -> dict:
        """
        Terminate a request chain and send the actual batchUpdate.
        A chain that adds, deletes or renames always asks for the updated
        spreadsheet, the client's sheet titles are refreshed from it.
        """
        if not self._pending:
            return {}
        requests = []
        for sheet, build in self._pending:
            sheet_id = (await self._client._resolve(sheet)).sheet_id if sheet is not None else None
            requests.append(build(sheet_id))
        self._pending = []
        include = includeSpreadsheetInResponse or any(_is_structural(r) for r in requests)
        return await self._client._batch_update(requests, include_spreadsheet=include)

    def request(self, request: GoogleSheetsUpdateRequestBase | dict) -> Self:
        """Any prebuilt request"""
        return self._add(None, lambda _: request)

    def format_row(self, sheet: str, row_index: int, start_col: int, end_col: int,
                   cell_factory: Callable[[], CellData],
                   changed: Iterable[FormatField] = ()) -> Self:
        changed = list(changed)
        return self._add(sheet, lambda sid: row_formatting(sid, row_index, start_col, end_col,
                                                           cell_factory, changed))

    def repeat_formula(self, sheet: str, start_row: int, start_col: int, count: int, formula: str,
                       direction: RepeatDirection = RepeatDirection.VERTICAL) -> Self:
        return self._add(sheet, lambda sid: repeated_formula(sid, start_row, start_col, count,
                                                             formula, direction))

    def dropdown(self, source_sheet: str, first_cell: str, last_cell: str,
                 target_sheet: str, start_row: int, start_col: int, extent: int,
                 direction: RepeatDirection = RepeatDirection.VERTICAL) -> Self:
        # fail now rather than at execute()
        if extent < 1:
            raise InvalidArgumentError(f"extent must be >= 1, got {extent}")
        return self._add(target_sheet, lambda sid: data_validation_dropdown(
            source_sheet, first_cell, last_cell, sid, start_row, start_col, extent, direction))

    def update_rows(self, sheet: str, column: int, row: int, rows: Iterable[Row]) -> Self:
        rows = list(rows)
        return self._add(sheet, lambda sid: update_cells(sid, column, row, rows))

    def resize_column(self, sheet: str, column: int) -> Self:
        return self._add(sheet, lambda sid: resize_column_to_fit(sid, column))

    def clear_formatting(self, sheet: str, grid_range: GridRange | None = None) -> Self:
        return self._add(sheet, lambda sid: clear_formatting(sid, grid_range))

    def rename_sheet(self, sheet: str, new_title: str) -> Self:
        return self._add(sheet, lambda sid: rename_sheet(sid, new_title))
