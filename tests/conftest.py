import copy

import pytest

from gsheetshelper.errors import QuotaExceededError
from gsheetshelper.sheets.client import SheetsClient
from gsheetshelper.sheets.retry import RateLimitTracker, RetryingInvoker
from gsheetshelper.sheets.service import SpreadsheetService


class FakeClock():
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeSleep():
    def __init__(self, clock: FakeClock | None = None) -> None:
        self.calls = []
        self.clock = clock

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.now += seconds


class FakeSheetsService(SpreadsheetService):
    """
    In memory stand in for the Sheets API.  Keeps just enough spreadsheet
    structure to answer get/batchUpdate and records every call made.
    Exceptions queued in fail_next are raised by the next calls, in order.
    """
    def __init__(self, spreadsheet_id: str = "ss1", titles: tuple[str, ...] = ("Sheet1",)) -> None:
        self.calls = []
        self.fail_next = []
        self.next_sheet_id = 100
        self.pixel_size = 123
        self.grid_rows = {}
        self.values = {}
        self.state = {
            'spreadsheetId': spreadsheet_id,
            'properties': {'title': 'Test', 'locale': 'en_US'},
            'sheets': [],
            'spreadsheetUrl': f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}",
        }
        for t in titles:
            self._add_sheet({'title': t})

    def _maybe_fail(self) -> None:
        if self.fail_next:
            raise self.fail_next.pop(0)

    def _add_sheet(self, props: dict) -> dict:
        props = dict(props)
        props.setdefault('sheetId', self.next_sheet_id)
        props['index'] = len(self.state['sheets'])
        self.next_sheet_id += 1
        self.state['sheets'].append({'properties': props})
        return props

    def names(self, kind: str) -> list[str]:
        return [c[0] for c in self.calls if c[0] == kind]

    async def get(self, spreadsheet_id, ranges=(), include_grid_data=False):
        self.calls.append(('get', spreadsheet_id, list(ranges), include_grid_data))
        self._maybe_fail()
        response = copy.deepcopy(self.state)
        if include_grid_data:
            sheets = []
            for r in ranges:
                title = r.split('!')[0].strip("'")
                sheets.append({'properties': {'title': title},
                               'data': [{'rowData': copy.deepcopy(self.grid_rows.get(r, []))}]})
            response['sheets'] = sheets
        return response

    async def create(self, body):
        self.calls.append(('create', body))
        self._maybe_fail()
        self.state['properties'] = dict(body['properties'])
        return copy.deepcopy(self.state)

    async def batch_update(self, spreadsheet_id, body):
        self.calls.append(('batch_update', spreadsheet_id, copy.deepcopy(body)))
        self._maybe_fail()
        replies = []
        resized = False
        for request in body['requests']:
            (kind, params), = request.items()
            if kind == 'addSheet':
                replies.append({'addSheet': {'properties': self._add_sheet(params['properties'])}})
                continue
            if kind == 'deleteSheet':
                self.state['sheets'] = [s for s in self.state['sheets']
                                        if s['properties']['sheetId'] != params['sheetId']]
            elif kind == 'updateSheetProperties':
                for s in self.state['sheets']:
                    if s['properties']['sheetId'] == params['properties']['sheetId']:
                        s['properties']['title'] = params['properties']['title']
            elif kind == 'updateSpreadsheetProperties':
                self.state['properties']['title'] = params['properties']['title']
            elif kind == 'autoResizeDimensions':
                resized = True
            replies.append({})
        response = {'spreadsheetId': spreadsheet_id, 'replies': replies}
        if body.get('includeSpreadsheetInResponse'):
            updated = copy.deepcopy(self.state)
            ranges = body.get('responseRanges')
            if ranges:
                # like Google, only the sheets the response ranges touch come back
                titles = {r.split('!')[0].strip("'") for r in ranges}
                updated['sheets'] = [s for s in updated['sheets'] if s['properties']['title'] in titles]
            if resized and body.get('responseIncludeGridData'):
                for s in updated['sheets']:
                    s['data'] = [{'columnMetadata': [{'pixelSize': self.pixel_size}]}]
            response['updatedSpreadsheet'] = updated
        return response

    async def values_get(self, spreadsheet_id, range, value_render="UNFORMATTED_VALUE",
                         date_time_render="SERIAL_NUMBER"):
        self.calls.append(('values_get', spreadsheet_id, range))
        self._maybe_fail()
        values = self.values.get(range)
        return {'range': range, 'values': values} if values is not None else {'range': range}

    async def values_update(self, spreadsheet_id, range, values, value_input="USER_ENTERED"):
        self.calls.append(('values_update', spreadsheet_id, range, values))
        self._maybe_fail()
        return {'updatedRange': range}

    async def values_clear(self, spreadsheet_id, range):
        self.calls.append(('values_clear', spreadsheet_id, range))
        self._maybe_fail()
        return {'clearedRange': range}


def quota_error() -> QuotaExceededError:
    return QuotaExceededError("quota", 429)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeper(clock):
    return FakeSleep(clock)


@pytest.fixture
def tracker(clock):
    return RateLimitTracker(100.0, clock=clock)


@pytest.fixture
def invoker(tracker, sleeper):
    return RetryingInvoker(tracker, max_retries=3, sleep=sleeper)


@pytest.fixture
def service():
    return FakeSheetsService(titles=("Sheet1", "Data"))


@pytest.fixture
def client(service, invoker):
    return SheetsClient(service, "ss1", invoker)
