
import datetime

import pytest

from gsheetshelper.errors import *
from gsheetshelper.sheets.cache import SheetIdentity
from gsheetshelper.sheets.cells import Cell, Formula
from gsheetshelper.sheets.client import SheetsClient
from gsheetshelper.sheets.requests import FormatField, delete_sheet
from gsheetshelper.sheets.resources import CellData, CellFormat, Color
from gsheetshelper.sheets.rows import AppendRequest, UpdateRequest

from conftest import FakeSheetsService, quota_error

def batches(service):
    return [c[2] for c in service.calls if c[0] == 'batch_update']

@pytest.mark.asyncio
async def test_unbound(service, invoker):
    client = SheetsClient(service, invoker=invoker)
    assert(not client)
    with pytest.raises(NotBoundError) as e:
        await client.get_sheet_names()
    assert(e.value.operation == "get_sheet_names")
    with pytest.raises(NotBoundError):
        await client.append([AppendRequest("Data", [[Cell(1)]])])
    with pytest.raises(NotBoundError):
        client.requests()
    assert(service.calls == [])

@pytest.mark.asyncio
async def test_create_spreadsheet(invoker):
    service = FakeSheetsService("new1")
    client = SheetsClient(service, invoker=invoker)
    spreadsheet = await client.create_spreadsheet("Budget")
    assert(client.spreadsheet_id == "new1")
    assert(spreadsheet.title == "Budget")
    assert(service.calls[0] == ('create', {'properties': {'title': "Budget"}}))
    # structure came with the create response
    assert(await client.get_sheet_names() == ["Sheet1"])
    assert(service.names('get') == [])

@pytest.mark.asyncio
async def test_load_spreadsheet(service, invoker):
    client = SheetsClient(service, invoker=invoker)
    spreadsheet = await client.load_spreadsheet("ss1")
    assert(client.bound)
    assert(spreadsheet.spreadsheetId == "ss1")
    assert([s.title for s in spreadsheet.sheets] == ["Sheet1", "Data"])

@pytest.mark.asyncio
async def test_failed_load_keeps_binding(client, service):
    service.fail_next = [TransportError("not found", 404)]
    with pytest.raises(TransportError):
        await client.load_spreadsheet("missing")
    assert(client.spreadsheet_id == "ss1")

    unbound = SheetsClient(service, invoker=client._invoker)
    service.fail_next = [TransportError("not found", 404)]
    with pytest.raises(TransportError):
        await unbound.load_spreadsheet("missing")
    assert(not unbound.bound)

@pytest.mark.asyncio
async def test_sheet_names_cached(client, service):
    assert(await client.get_sheet_names() == ["Sheet1", "Data"])
    assert(await client.get_sheet_names() == ["Sheet1", "Data"])
    assert(len(service.names('get')) == 1)
    await client.get_sheet_names(refresh=True)
    assert(len(service.names('get')) == 2)

@pytest.mark.asyncio
async def test_add_sheet_updates_cache(client, service):
    await client.get_sheet_names()
    identity = await client.add_sheet("Foo")
    assert(identity == SheetIdentity("Foo", 102))
    assert(await client.get_sheet("foo") == identity)
    # one get for the initial load, none after the add
    assert(len(service.names('get')) == 1)
    body = batches(service)[0]
    assert(body['requests'] == [{'addSheet': {'properties': {'title': "Foo"}}}])
    assert(body['includeSpreadsheetInResponse'] is True)

@pytest.mark.asyncio
async def test_get_or_add_sheet(client, service):
    assert(await client.get_or_add_sheet("data") == SheetIdentity("Data", 101))
    assert(batches(service) == [])
    identity = await client.get_or_add_sheet("Extra")
    assert(identity.title == "Extra")
    assert(len(batches(service)) == 1)

@pytest.mark.asyncio
async def test_delete_unknown_sheet(client, service):
    with pytest.raises(SheetNotFoundError) as e:
        await client.delete_sheet("nope")
    assert(e.value.title == "nope")
    assert(batches(service) == [])

@pytest.mark.asyncio
async def test_delete_sheet(client, service):
    spreadsheet = await client.delete_sheet("DATA")
    assert([s.title for s in spreadsheet.sheets] == ["Sheet1"])
    assert(batches(service)[0]['requests'] == [{'deleteSheet': {'sheetId': 101}}])
    assert(await client.get_sheet("Data") is None)

@pytest.mark.asyncio
async def test_rename_sheet(client, service):
    identity = await client.rename_sheet("Data", "Numbers")
    assert(identity == SheetIdentity("Numbers", 101))
    assert(await client.get_sheet_names() == ["Sheet1", "Numbers"])
    with pytest.raises(SheetNotFoundError):
        await client.rename_sheet("Data", "Again")

@pytest.mark.asyncio
async def test_rename_spreadsheet(client, service):
    await client.rename_spreadsheet("Renamed")
    assert(client.spreadsheet.title == "Renamed")

@pytest.mark.asyncio
async def test_sheet_renamed_elsewhere_is_found(client, service):
    await client.get_sheet_names()
    service.state['sheets'][1]['properties']['title'] = "Moved"
    assert(await client.get_sheet("moved") == SheetIdentity("Moved", 101))
    assert(len(service.names('get')) == 2)

@pytest.mark.asyncio
async def test_append_is_sequential(client, service):
    await client.append([
        AppendRequest("Data", [[Cell("a"), Cell(1)]]),
        AppendRequest("Sheet1", [[Cell(True)], [None, Cell(Formula("=A1"))]]),
    ])
    bodies = batches(service)
    assert(len(bodies) == 2)
    first = bodies[0]['requests'][0]['appendCells']
    assert(first['sheetId'] == 101)
    assert(first['fields'] == "*")
    second = bodies[1]['requests'][0]['appendCells']
    assert(second['sheetId'] == 100)
    assert(second['rows'][1] == {'values': [{}, {'userEnteredValue': {'formulaValue': "=A1"}}]})

@pytest.mark.asyncio
async def test_append_unknown_sheet_sends_nothing(client, service):
    with pytest.raises(SheetNotFoundError):
        await client.append([AppendRequest("Data", [[Cell(1)]]), AppendRequest("Nope", [[Cell(2)]])])
    assert(batches(service) == [])

@pytest.mark.asyncio
async def test_update_is_one_batch(client, service):
    await client.update([
        UpdateRequest("Data", 1, 2, [[Cell("x")]]),
        UpdateRequest("Sheet1", 0, 0, [[Cell(2)]]),
    ])
    bodies = batches(service)
    assert(len(bodies) == 1)
    requests = bodies[0]['requests']
    assert(requests[0]['updateCells']['start'] == {'sheetId': 101, 'rowIndex': 2, 'columnIndex': 1})
    assert(requests[1]['updateCells']['start'] == {'sheetId': 100, 'rowIndex': 0, 'columnIndex': 0})
    await client.update([])
    assert(len(batches(service)) == 1)

@pytest.mark.asyncio
async def test_update_values(client, service):
    await client.update_values([UpdateRequest("Data", 1, 4, [
        [Cell("a"), Cell(2), Cell(True)],
        [Cell(datetime.date(2024, 1, 2)), None],
    ])])
    (call,) = [c for c in service.calls if c[0] == 'values_update']
    assert(call[2] == "'Data'!B5:D6")
    assert(call[3] == [["a", 2, True], ["2024-01-02", ""]])

@pytest.mark.asyncio
async def test_get_values(client, service):
    service.values["'Data'!A1:B2"] = [[1, 2], [3]]
    assert(await client.get_values("'Data'!A1:B2") == [[1, 2], [3]])
    assert(await client.get_values("'Data'!Z1") == [])

@pytest.mark.asyncio
async def test_get_row_data(client, service):
    service.grid_rows["'Data'!A1:A2"] = [{'values': [{'formattedValue': "x"}]}]
    service.grid_rows["'Sheet1'!A1"] = [{'values': [{'formattedValue': "y"}]}]
    rows = await client.get_row_data("'Data'!A1:A2")
    assert(rows[0].values[0].formattedValue == "x")
    blocks = await client.get_row_data(["'Data'!A1:A2", "'Sheet1'!A1"])
    assert(len(blocks) == 2)
    assert(blocks[1][0].values[0].formattedValue == "y")
    assert(service.calls[-1] == ('get', "ss1", ["'Data'!A1:A2", "'Sheet1'!A1"], True))

@pytest.mark.asyncio
async def test_auto_resize_column(client, service):
    service.pixel_size = 211
    assert(await client.auto_resize_column("data", 2) == 211)
    body = batches(service)[0]
    assert(body['responseRanges'] == ["'Data'!C1"])
    assert(body['responseIncludeGridData'] is True)
    assert(body['requests'][0]['autoResizeDimensions']['dimensions'] ==
           {'sheetId': 101, 'dimension': "COLUMNS", 'startIndex': 2, 'endIndex': 3})

@pytest.mark.asyncio
async def test_auto_resize_keeps_sheet_list(client, service):
    assert(await client.get_sheet_names() == ["Sheet1", "Data"])
    assert(await client.auto_resize_column("Data", 0) == 123)
    # the response only describes 'Data', the cached sheet list must survive it
    assert(await client.get_sheet_names() == ["Sheet1", "Data"])
    assert(await client.get_sheet("sheet1") == SheetIdentity("Sheet1", 100))
    assert(len(service.names('get')) == 1)

@pytest.mark.asyncio
async def test_auto_resize_without_metadata(client, service):
    async def no_grid(spreadsheet_id, body):
        return {'spreadsheetId': spreadsheet_id, 'updatedSpreadsheet': {'spreadsheetId': spreadsheet_id}}
    await client.get_sheet_names()
    service.batch_update = no_grid
    with pytest.raises(UnexpectedResponseError):
        await client.auto_resize_column("Data", 0)

@pytest.mark.asyncio
async def test_clear_sheet(client, service):
    await client.clear_sheet("data")
    body = batches(service)[0]
    assert(body['requests'] == [{'repeatCell': {'range': {'sheetId': 101}, 'cell': {},
                                                'fields': "userEnteredFormat"}}])
    assert(service.calls[-1] == ('values_clear', "ss1", "'Data'"))

@pytest.mark.asyncio
async def test_quota_retried_through_client(client, service, sleeper):
    service.fail_next = [quota_error()]
    assert(await client.get_sheet_names() == ["Sheet1", "Data"])
    assert(len(service.names('get')) == 2)
    assert(len(sleeper.calls) == 1)

@pytest.mark.asyncio
async def test_transport_error_not_retried(client, service, sleeper):
    service.fail_next = [TransportError("denied", 403)]
    with pytest.raises(TransportError):
        await client.get_sheet_names()
    assert(sleeper.calls == [])

@pytest.mark.asyncio
async def test_request_chain(client, service):
    def header():
        return CellData(userEnteredFormat=CellFormat(backgroundColor=Color(0.5, 0.5, 0.5)))
    chain = (client.requests()
             .format_row("Data", 0, 0, 3, header, [FormatField.BACKGROUND_COLOR])
             .repeat_formula("Data", 1, 4, 10, "=A2+B2")
             .dropdown("Sheet1", "A1", "A5", "data", 1, 2, 10)
             .resize_column("Sheet1", 0)
             .request(delete_sheet(555)))
    assert(len(chain) == 5)
    await chain.execute()
    (body,) = batches(service)
    keys = [list(r)[0] for r in body['requests']]
    assert(keys == ['repeatCell', 'repeatCell', 'setDataValidation', 'autoResizeDimensions', 'deleteSheet'])
    assert(body['requests'][0]['repeatCell']['fields'] == "userEnteredFormat(backgroundColor)")
    assert(body['requests'][2]['setDataValidation']['range']['sheetId'] == 101)
    assert(await client.requests().execute() == {})

def test_chain_checks_extent(client):
    with pytest.raises(InvalidArgumentError):
        client.requests().dropdown("Sheet1", "A1", "A5", "Data", 1, 2, 0)

@pytest.mark.asyncio
async def test_chain_rename_refreshes_titles(client, service):
    await client.get_sheet_names()
    await client.requests().rename_sheet("Data", "Numbers").execute(False)
    (body,) = batches(service)
    assert(body['includeSpreadsheetInResponse'] is True)
    assert(await client.get_sheet_names() == ["Sheet1", "Numbers"])
    assert(len(service.names('get')) == 1)
    # nothing structural, the caller's choice stands
    await client.requests().resize_column("Sheet1", 0).execute(False)
    assert(batches(service)[1]['includeSpreadsheetInResponse'] is False)
