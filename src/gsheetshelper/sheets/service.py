"""
The remote end.  SpreadsheetService is the handful of Sheets API methods the
client needs, GoogleSheetsService implements it on top of the Google Python
client.  Everything goes in and comes out as the raw dicts of the REST API,
turning them into resources is the client's business.
"""
from abc import ABC, abstractmethod
import asyncio
from collections.abc import Iterable
import logging
import threading
from typing import Any

import google.auth.exceptions
from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from ..access import GoogleAccess
from ..errors import QuotaExceededError, TransportError
from .resources import GoogleSheetsEnum

logger = logging.getLogger(__name__)

_RATE_LIMIT_REASONS = {"rateLimitExceeded", "userRateLimitExceeded", "RATE_LIMIT_EXCEEDED"}


class SpreadsheetService(ABC):
    """The Sheets API surface the client talks to"""

    @abstractmethod
    async def get(self, spreadsheet_id: str, ranges: Iterable[str] = (),
                  include_grid_data: bool = False) -> dict:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/get"""

    @abstractmethod
    async def create(self, body: dict) -> dict:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/create"""

    @abstractmethod
    async def batch_update(self, spreadsheet_id: str, body: dict) -> dict:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate"""

    @abstractmethod
    async def values_get(self, spreadsheet_id: str, range: str,
                         value_render: str = "UNFORMATTED_VALUE",
                         date_time_render: str = "SERIAL_NUMBER") -> dict:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/get"""

    @abstractmethod
    async def values_update(self, spreadsheet_id: str, range: str, values: list[list[Any]],
                            value_input: str = "USER_ENTERED") -> dict:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/update"""

    @abstractmethod
    async def values_clear(self, spreadsheet_id: str, range: str) -> dict:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/clear"""


def is_rate_limited(error: HttpError) -> bool:
    """
    Quota rejections come back as 429, older endpoints still use a 403
    with a rateLimitExceeded reason.
    """
    status = int(getattr(error.resp, 'status', 0) or 0)
    if status == 429:
        return True
    if status == 403:
        details = getattr(error, 'error_details', None)
        if isinstance(details, list):
            reasons = {d.get('reason') for d in details if isinstance(d, dict)}
            if reasons & _RATE_LIMIT_REASONS:
                return True
        content = error.content.decode('utf-8', 'replace') if isinstance(error.content, bytes) else str(error.content)
        return any(r in content for r in _RATE_LIMIT_REASONS)
    return False


def translate_error(error: Exception) -> TransportError:
    if isinstance(error, HttpError):
        status = int(getattr(error.resp, 'status', 0) or 0)
        if is_rate_limited(error):
            return QuotaExceededError(f"Sheets API quota exceeded: {error}", status)
        return TransportError(f"Sheets API call failed: {error}", status)
    return TransportError(f"Sheets API call failed: {error}")


class GoogleSheetsService(SpreadsheetService):
    """
    SpreadsheetService over googleapiclient.
    The Google client is blocking so each execute() runs in a worker thread,
    the event loop stays free and the awaiting task can still be cancelled.
    Cancelling only abandons the await, the thread carries on until the HTTP
    call returns.  The resource's httplib2.Http is not thread safe so
    executes are serialised on a lock held by the thread, a call made after
    a cancel waits for the abandoned one to finish.
    """
    def __init__(self, resource: Resource | None = None,
                 access: GoogleAccess | None = None) -> None:
        if resource is None and access is None:
            access = GoogleAccess()
        self._resource = resource
        self._access = access
        self._http_lock = threading.Lock()

    @property
    def resource(self) -> Resource:
        if self._resource is None:
            self._resource = self._access.get_service()
        return self._resource

    def _execute_locked(self, request) -> dict:
        with self._http_lock:
            return request.execute()

    async def _execute(self, request) -> dict:
        try:
            response = await asyncio.to_thread(self._execute_locked, request)
        except HttpError as e:
            raise translate_error(e) from e
        except (OSError, google.auth.exceptions.GoogleAuthError) as e:
            raise translate_error(e) from e
        return response or {}

    async def get(self, spreadsheet_id: str, ranges: Iterable[str] = (),
                  include_grid_data: bool = False) -> dict:
        kwargs = {'spreadsheetId': spreadsheet_id, 'includeGridData': include_grid_data}
        range_list = [str(r) for r in ranges]
        if range_list:
            kwargs['ranges'] = range_list
        return await self._execute(self.resource.spreadsheets().get(**kwargs))

    async def create(self, body: dict) -> dict:
        return await self._execute(self.resource.spreadsheets().create(body=body))

    async def batch_update(self, spreadsheet_id: str, body: dict) -> dict:
        logger.debug("batchUpdate %s with %d requests", spreadsheet_id, len(body.get('requests', [])))
        return await self._execute(
            self.resource.spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id, body=body))

    async def values_get(self, spreadsheet_id: str, range: str,
                         value_render: str = "UNFORMATTED_VALUE",
                         date_time_render: str = "SERIAL_NUMBER") -> dict:
        render = GoogleSheetsEnum.valueRenderOption(value_render)
        if not render:
            raise ValueError(f"Invalid valueRenderOption value: {value_render}")
        date_render = GoogleSheetsEnum.dateTimeRenderOption(date_time_render)
        if not date_render:
            raise ValueError(f"Invalid dateTimeRenderOption value: {date_time_render}")
        values = self.resource.spreadsheets().values()
        return await self._execute(values.get(spreadsheetId=spreadsheet_id, range=range,
                                              valueRenderOption=render,
                                              dateTimeRenderOption=date_render))

    async def values_update(self, spreadsheet_id: str, range: str, values: list[list[Any]],
                            value_input: str = "USER_ENTERED") -> dict:
        value_input_option = GoogleSheetsEnum.valueInputOption(value_input)
        if not value_input_option:
            raise ValueError(f"Invalid valueInputOption value: {value_input}")
        body = {'range': range, 'majorDimension': 'ROWS', 'values': values}
        resource = self.resource.spreadsheets().values()
        return await self._execute(resource.update(spreadsheetId=spreadsheet_id, range=range,
                                                   valueInputOption=value_input_option, body=body))

    async def values_clear(self, spreadsheet_id: str, range: str) -> dict:
        values = self.resource.spreadsheets().values()
        return await self._execute(values.clear(spreadsheetId=spreadsheet_id, range=range, body={}))
