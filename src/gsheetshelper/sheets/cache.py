from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging

from .resources import Sheet, Spreadsheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SheetIdentity():
    """
    A sheet as the client knows it.  The id is assigned by Google and stays
    the same for the life of the sheet, the title can be changed by anyone.
    """
    title: str
    sheet_id: int

    @classmethod
    def from_sheet(cls, sheet: Sheet) -> "SheetIdentity":
        return cls(sheet.title, sheet.sheet_id)


class SpreadsheetStateCache():
    """
    Lazily loaded copy of a spreadsheet's structure (its sheets, their titles and ids).
    Either unloaded or loaded with a snapshot.  The snapshot is only ever
    replaced as a whole: by a fetch through the loader, or by replace_with()
    when a batchUpdate already handed back the updated spreadsheet.
    Someone else may rename or delete sheets at any time, so a title that is
    not found causes one reload before giving up.
    """
    def __init__(self, loader: Callable[[], Awaitable[Spreadsheet]]) -> None:
        self._loader = loader
        self._snapshot = None
        self._by_title = {}

    def __bool__(self) -> bool:
        return self.loaded

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Spreadsheet | None:
        return self._snapshot

    def invalidate(self) -> None:
        self._snapshot = None
        self._by_title = {}

    def replace_with(self, snapshot: Spreadsheet) -> None:
        self._snapshot = snapshot
        by_title = {}
        for s in snapshot.sheets:
            if s.title is None or s.sheet_id is None:
                continue
            # duplicate titles are allowed by Google, the first one wins
            by_title.setdefault(s.title.lower(), SheetIdentity.from_sheet(s))
        self._by_title = by_title

    async def load(self) -> Spreadsheet:
        if self._snapshot is None:
            logger.debug("loading spreadsheet structure")
            self.replace_with(await self._loader())
        return self._snapshot

    def lookup(self, title: str) -> SheetIdentity | None:
        """Resolve against what is cached right now, no I/O"""
        return self._by_title.get(str(title).lower())

    async def resolve(self, title: str) -> SheetIdentity | None:
        """
        Sheet identity for title, compared case insensitively.
        None if it still isn't there after a fresh load.
        """
        fetched = not self.loaded
        await self.load()
        found = self.lookup(title)
        if found is None and not fetched:
            logger.debug("sheet '%s' not cached, reloading", title)
            self.invalidate()
            await self.load()
            found = self.lookup(title)
        return found

    def sheet(self, sheet_id: int) -> Sheet | None:
        if self._snapshot is not None:
            for s in self._snapshot.sheets:
                if s.sheet_id == sheet_id:
                    return s
        return None

    @property
    def titles(self) -> list[str]:
        if self._snapshot is None:
            return []
        return [s.title for s in self._snapshot.sheets]
