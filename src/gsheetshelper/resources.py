from dataclasses import fields, is_dataclass
from typing import Any, Self


def prune(value: Any) -> Any:
    """
    Recursively drop None entries from dicts/lists.
    An absent key and a null key mean different things to batchUpdate (a null
    inside a field mask clears the property) so anything unset must not be sent.
    Empty dicts are kept, an empty CellData is a meaningful 'blank cell'.
    """
    if isinstance(value, dict):
        return {k: prune(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [prune(v) for v in value]
    return value


class GoogleWorkSpaceResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    Provides the translation to and from the raw dicts used by the client.
    """
    def to_base(self) -> dict:
        """
        Return the dict representation of the object as needed by the GWS client.
        Nested resources are rendered through their own to_base() so subclasses
        only need to override fixup() for field adjustments.
        """
        self.fixup()
        b = {}
        for f in fields(self):
            b[f.name] = self._render(getattr(self, f.name))
        return prune(b)

    @classmethod
    def _render(cls, value: Any) -> Any:
        if isinstance(value, GoogleWorkSpaceResourceBase):
            return value.to_base()
        if isinstance(value, (list, tuple)):
            return [cls._render(v) for v in value]
        if isinstance(value, dict):
            return {k: cls._render(v) for k, v in value.items()}
        return value

    @classmethod
    def from_dict(cls, data: dict | Self | None) -> Self:
        """
        Build from a response dict.  Responses carry plenty of keys we don't
        model, those are ignored rather than blowing up the constructor.
        """
        if isinstance(data, cls):
            return data
        known = {f.name for f in fields(cls)} if is_dataclass(cls) else set()
        kwargs = {k: v for k, v in dict(data or {}).items() if k in known}
        return cls(**kwargs)

    def fixup(self) -> None:
        """
        notify a subclass to do any field adjustments
        """
        pass
