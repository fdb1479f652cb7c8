"""Exceptions raised by gsheetshelper."""

__all__ = [
    "SheetsHelperError",
    "InvalidArgumentError",
    "SheetNotFoundError",
    "NotBoundError",
    "TransportError",
    "QuotaExceededError",
    "UnexpectedResponseError",
]


class SheetsHelperError(Exception):
    """Base exception for everything raised by this package."""


class InvalidArgumentError(SheetsHelperError, ValueError):
    """A request was built with parameters that can never be valid."""


class SheetNotFoundError(SheetsHelperError, LookupError):
    """Raised when a sheet title cannot be resolved, even after a reload."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"No such sheet named '{title}'")


class NotBoundError(SheetsHelperError, RuntimeError):
    """An operation needs a spreadsheet but none was created or loaded."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"{operation}() requires a spreadsheet, call create_spreadsheet() or load_spreadsheet() first"
        )


class TransportError(SheetsHelperError):
    """The remote service failed the call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuotaExceededError(TransportError):
    """The remote service rejected the call because of its rate limit."""


class UnexpectedResponseError(TransportError):
    """The call succeeded but the response is missing something we asked for."""
