"""Exceptions raised by the Ustream client."""
from typing import Any, Optional


class UstreamError(RuntimeError):
    """Base class for all client errors."""


class ApiError(UstreamError):
    """
    Non-2xx or non-JSON response from the Ustream API.

    ``status_code`` is the HTTP status; list calls use ``404`` to
    synthesize empty pages.
    """

    def __init__(
        self,
        status_code: Optional[int],
        method: str,
        path: str,
        detail: Any = None,
    ):
        self.status_code = status_code
        self.method = method.upper()
        self.path = path
        self.detail = detail
        super().__init__(f"API error {status_code} on {self.method} {path}: {detail}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class TransferError(UstreamError):
    """FTP connect, mode-set or streaming failure."""


class MalformedPagingError(UstreamError, ValueError):
    """Paging descriptor whose ``next`` is neither a locator nor an ``{href}`` mapping."""


class UploadError(UstreamError):
    """Invalid upload payload or illegal upload session transition."""
