"""
Protocols (Interfaces) for Dependency Inversion.

The pagination and upload code only talk to these small interfaces, so the
HTTP and FTP adapters can be swapped or mocked.
"""
from typing import Any, AsyncContextManager, Callable, Dict, Optional, Protocol, runtime_checkable

ProgressCallback = Callable[[int], Any]


@runtime_checkable
class IRequestContext(Protocol):
    """Issues authenticated calls against the Ustream API."""

    async def auth_request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Perform one authenticated request and return the parsed JSON body."""
        ...


@runtime_checkable
class ITransferSession(Protocol):
    """An open, authenticated binary transfer connection."""

    async def set_binary(self) -> None:
        """Switch the connection to binary (image) mode."""
        ...

    async def put(
        self,
        stream: Any,
        destination: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """Stream bytes to ``destination``; returns the number of bytes sent."""
        ...


@runtime_checkable
class IBinaryTransferClient(Protocol):
    """Opens scoped transfer sessions to a remote endpoint."""

    def session(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
    ) -> AsyncContextManager[ITransferSession]:
        """Connect and log in; the connection is closed when the context exits."""
        ...
