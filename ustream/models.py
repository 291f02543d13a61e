"""
Models for the Ustream client.

Immutable dataclasses for data handed between phases, plus the mutable
``UploadSession`` that tracks one in-flight upload.
"""
import asyncio
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from .errors import UploadError

DEFAULT_CHUNK_SIZE = 64 * 1024


class UploadState(Enum):
    """Upload session state, in the order a successful upload moves through."""
    INITIATED = "initiated"
    TRANSFERRING = "transferring"
    TRANSFERRED = "transferred"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (UploadState.COMPLETED, UploadState.FAILED)


_FORWARD_ORDER = [
    UploadState.INITIATED,
    UploadState.TRANSFERRING,
    UploadState.TRANSFERRED,
    UploadState.COMPLETED,
]


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for API and upload operations."""
    api_url: str = "https://api.ustream.tv"
    access_token: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    token_url: str = "https://www.ustream.tv/oauth2/token"
    timeout: int = 60
    max_retries: int = 3
    default_protect: str = "private"
    ftp_chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build config from USTREAM_* environment variables."""
        values: Dict[str, Any] = {
            "access_token": os.getenv("USTREAM_ACCESS_TOKEN") or None,
            "client_id": os.getenv("USTREAM_CLIENT_ID") or None,
            "client_secret": os.getenv("USTREAM_CLIENT_SECRET") or None,
        }
        api_url = os.getenv("USTREAM_API_URL")
        if api_url:
            values["api_url"] = api_url
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class TransferCredentials:
    """FTP slot handed out by the initiate phase."""
    host: str
    user: str
    password: str
    path: str
    file_id: Any
    port: int = 21

    @classmethod
    def from_response(cls, res: Dict[str, Any]) -> "TransferCredentials":
        file_id = res.get("videoId")
        if file_id is None:
            file_id = res.get("fileId")
        missing = [
            name for name, value in (("host", res.get("host")), ("path", res.get("path")), ("videoId", file_id))
            if value in (None, "")
        ]
        if missing:
            raise UploadError(f"Initiate response is missing {', '.join(missing)}")
        try:
            port = int(res.get("port") or 21)
        except (TypeError, ValueError) as exc:
            raise UploadError(f"Initiate response has an invalid port: {res.get('port')!r}") from exc
        return cls(
            host=str(res["host"]),
            user=str(res.get("user") or ""),
            password=str(res.get("password") or ""),
            path=str(res["path"]),
            file_id=file_id,
            port=port,
        )

    def __repr__(self) -> str:
        return (
            f"TransferCredentials(host={self.host!r}, port={self.port}, user={self.user!r}, "
            f"path={self.path!r}, file_id={self.file_id!r})"
        )


class FileChunks:
    """
    Re-iterable chunk reader over a local file.

    Every ``async for`` opens the file again, so a retried transfer sends
    the whole file. The handle is closed when the iteration ends or is
    closed early.
    """

    def __init__(self, path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = Path(path)
        self.chunk_size = chunk_size

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._read()

    async def _read(self) -> AsyncIterator[bytes]:
        with open(self.path, "rb") as fh:
            while True:
                chunk = await asyncio.to_thread(fh.read, self.chunk_size)
                if not chunk:
                    break
                yield chunk

    def __repr__(self) -> str:
        return f"FileChunks({str(self.path)!r}, chunk_size={self.chunk_size})"


@dataclass(frozen=True)
class SourceFile:
    """
    A named byte stream to upload.

    ``stream`` is a binary file object or an async iterable of bytes. Only
    re-iterable streams (such as the ``FileChunks`` built by ``from_path``)
    can be sent again when an upload is retried.
    """
    original_name: str
    stream: Any

    @property
    def extension(self) -> str:
        """Text after the last dot of the original name, '' when there is none."""
        if "." not in self.original_name:
            return ""
        return self.original_name.rsplit(".", 1)[1]

    @classmethod
    def from_path(cls, path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> "SourceFile":
        path = Path(path)
        return cls(original_name=path.name, stream=FileChunks(path, chunk_size))


@dataclass(frozen=True)
class UploadConfirmation:
    """Identifies the upload slot that was finalized."""
    channel_id: Any
    file_id: Any


@dataclass
class UploadSession:
    """Bookkeeping for one upload; discarded once it completes or fails."""
    channel_id: Any
    file_id: Any = None
    destination_path: Optional[str] = None
    state: Optional[UploadState] = None
    error: Optional[BaseException] = field(default=None, repr=False)

    @property
    def finished(self) -> bool:
        return self.state is not None and self.state.terminal

    def advance(self, state: UploadState) -> None:
        """Move forward to ``state``; backward moves and moves out of a terminal state are rejected."""
        if state is UploadState.FAILED:
            raise UploadError("Use fail() to mark a session as failed")
        if self.finished:
            raise UploadError(f"Upload session already {self.state.value}")
        current = -1 if self.state is None else _FORWARD_ORDER.index(self.state)
        if _FORWARD_ORDER.index(state) <= current:
            raise UploadError(f"Cannot move upload session from {self.state.value} to {state.value}")
        self.state = state

    def fail(self, error: BaseException) -> None:
        if self.finished:
            raise UploadError(f"Upload session already {self.state.value}")
        self.state = UploadState.FAILED
        self.error = error
