"""FTP adapter for streaming upload bytes to the slot handed out by the API."""
from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing, asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

import aioftp

from ..models import DEFAULT_CHUNK_SIZE
from ..protocols import ProgressCallback

logger = logging.getLogger(__name__)


async def iter_chunks(stream: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """
    Normalize bytes, binary file objects and async byte iterables into chunks.

    Async sources are closed when the iteration stops, early or not, so a
    reader that owns a file handle releases it after a failed write.
    """
    if isinstance(stream, (bytes, bytearray, memoryview)):
        data = bytes(stream)
        for offset in range(0, len(data), chunk_size):
            yield data[offset:offset + chunk_size]
        return

    if hasattr(stream, "__aiter__"):
        chunks = stream.__aiter__()
        try:
            async for chunk in chunks:
                if chunk:
                    yield bytes(chunk)
        finally:
            if hasattr(chunks, "aclose"):
                await chunks.aclose()
        return

    if hasattr(stream, "read"):
        while True:
            chunk = await asyncio.to_thread(stream.read, chunk_size)
            if not chunk:
                break
            yield chunk
        return

    raise TypeError(f"Unsupported upload stream type: {type(stream).__name__}")


class FTPTransferSession:
    """Open FTP connection bound to one transfer. Implements ITransferSession."""

    def __init__(self, client: aioftp.Client, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._client = client
        self._chunk_size = chunk_size

    async def set_binary(self) -> None:
        await self._client.command("TYPE I", "200")

    async def put(
        self,
        stream: Any,
        destination: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        sent = 0
        async with self._client.upload_stream(destination) as remote:
            async with aclosing(iter_chunks(stream, self._chunk_size)) as chunks:
                async for chunk in chunks:
                    await remote.write(chunk)
                    sent += len(chunk)
                    if progress_callback:
                        progress_callback(sent)
        logger.debug("Stored %d bytes at %s", sent, destination)
        return sent


class FTPTransferClient:
    """
    Binary transfer client over aioftp.

    Implements IBinaryTransferClient protocol. Every session gets its own
    connection, closed when the ``async with`` block exits for any reason.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        socket_timeout: Optional[float] = None,
        client_factory: Optional[Callable[[], aioftp.Client]] = None,
    ):
        self._chunk_size = chunk_size
        self._client_factory = client_factory or (lambda: aioftp.Client(socket_timeout=socket_timeout))

    @asynccontextmanager
    async def session(self, host: str, port: int, user: str, password: str) -> AsyncIterator[FTPTransferSession]:
        client = self._client_factory()
        try:
            logger.debug("Connecting to ftp://%s@%s:%s", user, host, port)
            await client.connect(host, port)
            await client.login(user, password)
            yield FTPTransferSession(client, self._chunk_size)
        finally:
            client.close()
            logger.debug("Closed FTP connection to %s:%s", host, port)
