"""Tests for the aioftp transfer adapter."""
import io
from contextlib import asynccontextmanager
from unittest.mock import Mock

import pytest

from ustream.services.ftp import FTPTransferClient, iter_chunks


class FakeRemoteStream:
    def __init__(self, fail_after=None):
        self.data = bytearray()
        self.writes = 0
        self.fail_after = fail_after

    async def write(self, chunk):
        if self.fail_after is not None and self.writes >= self.fail_after:
            raise ConnectionResetError("data connection lost")
        self.writes += 1
        self.data.extend(chunk)


class FakeFTPClient:
    def __init__(self, connect_error=None, remote=None):
        self.connect_error = connect_error
        self.remote = remote or FakeRemoteStream()
        self.connected = None
        self.logged_in = None
        self.commands = []
        self.destination = None
        self.closed = 0

    async def connect(self, host, port):
        if self.connect_error:
            raise self.connect_error
        self.connected = (host, port)

    async def login(self, user, password):
        self.logged_in = (user, password)

    async def command(self, command, expected_codes=()):
        self.commands.append((command, expected_codes))

    @asynccontextmanager
    async def upload_stream(self, destination):
        self.destination = destination
        yield self.remote

    def close(self):
        self.closed += 1


@pytest.mark.asyncio
async def test_session_transfers_bytes_in_binary_mode():
    fake = FakeFTPClient()
    client = FTPTransferClient(chunk_size=4, client_factory=lambda: fake)
    progress = Mock()

    async with client.session("ftp.test", 2121, "user", "pass") as session:
        await session.set_binary()
        sent = await session.put(b"0123456789", "up/1.mp4", progress)

    assert sent == 10
    assert fake.connected == ("ftp.test", 2121)
    assert fake.logged_in == ("user", "pass")
    assert fake.commands == [("TYPE I", "200")]
    assert fake.destination == "up/1.mp4"
    assert bytes(fake.remote.data) == b"0123456789"
    assert [c.args[0] for c in progress.call_args_list] == [4, 8, 10]
    assert fake.closed == 1


@pytest.mark.asyncio
async def test_session_closes_on_stream_error():
    fake = FakeFTPClient(remote=FakeRemoteStream(fail_after=1))
    client = FTPTransferClient(chunk_size=2, client_factory=lambda: fake)

    with pytest.raises(ConnectionResetError):
        async with client.session("ftp.test", 21, "user", "pass") as session:
            await session.put(b"abcdef", "up/1.mp4")

    assert fake.closed == 1


@pytest.mark.asyncio
async def test_put_closes_async_source_after_write_error():
    fake = FakeFTPClient(remote=FakeRemoteStream(fail_after=1))
    client = FTPTransferClient(client_factory=lambda: fake)
    released = []

    async def source():
        try:
            for chunk in (b"ab", b"cd", b"ef"):
                yield chunk
        finally:
            released.append(True)

    with pytest.raises(ConnectionResetError):
        async with client.session("ftp.test", 21, "user", "pass") as session:
            await session.put(source(), "up/1.mp4")

    assert released == [True]
    assert bytes(fake.remote.data) == b"ab"


@pytest.mark.asyncio
async def test_session_closes_on_connect_error():
    fake = FakeFTPClient(connect_error=ConnectionRefusedError("refused"))
    client = FTPTransferClient(client_factory=lambda: fake)

    with pytest.raises(ConnectionRefusedError):
        async with client.session("ftp.test", 21, "user", "pass"):
            pass

    assert fake.logged_in is None
    assert fake.closed == 1


@pytest.mark.asyncio
async def test_each_session_uses_a_new_connection():
    created = []

    def factory():
        created.append(FakeFTPClient())
        return created[-1]

    client = FTPTransferClient(client_factory=factory)
    for _ in range(2):
        async with client.session("ftp.test", 21, "user", "pass"):
            pass

    assert len(created) == 2
    assert all(c.closed == 1 for c in created)


@pytest.mark.asyncio
async def test_iter_chunks_from_file_object():
    chunks = [c async for c in iter_chunks(io.BytesIO(b"abcde"), chunk_size=2)]
    assert chunks == [b"ab", b"cd", b"e"]


@pytest.mark.asyncio
async def test_iter_chunks_from_async_iterable():
    async def gen():
        yield b"ab"
        yield b""
        yield bytearray(b"cd")

    chunks = [c async for c in iter_chunks(gen())]
    assert chunks == [b"ab", b"cd"]


@pytest.mark.asyncio
async def test_iter_chunks_rejects_unknown_stream():
    with pytest.raises(TypeError):
        [c async for c in iter_chunks(12345)]
