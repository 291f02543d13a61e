"""Tests for the UstreamClient facade wiring."""
from contextlib import asynccontextmanager

import httpx
import pytest

from ustream import ClientConfig, SourceFile, UploadConfirmation, UstreamClient


class RecordingTransferClient:
    def __init__(self):
        self.destinations = []

    @asynccontextmanager
    async def session(self, host, port, user, password):
        yield self

    async def set_binary(self):
        pass

    async def put(self, stream, destination, progress_callback=None):
        self.destinations.append(destination)
        return 0


@pytest.mark.asyncio
async def test_list_and_follow_pages():
    def handler(request):
        if request.url.path == "/channels/1/videos.json":
            return httpx.Response(200, json={"videos": [{"id": 1}], "paging": {"next": {"href": "/page/2"}}})
        if request.url.path == "/page/2":
            return httpx.Response(200, json={"videos": [{"id": 2}], "paging": {}})
        return httpx.Response(404)

    config = ClientConfig(api_url="https://api.ustream.test", access_token="tok")
    async with UstreamClient(config, transport=httpx.MockTransport(handler)) as ustream:
        page = await ustream.videos.list(1)
        ids = [video["id"] async for video in page.iter_items()]
        missing = await ustream.playlists.list(999)

    assert ids == [1, 2]
    assert missing.items == ()
    assert missing.has_next() is False


@pytest.mark.asyncio
async def test_upload_uses_configured_default_protect():
    forms = []

    def handler(request):
        forms.append((request.method, request.url.path, request.content))
        if request.method == "POST":
            return httpx.Response(200, json={
                "host": "ftp.test", "user": "u", "password": "p", "port": 21,
                "path": "up/9", "videoId": 9,
            })
        return httpx.Response(200, json={})

    transfer = RecordingTransferClient()
    config = ClientConfig(api_url="https://api.ustream.test", access_token="tok", default_protect="public")
    async with UstreamClient(config, transfer_client=transfer, transport=httpx.MockTransport(handler)) as ustream:
        result = await ustream.videos.upload(3, SourceFile("a.mp4", b"data"), {"title": "T"})

    assert result == UploadConfirmation(channel_id=3, file_id=9)
    assert transfer.destinations == ["up/9.mp4"]
    assert forms[0][1] == "/channels/3/uploads.json"
    assert b"protect=public" in forms[0][2]
    assert forms[1] == ("PUT", "/channels/3/uploads/9.json", b"status=ready")
