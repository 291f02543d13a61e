"""Tests for video and playlist resources."""
from unittest.mock import AsyncMock, Mock

import pytest

from ustream.errors import ApiError
from ustream.models import SourceFile, UploadConfirmation
from ustream.resources import PlaylistResource, VideoResource


def _context(result=None, error=None):
    context = AsyncMock()
    if error is not None:
        context.auth_request.side_effect = error
    else:
        context.auth_request.return_value = result
    return context


class TestVideoResource:
    @pytest.mark.asyncio
    async def test_list_returns_page(self):
        context = _context({"videos": [{"id": 1}], "paging": {"next": {"href": "/next"}}})
        page = await VideoResource(context).list(42, page_size=10, page=2)

        context.auth_request.assert_awaited_once_with(
            "get", "/channels/42/videos.json", params={"pagesize": 10, "page": 2}
        )
        assert page.items == ({"id": 1},)
        assert page.collection_name == "videos"
        assert page.next_locator == "/next"

    @pytest.mark.asyncio
    async def test_list_missing_channel_gives_empty_page(self):
        context = _context(error=ApiError(404, "get", "/channels/9/videos.json"))
        page = await VideoResource(context).list(9)

        assert page.items == ()
        assert page.has_next() is False

    @pytest.mark.asyncio
    async def test_list_other_api_errors_propagate(self):
        error = ApiError(500, "get", "/channels/9/videos.json")
        context = _context(error=error)

        with pytest.raises(ApiError) as exc_info:
            await VideoResource(context).list(9)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_list_error_without_status_propagates_original(self):
        error = RuntimeError("socket closed")
        context = _context(error=error)

        with pytest.raises(RuntimeError) as exc_info:
            await VideoResource(context).list(9)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_get_unwraps_video(self):
        context = _context({"video": {"id": 5, "title": "T"}})
        assert await VideoResource(context).get(5) == {"id": 5, "title": "T"}
        context.auth_request.assert_awaited_once_with("get", "/videos/5.json")

    @pytest.mark.asyncio
    async def test_remove(self):
        context = _context({})
        await VideoResource(context).remove(5)
        context.auth_request.assert_awaited_once_with("delete", "/videos/5.json")

    @pytest.mark.asyncio
    async def test_get_status(self):
        context = _context({"status": "transcoding"})
        res = await VideoResource(context).get_status(1, 5)
        assert res == {"status": "transcoding"}
        context.auth_request.assert_awaited_once_with("get", "/channels/1/uploads/5.json")

    @pytest.mark.asyncio
    async def test_metadata(self):
        context = _context({"metadata": [{"id": 3, "value": "x"}]})
        resource = VideoResource(context)

        assert await resource.list_metadata(5) == [{"id": 3, "value": "x"}]
        await resource.set_metadata(5, 3, "y")

        context.auth_request.assert_awaited_with(
            "put", "/videos/5/custom-metadata/3.json", data={"value": "y"}
        )

    @pytest.mark.asyncio
    async def test_upload_delegates_to_orchestrator(self):
        orchestrator = Mock()
        orchestrator.upload = AsyncMock(return_value=UploadConfirmation(1, 2))
        source = SourceFile("a.mp4", b"x")

        result = await VideoResource(AsyncMock(), orchestrator).upload(1, source, {"title": "T"})

        assert result == UploadConfirmation(1, 2)
        orchestrator.upload.assert_awaited_once_with(1, source, {"title": "T"}, None)

    @pytest.mark.asyncio
    async def test_upload_without_orchestrator(self):
        with pytest.raises(RuntimeError):
            await VideoResource(AsyncMock()).upload(1, SourceFile("a.mp4", b"x"))


class TestPlaylistResource:
    @pytest.mark.asyncio
    async def test_is_enabled(self):
        context = _context({"is_enabled": True})
        assert await PlaylistResource(context).is_enabled(1) is True
        context.auth_request.assert_awaited_once_with("get", "/channels/1/settings/playlists.json")

    @pytest.mark.asyncio
    async def test_list(self):
        context = _context({"playlists": [{"id": 7}], "paging": {"next": "/p2"}})
        page = await PlaylistResource(context).list(1)

        context.auth_request.assert_awaited_once_with(
            "get",
            "/channels/1/playlists.json",
            params={"pagesize": 50, "page": 1, "filter": "include_empty"},
        )
        assert page.collection_name == "playlists"
        assert page.items == ({"id": 7},)
        assert page.next_locator == "/p2"

    @pytest.mark.asyncio
    async def test_list_missing_channel_gives_empty_page(self):
        context = _context(error=ApiError(404, "get", "/channels/1/playlists.json"))
        page = await PlaylistResource(context).list(1)

        assert page.items == ()
        assert page.has_next() is False
        assert await page.fetch_next() is None

    @pytest.mark.asyncio
    async def test_create(self):
        context = _context({"playlist": {"id": 8, "title": "Best of"}})
        res = await PlaylistResource(context).create(1, "Best of", is_enabled=0)

        assert res == {"id": 8, "title": "Best of"}
        context.auth_request.assert_awaited_once_with(
            "post", "/channels/1/playlists.json", data={"is_enabled": 0, "title": "Best of"}
        )
