"""Playlist endpoints of the Ustream API."""
import logging
from typing import Any, Dict

from ..errors import ApiError
from ..pagination import Page
from ..protocols import IRequestContext

logger = logging.getLogger(__name__)


class PlaylistResource:
    """Playlists on a channel."""

    def __init__(self, context: IRequestContext):
        self._context = context

    async def is_enabled(self, channel_id: Any) -> bool:
        res = await self._context.auth_request("get", f"/channels/{channel_id}/settings/playlists.json")
        return bool(res.get("is_enabled"))

    async def list(
        self,
        channel_id: Any,
        page_size: int = 50,
        page: int = 1,
        filter: str = "include_empty",
    ) -> Page:
        """First page of a channel's playlists; a missing channel yields an empty page."""
        try:
            res = await self._context.auth_request(
                "get",
                f"/channels/{channel_id}/playlists.json",
                params={"pagesize": page_size, "page": page, "filter": filter},
            )
        except ApiError as exc:
            if exc.is_not_found:
                logger.debug("Channel %s not found, returning empty playlist page", channel_id)
                return Page.empty(self._context, "playlists")
            raise
        return Page.from_response(self._context, "playlists", res)

    async def create(self, channel_id: Any, title: str, **options) -> Dict[str, Any]:
        """
        Create a playlist.

        Args:
            channel_id: Owning channel
            title: Playlist title
            **options: Extra form fields, e.g. is_enabled=1 (default) or 0
        """
        data = {k: v for k, v in options.items() if v is not None}
        data["title"] = title
        res = await self._context.auth_request("post", f"/channels/{channel_id}/playlists.json", data=data)
        return res.get("playlist")
