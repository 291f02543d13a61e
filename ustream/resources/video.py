"""Video endpoints of the Ustream API."""
import logging
from typing import Any, Dict, Optional

from ..errors import ApiError
from ..models import SourceFile, UploadConfirmation
from ..orchestrator import UploadOrchestrator
from ..pagination import Page
from ..protocols import IRequestContext, ProgressCallback

logger = logging.getLogger(__name__)


class VideoResource:
    """
    Videos on a channel: listing, lookup, removal, custom metadata and upload.

    Uploads are delegated to the injected ``UploadOrchestrator``.
    """

    def __init__(self, context: IRequestContext, orchestrator: Optional[UploadOrchestrator] = None):
        self._context = context
        self._orchestrator = orchestrator

    async def list(self, channel_id: Any, page_size: int = 100, page: int = 1) -> Page:
        """First page of a channel's videos; a missing channel yields an empty page."""
        try:
            res = await self._context.auth_request(
                "get",
                f"/channels/{channel_id}/videos.json",
                params={"pagesize": page_size, "page": page},
            )
        except ApiError as exc:
            if exc.is_not_found:
                logger.debug("Channel %s not found, returning empty video page", channel_id)
                return Page.empty(self._context, "videos")
            raise
        return Page.from_response(self._context, "videos", res)

    async def get(self, video_id: Any) -> Dict[str, Any]:
        res = await self._context.auth_request("get", f"/videos/{video_id}.json")
        return res.get("video")

    async def remove(self, video_id: Any) -> Dict[str, Any]:
        return await self._context.auth_request("delete", f"/videos/{video_id}.json")

    async def get_status(self, channel_id: Any, video_id: Any) -> Dict[str, Any]:
        """
        Status of an uploaded video.

        Known statuses: initiated, transferred, queued, pending, transcoding,
        complete, error.
        """
        return await self._context.auth_request("get", f"/channels/{channel_id}/uploads/{video_id}.json")

    async def list_metadata(self, video_id: Any) -> Any:
        res = await self._context.auth_request("get", f"/videos/{video_id}/custom-metadata.json")
        return res.get("metadata")

    async def set_metadata(self, video_id: Any, field_id: Any, value: Any) -> Dict[str, Any]:
        return await self._context.auth_request(
            "put",
            f"/videos/{video_id}/custom-metadata/{field_id}.json",
            data={"value": value},
        )

    async def upload(
        self,
        channel_id: Any,
        source: SourceFile,
        options: Optional[Dict[str, Any]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadConfirmation:
        """
        Upload a video (initiate, FTP transfer, complete).

        Args:
            channel_id: Target channel
            source: File name and byte stream
            options: title, description, protect ("public" or "private",
                default "private")
            progress_callback: Called with the number of bytes sent so far
        """
        if self._orchestrator is None:
            raise RuntimeError("VideoResource has no UploadOrchestrator configured")
        return await self._orchestrator.upload(channel_id, source, options, progress_callback)
