"""Use cases for the three upload phases (initiate, transfer, complete)."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from ..errors import TransferError
from ..models import SourceFile, TransferCredentials, UploadConfirmation
from ..protocols import IBinaryTransferClient, IRequestContext, ProgressCallback

logger = logging.getLogger(__name__)

UPLOAD_TYPE = "videoupload-ftp"
DEFAULT_PROTECT = "private"
DEFAULT_COMPLETE_STATUS = "ready"


def resolve_destination(base_path: str, source: SourceFile) -> str:
    """Server base path plus the source file's extension."""
    ext = source.extension
    if not ext:
        return base_path
    return f"{base_path}.{ext}"


class InitiateUploadUseCase:
    """Request an FTP upload slot for a channel."""

    def __init__(self, default_protect: str = DEFAULT_PROTECT):
        self._default_protect = default_protect

    def build_payload(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": UPLOAD_TYPE, "protect": self._default_protect}
        for key, value in (options or {}).items():
            if value is not None:
                payload[key] = value
        payload["type"] = UPLOAD_TYPE
        return payload

    async def execute(
        self,
        context: IRequestContext,
        channel_id: Any,
        options: Optional[Dict[str, Any]] = None,
    ) -> TransferCredentials:
        res = await context.auth_request(
            "post",
            f"/channels/{channel_id}/uploads.json",
            data=self.build_payload(options),
            params={"type": UPLOAD_TYPE},
        )
        return TransferCredentials.from_response(res)


class TransferFileUseCase:
    """Stream the source bytes to the FTP slot over a scoped connection."""

    async def execute(
        self,
        transfer_client: IBinaryTransferClient,
        credentials: TransferCredentials,
        source: SourceFile,
        destination: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        try:
            async with transfer_client.session(
                credentials.host,
                credentials.port,
                credentials.user,
                credentials.password,
            ) as session:
                await session.set_binary()
                return await session.put(source.stream, destination, progress_callback)
        except asyncio.CancelledError:
            raise
        except TransferError:
            raise
        except Exception as exc:
            raise TransferError(
                f"Transfer of {source.original_name} to {credentials.host}:{destination} failed: {exc}"
            ) from exc


class CompleteUploadUseCase:
    """Mark the upload slot as finished."""

    async def execute(
        self,
        context: IRequestContext,
        channel_id: Any,
        file_id: Any,
        status: Optional[str] = None,
    ) -> UploadConfirmation:
        status = status or DEFAULT_COMPLETE_STATUS
        await context.auth_request(
            "put",
            f"/channels/{channel_id}/uploads/{file_id}.json",
            data={"status": status},
        )
        return UploadConfirmation(channel_id=channel_id, file_id=file_id)
