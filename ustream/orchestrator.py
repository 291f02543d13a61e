"""Upload orchestrator - sequences initiate, transfer and complete."""
import asyncio
import logging
from typing import Any, Dict, Optional

from .models import SourceFile, TransferCredentials, UploadConfirmation, UploadSession, UploadState
from .protocols import IBinaryTransferClient, IRequestContext, ProgressCallback
from .use_cases.upload import (
    CompleteUploadUseCase,
    InitiateUploadUseCase,
    TransferFileUseCase,
    resolve_destination,
)
from .utils.events import EventEmitter

logger = logging.getLogger(__name__)


def _describe_exception(exc: BaseException) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"


class UploadOrchestrator:
    """
    Drives one video upload through its three phases.

    Each phase is a use case injected at construction time. ``upload()``
    runs them strictly in order: a failing phase marks the session FAILED,
    emits ``failed`` and re-raises, so later phases never run.

    Events (see ``events``):
        initiated(session), transferred(session), completed(session),
        failed(session, exc)

    Usage:
        orchestrator = UploadOrchestrator(api_client, FTPTransferClient())
        confirmation = await orchestrator.upload(
            42, SourceFile.from_path(Path("clip.mp4")), {"title": "Clip"}
        )
    """

    def __init__(
        self,
        context: IRequestContext,
        transfer_client: IBinaryTransferClient,
        initiate_upload: Optional[InitiateUploadUseCase] = None,
        transfer_file: Optional[TransferFileUseCase] = None,
        complete_upload: Optional[CompleteUploadUseCase] = None,
        events: Optional[EventEmitter] = None,
    ):
        self._context = context
        self._transfer_client = transfer_client
        self._initiate_upload = initiate_upload or InitiateUploadUseCase()
        self._transfer_file = transfer_file or TransferFileUseCase()
        self._complete_upload = complete_upload or CompleteUploadUseCase()
        self.events = events or EventEmitter()

    async def initiate(self, channel_id: Any, options: Optional[Dict[str, Any]] = None) -> TransferCredentials:
        """Request an upload slot; returns the FTP credentials for it."""
        return await self._initiate_upload.execute(self._context, channel_id, options)

    async def transfer(
        self,
        credentials: TransferCredentials,
        source: SourceFile,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> str:
        """Stream ``source`` to the slot; returns the remote destination path."""
        destination = resolve_destination(credentials.path, source)
        await self._transfer_file.execute(
            self._transfer_client,
            credentials,
            source,
            destination,
            progress_callback,
        )
        return destination

    async def complete(self, channel_id: Any, file_id: Any, status: Optional[str] = None) -> UploadConfirmation:
        """Finalize the slot (status defaults to "ready")."""
        return await self._complete_upload.execute(self._context, channel_id, file_id, status)

    async def upload(
        self,
        channel_id: Any,
        source: SourceFile,
        options: Optional[Dict[str, Any]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadConfirmation:
        session = UploadSession(channel_id=channel_id)
        logger.debug("Upload started: channel=%s file=%s", channel_id, source.original_name)

        try:
            credentials = await self.initiate(channel_id, options)
            session.file_id = credentials.file_id
            session.advance(UploadState.INITIATED)
            await self.events.emit("initiated", session)

            session.destination_path = resolve_destination(credentials.path, source)
            session.advance(UploadState.TRANSFERRING)
            await self.transfer(credentials, source, progress_callback)
            session.advance(UploadState.TRANSFERRED)
            await self.events.emit("transferred", session)

            confirmation = await self.complete(channel_id, session.file_id)
            session.advance(UploadState.COMPLETED)
            await self.events.emit("completed", session)
        except (Exception, asyncio.CancelledError) as exc:
            if session.finished:
                raise
            session.fail(exc)
            logger.error(
                "Upload of %s to channel %s failed (file_id=%s): %s",
                source.original_name,
                channel_id,
                session.file_id,
                _describe_exception(exc),
                exc_info=not isinstance(exc, asyncio.CancelledError),
            )
            await self.events.emit("failed", session, exc)
            raise

        logger.debug("Upload completed: channel=%s file_id=%s", channel_id, confirmation.file_id)
        return confirmation
