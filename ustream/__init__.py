"""
Ustream - async client for the Ustream video API.

Usage:
    from ustream import UstreamClient, ClientConfig, SourceFile

    async with UstreamClient(ClientConfig.from_env()) as ustream:
        # Paginated listing
        page = await ustream.videos.list(channel_id)
        while page is not None:
            for video in page.items:
                ...
            page = await page.fetch_next()

        # Three-phase upload (HTTP initiate, FTP transfer, HTTP complete)
        confirmation = await ustream.videos.upload(
            channel_id,
            SourceFile.from_path(Path("clip.mp4")),
            {"title": "Clip", "protect": "public"},
        )
"""
from .client import UstreamClient
from .errors import ApiError, MalformedPagingError, TransferError, UploadError, UstreamError
from .models import (
    ClientConfig,
    SourceFile,
    TransferCredentials,
    UploadConfirmation,
    UploadSession,
    UploadState,
)
from .orchestrator import UploadOrchestrator
from .pagination import Page
from .resources import PlaylistResource, VideoResource
from .services import FTPTransferClient, HTTPAPIClient

__version__ = "0.1.0"
__all__ = [
    # Main
    "UstreamClient",
    "UploadOrchestrator",
    "Page",
    # Models
    "ClientConfig",
    "SourceFile",
    "TransferCredentials",
    "UploadConfirmation",
    "UploadSession",
    "UploadState",
    # Resources
    "PlaylistResource",
    "VideoResource",
    # Services
    "FTPTransferClient",
    "HTTPAPIClient",
    # Errors
    "UstreamError",
    "ApiError",
    "MalformedPagingError",
    "TransferError",
    "UploadError",
]
