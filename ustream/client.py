"""Client facade - wires the API, FTP and resource services together."""
from typing import Optional

import httpx

from .models import ClientConfig
from .orchestrator import UploadOrchestrator
from .protocols import IBinaryTransferClient
from .resources import PlaylistResource, VideoResource
from .services.api_client import HTTPAPIClient
from .services.ftp import FTPTransferClient
from .use_cases.upload import InitiateUploadUseCase


class UstreamClient:
    """
    Entry point for the Ustream API.

    Usage:
        async with UstreamClient(ClientConfig(access_token="...")) as ustream:
            page = await ustream.videos.list(42)
            async for video in page.iter_items():
                print(video["title"])

            confirmation = await ustream.videos.upload(
                42, SourceFile.from_path(Path("clip.mp4")), {"title": "Clip"}
            )
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transfer_client: Optional[IBinaryTransferClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: API and upload configuration (defaults to ClientConfig())
            transfer_client: Binary transfer client (defaults to FTPTransferClient)
            transport: Optional httpx transport, mainly for tests
        """
        self._config = config or ClientConfig()
        self._transfer_client = transfer_client or FTPTransferClient(chunk_size=self._config.ftp_chunk_size)
        self._api_client = HTTPAPIClient(self._config, transport=transport)

        self.orchestrator: Optional[UploadOrchestrator] = None
        self.videos: Optional[VideoResource] = None
        self.playlists: Optional[PlaylistResource] = None

    async def __aenter__(self):
        await self._api_client.__aenter__()

        self.orchestrator = UploadOrchestrator(
            self._api_client,
            self._transfer_client,
            initiate_upload=InitiateUploadUseCase(self._config.default_protect),
        )
        self.videos = VideoResource(self._api_client, self.orchestrator)
        self.playlists = PlaylistResource(self._api_client)
        return self

    async def __aexit__(self, *args):
        await self._api_client.__aexit__(*args)
