"""API resources."""
from .playlist import PlaylistResource
from .video import VideoResource

__all__ = ["PlaylistResource", "VideoResource"]
