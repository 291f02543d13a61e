"""Adapters for the HTTP API and the FTP upload endpoint."""
from .api_client import HTTPAPIClient
from .ftp import FTPTransferClient, FTPTransferSession

__all__ = [
    "HTTPAPIClient",
    "FTPTransferClient",
    "FTPTransferSession",
]
