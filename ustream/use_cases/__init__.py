"""Application use cases for upload workflows."""

from .upload import (
    DEFAULT_COMPLETE_STATUS,
    DEFAULT_PROTECT,
    UPLOAD_TYPE,
    CompleteUploadUseCase,
    InitiateUploadUseCase,
    TransferFileUseCase,
    resolve_destination,
)

__all__ = [
    "DEFAULT_COMPLETE_STATUS",
    "DEFAULT_PROTECT",
    "UPLOAD_TYPE",
    "CompleteUploadUseCase",
    "InitiateUploadUseCase",
    "TransferFileUseCase",
    "resolve_destination",
]
