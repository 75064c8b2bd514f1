"""API request schemas."""

from discovinyl.api.schemas.vinyl import (
    ImageDownloadRequest,
    VinylRecordCreate,
    VinylRecordUpdate,
)

__all__ = [
    "ImageDownloadRequest",
    "VinylRecordCreate",
    "VinylRecordUpdate",
]
