"""Pydantic models for uploaded media assets."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from caption_studio.models.caption import CaptionSet

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
        "video/mp4",
        "video/webm",
    }
)


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def from_mime_type(cls, mime_type: str) -> MediaKind:
        return cls.IMAGE if mime_type.startswith("image/") else cls.VIDEO


class MediaFile(BaseModel):
    """Handle to an uploaded file on disk. The bytes never enter the store."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    mime_type: str
    last_modified: float  # epoch seconds
    size: int = 0
    preview_url: str


class Asset(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source: MediaFile
    preview_url: str
    media_kind: MediaKind
    poster_url: str
    captions: Optional[CaptionSet] = None


def is_supported(mime_type: Optional[str]) -> bool:
    return (mime_type or "") in SUPPORTED_MIME_TYPES
