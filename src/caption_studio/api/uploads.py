"""Upload handling: MIME filtering and persisting files for preview.

Uploaded originals live only as long as the process: every path written here
is tracked and removed again on application shutdown.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from pathlib import Path
from typing import Iterable

import structlog
from fastapi import UploadFile

from caption_studio.config import get_upload_dir, settings
from caption_studio.models.media import MediaFile, is_supported

logger = structlog.get_logger()

# Files written during this process lifetime
_session_uploads: set[Path] = set()


def split_supported(uploads: list[UploadFile]) -> tuple[list[UploadFile], list[UploadFile]]:
    """Partition uploads into (supported, rejected) by declared MIME type."""
    supported = [u for u in uploads if is_supported(u.content_type)]
    rejected = [u for u in uploads if not is_supported(u.content_type)]
    return supported, rejected


async def save_upload(upload: UploadFile) -> MediaFile:
    """Write *upload* into the upload directory under a generated name."""
    name = upload.filename or "upload"
    stored_name = f"{uuid.uuid4().hex}{Path(name).suffix.lower()}"
    path = get_upload_dir() / stored_name

    data = await upload.read()
    await asyncio.to_thread(path.write_bytes, data)
    _session_uploads.add(path)

    logger.info("uploads.saved", name=name, stored_name=stored_name, bytes_written=len(data))
    return MediaFile(
        path=str(path),
        name=name,
        mime_type=upload.content_type or "application/octet-stream",
        last_modified=time.time(),
        size=len(data),
        preview_url=f"{settings.upload_url_prefix.rstrip('/')}/{stored_name}",
    )


def _remove(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("uploads.remove_failed", path=str(path), error=str(exc))
    _session_uploads.discard(path)


def discard_uploads(media_files: Iterable[MediaFile]) -> None:
    """Delete the stored files behind *media_files* (e.g. a half-saved batch)."""
    for media_file in media_files:
        _remove(Path(media_file.path))


def remove_session_uploads() -> int:
    """Delete every file saved by this process. Returns the number removed."""
    paths = list(_session_uploads)
    for path in paths:
        _remove(path)
    logger.info("uploads.cleaned", count=len(paths))
    return len(paths)
