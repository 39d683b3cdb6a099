"""Poster frame extraction: MoviePy decode + Pillow JPEG encode."""

from __future__ import annotations

import asyncio
import base64
import io
from pathlib import Path

import structlog
from moviepy import VideoFileClip
from PIL import Image

from caption_studio.config import settings
from caption_studio.errors import FrameExtractionError
from caption_studio.models.media import MediaFile

logger = structlog.get_logger()


def poster_timestamp(duration: float | None) -> float:
    """Return the seek point for the poster frame.

    The configured seek point (1s by default) is capped at half the clip
    duration so sub-second clips still land inside the content.
    """
    if not duration or duration <= 0:
        return 0.0
    return min(settings.poster_seek_sec, duration / 2)


def _render_poster_jpeg(path: str) -> bytes:
    """Decode one frame at native resolution and encode it as JPEG (blocking)."""
    try:
        clip = VideoFileClip(path, audio=False)
    except Exception as exc:
        raise FrameExtractionError(f"Could not load video {Path(path).name}") from exc

    try:
        t = poster_timestamp(clip.duration)
        frame = clip.get_frame(t)
        if frame is None or getattr(frame, "size", 0) == 0:
            raise FrameExtractionError(f"Empty frame at t={t:.2f}s")

        buffer = io.BytesIO()
        Image.fromarray(frame).convert("RGB").save(
            buffer, format="JPEG", quality=settings.poster_jpeg_quality
        )
    except FrameExtractionError:
        raise
    except Exception as exc:
        raise FrameExtractionError(f"Could not render frame from {Path(path).name}") from exc
    finally:
        clip.close()

    return buffer.getvalue()


async def extract_poster_inline(source: MediaFile) -> str:
    """Return the poster frame of *source* as base64-encoded JPEG bytes.

    Raises:
        FrameExtractionError: If the video cannot be loaded, seeked or encoded.
    """
    logger.info("frame_extractor.start", name=source.name, mime_type=source.mime_type)
    jpeg = await asyncio.to_thread(_render_poster_jpeg, source.path)
    logger.info("frame_extractor.done", name=source.name, bytes_written=len(jpeg))
    return base64.b64encode(jpeg).decode("ascii")


async def extract_poster(source: MediaFile) -> str:
    """Return the poster frame of *source* as a displayable ``data:`` URL."""
    data = await extract_poster_inline(source)
    return f"data:image/jpeg;base64,{data}"


async def encode_file_inline(source: MediaFile) -> str:
    """Return the file's own bytes base64-encoded (images need no extraction)."""
    raw = await asyncio.to_thread(Path(source.path).read_bytes)
    return base64.b64encode(raw).decode("ascii")
