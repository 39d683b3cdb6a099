"""Plain-text export of a caption set (copy-all and .txt download)."""

from __future__ import annotations

from caption_studio.models.caption import CaptionSet

EXPORT_TEMPLATE = """\
SEO Title: {seo_title}

Short Caption:
{short}

Long Caption:
{long}

Hashtags:
{hashtags}"""


def format_captions_text(captions: CaptionSet) -> str:
    """Serialize the four slots in fixed order: SEO title, short, long, hashtags."""
    return EXPORT_TEMPLATE.format(
        seo_title=captions.seo_title.text,
        short=captions.short.text,
        long=captions.long.text,
        hashtags=captions.hashtags.text,
    ).strip()


def export_filename(source_name: str) -> str:
    """``holiday.final.mp4`` → ``holiday_captions.txt``."""
    base = source_name.split(".")[0]
    return f"{base}_captions.txt" if base else "captions.txt"
