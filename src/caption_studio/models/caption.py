"""Pydantic models for generated captions and generation options."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

Tone = Literal["Friendly", "Professional", "Witty", "Casual", "Inspirational"]
CaptionLength = Literal["Short", "Medium", "Long"]
CaptionSlot = Literal["seo_title", "short", "long", "hashtags"]

CAPTION_SLOTS: tuple[str, ...] = get_args(CaptionSlot)


class Caption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str


class CaptionSet(BaseModel):
    """All four caption slots. A partial set cannot be constructed."""

    model_config = ConfigDict(frozen=True)

    seo_title: Caption
    short: Caption
    long: Caption
    hashtags: Caption


class CaptionOptions(BaseModel):
    tone: Tone = "Friendly"
    length: CaptionLength = "Medium"
    language: str = Field(default="English", min_length=1)
    include_hashtags: bool = True


# ---------------------------------------------------------------------------
# LLM Structured Output models (used by the captioner tool)
# ---------------------------------------------------------------------------


class CaptionText(BaseModel):
    text: str


class HashtagText(BaseModel):
    text: str = Field(description="A space-separated list of relevant hashtags, starting with #")


class SeoTitleText(BaseModel):
    text: str = Field(description="A catchy, SEO-friendly title under 60 characters.")


class CaptionResponse(BaseModel):
    """Captions returned by the vision model for one still image."""

    model_config = ConfigDict(populate_by_name=True)

    short: CaptionText = Field(description="One short caption (1-2 sentences)")
    long: CaptionText = Field(description="One long caption (3-4 sentences)")
    hashtags: HashtagText
    seo_title: SeoTitleText = Field(alias="seoTitle")
