"""Caption generation: one vision-model call per media file."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import structlog
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from caption_studio.config import settings
from caption_studio.errors import CaptionGenerationError, FrameExtractionError
from caption_studio.models.caption import Caption, CaptionOptions, CaptionResponse, CaptionSet
from caption_studio.models.media import MediaFile, MediaKind
from caption_studio.tools.frame_extractor import encode_file_inline, extract_poster_inline

logger = structlog.get_logger()

# ---------------------------------------------------------------------------
# Prompt template
# ---------------------------------------------------------------------------

CAPTION_PROMPT_TEMPLATE = """\
Analyze this {subject}. Generate a set of captions with the following characteristics:
- Tone: {tone}
- Length: {length}
- Language: {language}

Provide one short caption (1-2 sentences), one long caption (3-4 sentences), \
a list of {hashtag_count} relevant hashtags, and a concise SEO title.
The content is about: [the visual elements, mood, and subject of the {subject}].
Structure your response strictly according to the provided JSON schema."""

GENERIC_FAILURE = "Failed to generate captions from the AI model."


@dataclass(frozen=True)
class ImagePayload:
    data: str  # base64
    mime_type: str
    subject: str  # "image" | "video still frame"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def build_caption_prompt(options: CaptionOptions, subject: str = "image") -> str:
    return CAPTION_PROMPT_TEMPLATE.format(
        subject=subject,
        tone=options.tone,
        length=options.length,
        language=options.language,
        hashtag_count="5-10" if options.include_hashtags else "0",
    )


async def build_image_payload(source: MediaFile) -> ImagePayload:
    """Return the still image sent to the model for *source*.

    Videos are represented by their extracted poster frame; without one the
    model has nothing to look at, so extraction failure is fatal here.
    """
    if MediaKind.from_mime_type(source.mime_type) is MediaKind.VIDEO:
        try:
            data = await extract_poster_inline(source)
        except FrameExtractionError as exc:
            logger.warning("captioner.frame_extraction_failed", name=source.name, error=str(exc))
            raise CaptionGenerationError("Could not extract frame from video.") from exc
        return ImagePayload(data=data, mime_type="image/jpeg", subject="video still frame")

    data = await encode_file_inline(source)
    return ImagePayload(data=data, mime_type=source.mime_type, subject="image")


def _build_llm() -> BaseChatModel:
    """Return the chat model selected by ``settings.caption_provider``."""
    provider = settings.caption_provider.lower()
    if provider == "openai":
        if not settings.openai_api_key:
            raise CaptionGenerationError("OPENAI_API_KEY is not configured.")
        return ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=settings.caption_temperature,
        )
    if provider == "anthropic":
        if not settings.anthropic_api_key:
            raise CaptionGenerationError("ANTHROPIC_API_KEY is not configured.")
        return ChatAnthropic(
            model=settings.anthropic_model,
            api_key=settings.anthropic_api_key,
            temperature=settings.caption_temperature,
            max_tokens=1024,
        )
    raise CaptionGenerationError(f"Unsupported caption provider: {settings.caption_provider}")


def _coerce_response(result: object) -> CaptionResponse:
    """Validate whatever the structured-output runnable returned."""
    if isinstance(result, CaptionResponse):
        return result
    if isinstance(result, dict):
        return CaptionResponse.model_validate(result)
    if isinstance(result, (str, bytes)):
        return CaptionResponse.model_validate_json(result)
    raise ValueError(f"Unexpected model output type: {type(result).__name__}")


def caption_set_from_response(response: CaptionResponse) -> CaptionSet:
    """Attach fresh identifiers to every slot.

    Ids are never reused, so edits and regenerations of the same asset cannot
    collide.
    """

    def _caption(slot: str, text: str) -> Caption:
        return Caption(id=f"{slot}-{uuid.uuid4().hex}", text=text)

    return CaptionSet(
        seo_title=_caption("seo", response.seo_title.text),
        short=_caption("short", response.short.text),
        long=_caption("long", response.long.text),
        hashtags=_caption("hashtags", response.hashtags.text),
    )


async def generate_captions(source: MediaFile, options: CaptionOptions) -> CaptionSet:
    """Generate a complete caption set for *source*.

    Args:
        source: Uploaded image or video.
        options: Tone, length, language and hashtag policy.

    Returns:
        A CaptionSet with all four slots populated.

    Raises:
        CaptionGenerationError: On frame extraction failure, missing credentials,
            transport errors or a response that does not match the schema.
    """
    payload = await build_image_payload(source)
    prompt = build_caption_prompt(options, payload.subject)
    llm = _build_llm()

    logger.info(
        "captioner.start",
        name=source.name,
        subject=payload.subject,
        tone=options.tone,
        length=options.length,
        language=options.language,
    )

    message = HumanMessage(
        content=[
            {"type": "image_url", "image_url": {"url": payload.data_url}},
            {"type": "text", "text": prompt},
        ]
    )

    try:
        caption_llm = llm.with_structured_output(CaptionResponse)
        result = await caption_llm.ainvoke([message])
        if result is None:
            raise ValueError("Model returned no structured output")
        response = _coerce_response(result)
    except ValidationError as exc:
        logger.exception("captioner.invalid_response", name=source.name)
        raise CaptionGenerationError(GENERIC_FAILURE) from exc
    except Exception as exc:
        logger.exception("captioner.error", name=source.name)
        raise CaptionGenerationError(GENERIC_FAILURE) from exc

    captions = caption_set_from_response(response)
    logger.info("captioner.done", name=source.name, seo_title=captions.seo_title.text)
    return captions
