"""Shared fixtures for caption studio tests

Run with pytest from project root:
    pytest -v
"""

import os
import tempfile
import time

import pytest

# Must be set before caption_studio.config is imported anywhere.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="caption-studio-uploads-"))
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from caption_studio.models.caption import Caption, CaptionResponse, CaptionSet  # noqa: E402
from caption_studio.models.media import MediaFile  # noqa: E402
from caption_studio.store.asset_store import AssetStore  # noqa: E402


@pytest.fixture
def make_media_file(tmp_path):
    """Factory writing a small file to disk and returning its MediaFile handle"""

    def _make(name: str, mime_type: str, data: bytes = b"\x00\x01fake-bytes") -> MediaFile:
        path = tmp_path / name
        path.write_bytes(data)
        return MediaFile(
            path=str(path),
            name=name,
            mime_type=mime_type,
            last_modified=time.time(),
            size=len(data),
            preview_url=f"/files/uploads/{name}",
        )

    return _make


@pytest.fixture
def make_caption_set():
    """Factory for complete caption sets with predictable ids"""

    def _make(prefix: str = "gen1") -> CaptionSet:
        return CaptionSet(
            seo_title=Caption(id=f"seo-{prefix}", text=f"{prefix} title"),
            short=Caption(id=f"short-{prefix}", text=f"{prefix} short"),
            long=Caption(id=f"long-{prefix}", text=f"{prefix} long"),
            hashtags=Caption(id=f"hashtags-{prefix}", text="#cat #cute"),
        )

    return _make


@pytest.fixture
def store():
    return AssetStore()


@pytest.fixture
def caption_response():
    return CaptionResponse.model_validate(
        {
            "short": {"text": "A cat naps."},
            "long": {"text": "A ginger cat naps in the sun. It looks content."},
            "hashtags": {"text": "#cat #nap #sunny #pets #cozy"},
            "seoTitle": {"text": "Ginger Cat Sun Nap"},
        }
    )


class FakeStructuredLLM:
    """Stands in for ``llm.with_structured_output(...)``"""

    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.result


class FakeChatModel:
    def __init__(self, structured: FakeStructuredLLM):
        self.structured = structured
        self.schema = None

    def with_structured_output(self, schema, **kwargs):
        self.schema = schema
        return self.structured


@pytest.fixture
def fake_llm(monkeypatch):
    """Patch the captioner's chat model; returns the structured stub to configure"""
    from caption_studio.tools import captioner

    structured = FakeStructuredLLM()
    model = FakeChatModel(structured)
    monkeypatch.setattr(captioner, "_build_llm", lambda: model)
    return structured
