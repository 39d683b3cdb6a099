"""Request/Response schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from caption_studio.models.caption import CaptionOptions, CaptionSet
from caption_studio.models.media import Asset, MediaKind
from caption_studio.store.state import StoreState


class AssetView(BaseModel):
    id: str
    name: str
    mime_type: str
    media_kind: MediaKind
    preview_url: str
    poster_url: str
    captions: Optional[CaptionSet] = None

    @classmethod
    def from_asset(cls, asset: Asset) -> AssetView:
        return cls(
            id=asset.id,
            name=asset.source.name,
            mime_type=asset.source.mime_type,
            media_kind=asset.media_kind,
            preview_url=asset.preview_url,
            poster_url=asset.poster_url,
            captions=asset.captions,
        )


class StoreView(BaseModel):
    assets: list[AssetView]
    selected_ids: list[str]
    active_id: Optional[str] = None
    is_loading: bool = False
    error: Optional[str] = None

    @classmethod
    def from_state(cls, state: StoreState) -> StoreView:
        return cls(
            assets=[AssetView.from_asset(a) for a in state.assets.values()],
            # selection is pruned on read
            selected_ids=[i for i in state.selected_ids if i in state.assets],
            active_id=state.active_id,
            is_loading=state.is_loading,
            error=state.error,
        )


class IngestResponse(BaseModel):
    asset_ids: list[str]
    rejected: list[str] = Field(default_factory=list, description="Filenames with unsupported MIME types")
    state: StoreView


class SelectRequest(BaseModel):
    additive: bool = False


class GenerateRequest(BaseModel):
    asset_ids: Optional[list[str]] = Field(
        default=None, description="Assets to caption; defaults to the current selection"
    )
    options: CaptionOptions = Field(default_factory=CaptionOptions)


class GenerateResponse(BaseModel):
    asset_ids: list[str]
    status: str = "started"


class CaptionEditRequest(BaseModel):
    text: str
