"""Session-scoped asset store: atomic snapshot swaps plus change notification."""

from __future__ import annotations

import asyncio
import re
import uuid
from typing import Callable, Iterable, Optional, Sequence

import structlog

from caption_studio.errors import FrameExtractionError
from caption_studio.models.caption import CaptionSet
from caption_studio.models.media import Asset, MediaFile, MediaKind
from caption_studio.store import transitions
from caption_studio.store.state import StoreState, active_asset, selected_assets
from caption_studio.tools.frame_extractor import extract_poster

logger = structlog.get_logger()

Listener = Callable[[StoreState], None]

INGEST_FAILURE = "Failed to process files. Please try again."

# Ids travel as URL path segments
_UNSAFE_ID_CHARS = re.compile(r"[^\w.-]+")


class AssetStore:
    """Holds the current StoreState and replaces it wholesale on every change.

    Listeners are called synchronously with the new snapshot after each swap.
    A listener that raises is logged and does not affect the others.
    """

    def __init__(self, state: Optional[StoreState] = None):
        self._state = state or StoreState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    def get(self, asset_id: str) -> Optional[Asset]:
        return self._state.assets.get(asset_id)

    @property
    def selected(self) -> list[Asset]:
        return selected_assets(self._state)

    @property
    def active(self) -> Optional[Asset]:
        return active_asset(self._state)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def apply(self, transition: Callable[..., StoreState], *args) -> StoreState:
        """Run a pure transition against the current snapshot and swap it in."""
        new_state = transition(self._state, *args)
        if new_state is self._state:
            return new_state
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("asset_store.listener_failed")
        return new_state

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def ingest(self, files: Sequence[MediaFile]) -> list[str]:
        """Create one asset per file, preserving input order.

        Video posters are extracted best-effort; a failed extraction falls back
        to the preview URL. The first new asset becomes active and the sole
        selection.
        """
        if not files:
            return []

        self.apply(transitions.dismiss_error)
        self.apply(transitions.begin_busy)
        try:
            new_assets = await asyncio.gather(*[self._build_asset(f) for f in files])
            new_assets = self._dedupe_ids(new_assets)
            self.apply(transitions.ingest_assets, new_assets)
        except Exception:
            logger.exception("asset_store.ingest_failed", count=len(files))
            self.apply(transitions.set_error, INGEST_FAILURE)
            return []
        finally:
            self.apply(transitions.end_busy)

        new_ids = [asset.id for asset in new_assets]
        logger.info("asset_store.ingested", count=len(new_ids), active_id=new_ids[0])
        return new_ids

    def select_toggle(self, asset_id: str, additive: bool = False) -> StoreState:
        return self.apply(transitions.toggle_selection, asset_id, additive)

    def merge_captions(self, asset_id: str, captions: CaptionSet) -> StoreState:
        return self.apply(transitions.merge_captions, asset_id, captions)

    def edit_caption_text(self, asset_id: str, slot: str, text: str) -> StoreState:
        return self.apply(transitions.edit_caption_text, asset_id, slot, text)

    def dismiss_error(self) -> StoreState:
        return self.apply(transitions.dismiss_error)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _new_asset_id(source: MediaFile) -> str:
        slug = _UNSAFE_ID_CHARS.sub("_", source.name).strip("._") or "asset"
        return f"{slug}-{int(source.last_modified * 1000)}-{uuid.uuid4().hex[:12]}"

    def _dedupe_ids(self, assets: Iterable[Asset]) -> list[Asset]:
        """Regenerate any id already taken in the store or earlier in the batch."""
        taken = set(self._state.assets)
        result: list[Asset] = []
        for asset in assets:
            while asset.id in taken:
                asset = asset.model_copy(update={"id": self._new_asset_id(asset.source)})
            taken.add(asset.id)
            result.append(asset)
        return result

    async def _build_asset(self, source: MediaFile) -> Asset:
        media_kind = MediaKind.from_mime_type(source.mime_type)
        poster_url = source.preview_url

        if media_kind is MediaKind.VIDEO:
            try:
                poster_url = await extract_poster(source)
            except FrameExtractionError:
                logger.warning("asset_store.poster_failed", name=source.name, exc_info=True)

        return Asset(
            id=self._new_asset_id(source),
            source=source,
            preview_url=source.preview_url,
            media_kind=media_kind,
            poster_url=poster_url,
        )
