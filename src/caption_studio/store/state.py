"""Immutable asset store snapshot and read-side selectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from caption_studio.models.media import Asset


def freeze_assets(assets: Mapping[str, Asset] | None = None) -> Mapping[str, Asset]:
    return MappingProxyType(dict(assets or {}))


@dataclass(frozen=True)
class StoreState:
    """One snapshot of the session's view state.

    Transitions never mutate a snapshot; they build a new one, so a reader
    holding a reference always sees a consistent whole.
    """

    assets: Mapping[str, Asset] = field(default_factory=freeze_assets)  # insertion-ordered
    selected_ids: tuple[str, ...] = ()  # insertion-ordered set
    active_id: Optional[str] = None
    busy_count: int = 0
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.busy_count > 0


def selected_assets(state: StoreState) -> list[Asset]:
    """Selected assets in selection order; ids no longer in the store are skipped."""
    return [state.assets[i] for i in state.selected_ids if i in state.assets]


def active_asset(state: StoreState) -> Optional[Asset]:
    if state.active_id is None:
        return None
    return state.assets.get(state.active_id)
