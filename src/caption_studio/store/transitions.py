"""Pure state transitions for the asset store.

Every function takes a snapshot and returns a new one (or the same snapshot
when the transition is a no-op).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from caption_studio.models.caption import CAPTION_SLOTS, CaptionSet
from caption_studio.models.media import Asset
from caption_studio.store.state import StoreState, freeze_assets


def ingest_assets(state: StoreState, new_assets: Iterable[Asset]) -> StoreState:
    """Append *new_assets* in order; the first one becomes active and sole selection."""
    new_assets = list(new_assets)
    if not new_assets:
        return state

    assets = dict(state.assets)
    for asset in new_assets:
        if asset.id in assets:
            raise ValueError(f"Duplicate asset id: {asset.id}")
        assets[asset.id] = asset

    first_id = new_assets[0].id
    return replace(
        state,
        assets=freeze_assets(assets),
        active_id=first_id,
        selected_ids=(first_id,),
    )


def toggle_selection(state: StoreState, asset_id: str, additive: bool) -> StoreState:
    """Make *asset_id* active and toggle its selection membership.

    Non-additive starts from an empty working set, additive from the current
    selection; in both cases *asset_id* is then removed if present, else added.
    Unknown ids are ignored so the active asset always exists.
    """
    if asset_id not in state.assets:
        return state
    working = list(state.selected_ids) if additive else []
    if asset_id in working:
        working.remove(asset_id)
    else:
        working.append(asset_id)
    return replace(state, active_id=asset_id, selected_ids=tuple(working))


def merge_captions(state: StoreState, asset_id: str, captions: CaptionSet) -> StoreState:
    asset = state.assets.get(asset_id)
    if asset is None:
        return state
    assets = dict(state.assets)
    assets[asset_id] = asset.model_copy(update={"captions": captions})
    return replace(state, assets=freeze_assets(assets))


def edit_caption_text(state: StoreState, asset_id: str, slot: str, text: str) -> StoreState:
    """Replace the text of one caption slot, keeping its id and every other slot."""
    if slot not in CAPTION_SLOTS:
        raise ValueError(f"Unknown caption slot: {slot}")

    asset = state.assets.get(asset_id)
    if asset is None or asset.captions is None:
        return state

    caption = getattr(asset.captions, slot).model_copy(update={"text": text})
    captions = asset.captions.model_copy(update={slot: caption})
    assets = dict(state.assets)
    assets[asset_id] = asset.model_copy(update={"captions": captions})
    return replace(state, assets=freeze_assets(assets))


def begin_busy(state: StoreState) -> StoreState:
    return replace(state, busy_count=state.busy_count + 1)


def end_busy(state: StoreState) -> StoreState:
    return replace(state, busy_count=max(0, state.busy_count - 1))


def set_error(state: StoreState, message: Optional[str]) -> StoreState:
    if state.error == message:
        return state
    return replace(state, error=message)


def dismiss_error(state: StoreState) -> StoreState:
    return set_error(state, None)
