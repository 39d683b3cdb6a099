"""FastAPI route handlers for the captioning API."""

from __future__ import annotations

import asyncio
from urllib.parse import quote

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from sse_starlette.sse import EventSourceResponse

from caption_studio.api.dependencies import get_asset_store
from caption_studio.api.schemas import (
    CaptionEditRequest,
    GenerateRequest,
    GenerateResponse,
    IngestResponse,
    SelectRequest,
    StoreView,
)
from caption_studio.api.uploads import discard_uploads, save_upload, split_supported
from caption_studio.models.caption import CAPTION_SLOTS, CaptionSet
from caption_studio.store import transitions
from caption_studio.store.asset_store import INGEST_FAILURE, AssetStore
from caption_studio.store.state import StoreState
from caption_studio.tools.export import export_filename, format_captions_text
from caption_studio.workflows.generation import run_generation

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1")


def _require_captions(store: AssetStore, asset_id: str) -> CaptionSet:
    asset = store.get(asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset {asset_id} not found")
    if asset.captions is None:
        raise HTTPException(status_code=404, detail=f"Asset {asset_id} has no captions yet")
    return asset.captions


def _attachment_disposition(filename: str) -> str:
    """Content-Disposition with an ASCII fallback plus the RFC 5987 UTF-8 name."""
    fallback = "".join(c if " " <= c <= "~" and c not in '"\\' else "_" for c in filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("/assets", response_model=StoreView)
async def get_assets(store: AssetStore = Depends(get_asset_store)):
    """Return the current store snapshot."""
    return StoreView.from_state(store.state)


@router.post("/assets", response_model=IngestResponse)
async def upload_assets(
    files: list[UploadFile] = File(...),
    store: AssetStore = Depends(get_asset_store),
):
    """Ingest uploaded files. Unsupported MIME types are dropped silently."""
    supported, rejected = split_supported(files)
    if rejected:
        logger.info("assets.upload.rejected", names=[u.filename for u in rejected])

    media_files = []
    try:
        for upload in supported:
            media_files.append(await save_upload(upload))
    except OSError:
        logger.exception("assets.upload.save_failed", saved=len(media_files))
        discard_uploads(media_files)
        store.apply(transitions.set_error, INGEST_FAILURE)
        media_files = []
    asset_ids = await store.ingest(media_files)

    logger.info("assets.uploaded", count=len(asset_ids))
    return IngestResponse(
        asset_ids=asset_ids,
        rejected=[u.filename or "" for u in rejected],
        state=StoreView.from_state(store.state),
    )


@router.post("/assets/{asset_id}/select", response_model=StoreView)
async def select_asset(
    asset_id: str,
    request: SelectRequest,
    store: AssetStore = Depends(get_asset_store),
):
    """Make an asset active and toggle its selection (additive = multi-select)."""
    if store.get(asset_id) is None:
        raise HTTPException(status_code=404, detail=f"Asset {asset_id} not found")
    state = store.select_toggle(asset_id, request.additive)
    return StoreView.from_state(state)


@router.post("/generate", response_model=GenerateResponse, status_code=202)
async def generate(
    request: GenerateRequest,
    background_tasks: BackgroundTasks,
    store: AssetStore = Depends(get_asset_store),
):
    """Start caption generation for the given assets (default: current selection)."""
    if request.asset_ids is None:
        asset_ids = [a.id for a in store.selected]
    else:
        asset_ids = request.asset_ids
    if not asset_ids:
        raise HTTPException(status_code=400, detail="No assets selected for generation")

    background_tasks.add_task(run_generation, store, asset_ids, request.options)

    logger.info("generation.requested", asset_ids=asset_ids, tone=request.options.tone)
    return GenerateResponse(asset_ids=asset_ids)


@router.patch("/assets/{asset_id}/captions/{slot}", response_model=StoreView)
async def edit_caption(
    asset_id: str,
    slot: str,
    request: CaptionEditRequest,
    store: AssetStore = Depends(get_asset_store),
):
    """Replace the text of one caption slot."""
    if slot not in CAPTION_SLOTS:
        raise HTTPException(status_code=422, detail=f"Unknown caption slot: {slot}")
    _require_captions(store, asset_id)
    state = store.edit_caption_text(asset_id, slot, request.text)
    return StoreView.from_state(state)


@router.get("/assets/{asset_id}/captions/text", response_class=PlainTextResponse)
async def captions_text(asset_id: str, store: AssetStore = Depends(get_asset_store)):
    """All four captions as one labelled block (copy-all)."""
    return format_captions_text(_require_captions(store, asset_id))


@router.get("/assets/{asset_id}/captions/download", response_class=PlainTextResponse)
async def download_captions(asset_id: str, store: AssetStore = Depends(get_asset_store)):
    """Same block as captions_text, served as a .txt attachment."""
    captions = _require_captions(store, asset_id)
    filename = export_filename(store.get(asset_id).source.name)
    return PlainTextResponse(
        format_captions_text(captions),
        headers={"Content-Disposition": _attachment_disposition(filename)},
    )


@router.post("/error/dismiss", response_model=StoreView)
async def dismiss_error(store: AssetStore = Depends(get_asset_store)):
    return StoreView.from_state(store.dismiss_error())


@router.get("/events")
async def store_events(store: AssetStore = Depends(get_asset_store)):
    """Stream a ``state`` event for the current snapshot, then the newest one after each change."""

    async def _stream():
        # Holds only the newest snapshot; a slow client skips intermediate ones.
        queue: asyncio.Queue[StoreState] = asyncio.Queue(maxsize=1)

        def _push(state: StoreState) -> None:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(state)

        unsubscribe = store.subscribe(_push)
        _push(store.state)
        try:
            while True:
                state = await queue.get()
                yield {"event": "state", "data": StoreView.from_state(state).model_dump_json()}
        finally:
            unsubscribe()
            logger.info("events.unsubscribed")

    return EventSourceResponse(_stream())
