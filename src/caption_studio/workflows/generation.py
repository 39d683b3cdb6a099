"""Generation orchestrator: concurrent per-asset caption requests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from caption_studio.models.caption import CaptionOptions
from caption_studio.store import transitions
from caption_studio.store.asset_store import AssetStore
from caption_studio.tools.captioner import generate_captions

logger = structlog.get_logger()

DEFAULT_FAILURE = "Failed to generate captions. Please check your API key and try again."


@dataclass
class GenerationReport:
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    error: Optional[str] = None


async def run_generation(
    store: AssetStore,
    asset_ids: Sequence[str],
    options: CaptionOptions,
) -> GenerationReport:
    """Generate captions for every asset in *asset_ids* concurrently.

    Each result is merged into *store* as soon as its call finishes. The busy
    flag spans the whole batch and clears only after every call settled. If any
    call fails, the first failure (in completion order) becomes the store error;
    results already merged for other assets stay merged.
    """
    report = GenerationReport()
    errors: list[str] = []

    logger.info("generation.start", asset_count=len(asset_ids), tone=options.tone)

    async def _generate_one(asset_id: str) -> None:
        asset = store.get(asset_id)
        if asset is None:
            report.skipped.append(asset_id)
            return
        try:
            captions = await generate_captions(asset.source, options)
        except Exception as exc:
            logger.warning("generation.asset_failed", asset_id=asset_id, error=str(exc))
            report.failed.append(asset_id)
            errors.append(str(exc) or DEFAULT_FAILURE)
            return
        store.merge_captions(asset_id, captions)
        report.succeeded.append(asset_id)
        logger.info("generation.asset_done", asset_id=asset_id)

    store.apply(transitions.dismiss_error)
    store.apply(transitions.begin_busy)
    try:
        results = await asyncio.gather(
            *[_generate_one(asset_id) for asset_id in asset_ids],
            return_exceptions=True,
        )
        for asset_id, result in zip(asset_ids, results):
            if isinstance(result, Exception):
                logger.error("generation.task_crashed", asset_id=asset_id, error=str(result))
                report.failed.append(asset_id)
                errors.append(str(result) or DEFAULT_FAILURE)
    finally:
        if errors:
            report.error = errors[0]
            store.apply(transitions.set_error, report.error)
        store.apply(transitions.end_busy)

    logger.info(
        "generation.done",
        succeeded=len(report.succeeded),
        failed=len(report.failed),
        skipped=len(report.skipped),
    )
    return report
