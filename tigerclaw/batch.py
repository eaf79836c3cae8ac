"""Run the orchestrator for many advertisers at once."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List

from .config import TigerClawConfig
from .contracts import InvocationReport
from .orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)


async def run_many(
    orchestrator: MigrationOrchestrator,
    token: str,
    config: TigerClawConfig,
    external_ids: Iterable[int],
    max_concurrency: int = 4,
) -> List[InvocationReport]:
    """Run one independent orchestration per advertiser.

    At most ``max_concurrency`` invocations are in flight at once. Each
    invocation receives its own copy of ``config`` addressed at its
    advertiser. Reports come back in the order of ``external_ids``.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    semaphore = asyncio.Semaphore(max_concurrency)

    async def _run_one(external_id: int) -> InvocationReport:
        async with semaphore:
            return await orchestrator.run(token, config.with_external_id(external_id))

    ids = list(external_ids)
    logger.info(f"Running orchestration for {len(ids)} advertisers, concurrency={max_concurrency}")
    reports = await asyncio.gather(*(_run_one(external_id) for external_id in ids))
    failed = [r.external_id for r in reports if not r.succeeded]
    if failed:
        logger.warning(f"Orchestration failed for advertisers: {failed}")
    return list(reports)
