"""Chunked concurrent batch driver shared by the pipeline stages."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from . import BatchSummary, ItemResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_chunks(items: Sequence[T], chunk_size: int) -> list[Sequence[T]]:
    """Split items into consecutive chunks of at most chunk_size."""

    if chunk_size <= 0:
        raise ValueError("Chunk size must be greater than zero")
    return [items[start : start + chunk_size] for start in range(0, len(items), chunk_size)]


async def run_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[Any]],
    chunk_size: int,
    describe: Callable[[T], str] = str,
    label: str = "items",
) -> BatchSummary:
    """Run worker over items, one chunk at a time.

    Every item in a chunk is started together and the whole chunk settles
    before the next one begins. Failures are logged and recorded; they never
    cancel sibling or later items.
    """

    summary = BatchSummary()
    chunks = iter_chunks(items, chunk_size)
    total = len(items)

    async def _guarded(position: int, item: T) -> ItemResult:
        name = describe(item)
        logger.info("[%s/%s] Processing %s", position, total, name)
        try:
            await worker(item)
        except Exception as exc:
            logger.error("Failed to process %s: %s", name, exc)
            return ItemResult(item=name, success=False, error=exc)
        return ItemResult(item=name, success=True)

    for number, chunk in enumerate(chunks, start=1):
        logger.info("Processing batch %s/%s (%s %s)", number, len(chunks), len(chunk), label)
        offset = (number - 1) * chunk_size
        results = await asyncio.gather(*(_guarded(offset + index + 1, item) for index, item in enumerate(chunk)))
        summary.results.extend(results)

    logger.info("Batch processing completed: %s succeeded, %s failed", summary.processed, summary.failed)
    return summary

