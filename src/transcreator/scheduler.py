"""
Chunked concurrent execution of batches with an order-preserving merge.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Sequence, TypeVar

from tqdm.asyncio import tqdm

from .batching import chunked

logger = logging.getLogger("transcreator")

CONCURRENT_BATCHES = 4

B = TypeVar("B")
R = TypeVar("R")


async def run_in_chunks(
    batches: Sequence[B],
    worker: Callable[[B], Awaitable[list[R]]],
    concurrency: int = CONCURRENT_BATCHES,
    show_progress: bool = True,
) -> list[R]:
    """
    Run `worker` over batches, at most `concurrency` at a time.

    Batches are grouped into ordered chunks. Every batch of a chunk runs
    concurrently and the chunk is joined before the next one starts. Outputs
    are concatenated in batch order, independent of completion order. If any
    batch in a chunk fails, the first failure (in batch order) is raised once
    the whole chunk has settled, and no further chunks run.
    """
    chunks = chunked(batches, concurrency)
    merged: list[R] = []

    with tqdm(total=len(batches), desc="Translating batches", unit="batch", disable=not show_progress) as bar:

        async def tracked(batch: B) -> list[R]:
            try:
                return await worker(batch)
            finally:
                bar.update(1)

        for ci, chunk in enumerate(chunks):
            logger.info(f"Processing chunk {ci + 1}/{len(chunks)} ({len(chunk)} batches)")
            results = await asyncio.gather(*(tracked(b) for b in chunk), return_exceptions=True)

            failures = [r for r in results if isinstance(r, BaseException)]
            if failures:
                logger.error(f"Chunk {ci + 1} failed: {len(failures)}/{len(chunk)} batches raised")
                raise failures[0]
            for r in results:
                merged.extend(r)

    return merged
