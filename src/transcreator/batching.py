"""
Splitting subtitle documents into fixed-size batches.
"""

from typing import Sequence, TypeVar

from .models import Batch, TimedLine

T = TypeVar("T")

BATCH_SIZE = 25


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive groups of at most `size`, keeping order."""
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def split_into_batches(lines: Sequence[TimedLine], batch_size: int = BATCH_SIZE) -> list[Batch]:
    """
    Split an ordered document into batches of `batch_size` lines.

    Batches tile the document with no gaps or overlaps; only the last one
    may be shorter.
    """
    return chunked(lines, batch_size)
