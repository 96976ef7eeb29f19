"""
timingsafe.mutator
------------------

Deterministic perturbation of the trial buffer.

Even trials flip the first byte (FAST: an early-exit comparator stops at
once), odd trials flip the last byte (SLOW: an early-exit comparator scans
the whole buffer). The category names describe the mismatch position, not
which outcome is desirable.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

BytesLike = Union[bytes, bytearray, memoryview]


class Category(enum.Enum):
    FAST = "fast"
    SLOW = "slow"


def category_for(trial_index: int) -> Category:
    """Category of a trial, decided by index parity alone."""
    return Category.SLOW if trial_index & 1 else Category.FAST


def position_for(category: Category, length: int) -> int:
    """Byte position perturbed for `category` in a buffer of `length` bytes."""
    if length < 1:
        raise ValueError("buffer must hold at least one byte")
    return length - 1 if category is Category.SLOW else 0


def flip_value(trial_index: int) -> int:
    # Low bit forced on: the XOR can never be a no-op.
    return 1 | (trial_index & 0xFF)


def mutate(trial_index: int, buffer: bytearray, reference: BytesLike) -> Category:
    """
    Perturb `buffer` for trial `trial_index` and return the trial's category.

    `buffer` must equal `reference` on entry; the caller restores it with
    restore() once the trial has been measured.
    """
    category = category_for(trial_index)
    position = position_for(category, len(reference))
    buffer[position] ^= flip_value(trial_index)
    return category


def restore(
    buffer: bytearray,
    reference: BytesLike,
    position: int,
    original_byte: Optional[int] = None,
) -> None:
    """Write the original byte back at `position` so `buffer` equals `reference` again."""
    if original_byte is None:
        original_byte = reference[position]
    buffer[position] = original_byte
