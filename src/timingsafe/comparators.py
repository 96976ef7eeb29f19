"""
timingsafe.comparators
----------------------

Byte-buffer comparators to run through the harness.

- constant_time_compare / compare_digest / bytes_eq: subjects expected to be
  accepted (no detectable dependence on mismatch position).
- unsafe_compare: early-exit loop, the calibration baseline the harness must
  reject.

All take two bytes-like objects and return True only when they are equal.
"""

from __future__ import annotations

import hmac
from typing import Dict

from cryptography.hazmat.primitives import constant_time

from .collector import Comparator


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Pure-Python subject comparator: ORs together the XOR of every byte pair
    and only inspects the accumulated difference after the last pair, so the
    loop length depends on the buffer length alone.
    """
    if len(a) != len(b):
        return False
    diff = 0
    for left, right in zip(a, b):
        diff |= left ^ right
    return not diff


def compare_digest(a: bytes, b: bytes) -> bool:
    """hmac.compare_digest, the standard library's timing-safe comparison."""
    return hmac.compare_digest(a, b)


def bytes_eq(a: bytes, b: bytes) -> bool:
    """cryptography's constant_time.bytes_eq (it only accepts bytes, so copy first)."""
    return constant_time.bytes_eq(bytes(a), bytes(b))


def unsafe_compare(a: bytes, b: bytes) -> bool:
    """Early-exit comparison. Leaks the position of the first mismatch."""
    if len(a) != len(b):
        return False
    for x, y in zip(a, b):
        if x != y:
            return False
    return True


COMPARATORS: Dict[str, Comparator] = {
    "constant_time_compare": constant_time_compare,
    "compare_digest": compare_digest,
    "bytes_eq": bytes_eq,
    "unsafe_compare": unsafe_compare,
}


def get_comparator(name: str) -> Comparator:
    try:
        return COMPARATORS[name]
    except KeyError:
        raise ValueError(
            f"unknown comparator {name!r}; choose from {sorted(COMPARATORS)}"
        ) from None
