"""
timingsafe.outliers
-------------------

Removes measurements blown up by scheduler preemption, paging and similar
host noise.

A sample is an outlier when it is at least `multiplier` times its
category's mean. Such spikes are orders of magnitude above a comparator's
real cost, while a genuine timing side channel shifts the mean by a small,
consistent amount and survives the filter.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from .collector import MeasurementSet
from .config import DEFAULT_MIN_SAMPLES, DEFAULT_OUTLIER_MULTIPLIER
from .errors import InsufficientSamplesError
from .mutator import Category

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _mean_or_zero(samples: Sequence[float]) -> float:
    return math.fsum(samples) / len(samples) if samples else 0.0


def _is_kept(value: float, sample_mean: float, multiplier: float) -> bool:
    # A zero mean means every sample is zero ticks (coarse clock): keep all.
    return sample_mean == 0 or value / sample_mean < multiplier


def filter_outliers(
    samples: Sequence[float],
    multiplier: float = DEFAULT_OUTLIER_MULTIPLIER,
) -> List[float]:
    """Return `samples` without values whose ratio to the mean reaches `multiplier`."""
    sample_mean = _mean_or_zero(samples)
    kept = [value for value in samples if _is_kept(value, sample_mean, multiplier)]
    if len(kept) != len(samples):
        logger.debug(
            "Dropped %d of %d samples at >= %sx mean %.1f",
            len(samples) - len(kept), len(samples), multiplier, sample_mean,
        )
    return kept


def filter_measurements(
    measurements: MeasurementSet,
    multiplier: float = DEFAULT_OUTLIER_MULTIPLIER,
) -> MeasurementSet:
    """Filter each category independently; surviving measurements keep their order."""
    means = {
        category: _mean_or_zero(measurements.elapsed(category))
        for category in Category
    }
    kept = tuple(
        m for m in measurements
        if _is_kept(m.elapsed, means[m.category], multiplier)
    )
    logger.debug("Outlier filter kept %d of %d measurements", len(kept), len(measurements))
    return MeasurementSet(kept)


def require_samples(
    samples: Sequence[float],
    minimum: int = DEFAULT_MIN_SAMPLES,
    label: str = "samples",
) -> None:
    """Raise InsufficientSamplesError when fewer than `minimum` samples remain."""
    if len(samples) < minimum:
        raise InsufficientSamplesError(
            f"{len(samples)} {label} left after outlier filtering; need at least {minimum}"
        )
