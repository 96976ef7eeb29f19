"""
timingsafe.config
-----------------

Tunable parameters for a harness run.

The defaults were tuned for one measurement environment. Treat them as
starting points when moving to another interpreter or host with a different
jitter profile.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# t_(0.99995, inf): two-tailed, large degrees-of-freedom approximation.
# A timing-safe comparator stays below it 99.99% of the time.
DEFAULT_CRITICAL_VALUE = 3.892
DEFAULT_OUTLIER_MULTIPLIER = 50.0
DEFAULT_NUM_TRIALS = 100_000
DEFAULT_BUFFER_SIZE = 16384
DEFAULT_MIN_SAMPLES = 2


@dataclass(frozen=True)
class HarnessConfig:
    """
    Harness tunables.

    Attributes:
        num_trials: trials per category; the collector runs twice as many.
        buffer_size: length of generated reference buffers, in bytes.
        outlier_multiplier: samples at or above this multiple of their
            category mean are discarded.
        critical_value: |t| threshold separating accept from reject.
        min_samples: fewest samples per category allowed after filtering.
        disable_gc: pause the garbage collector while trials run.
    """

    num_trials: int = DEFAULT_NUM_TRIALS
    buffer_size: int = DEFAULT_BUFFER_SIZE
    outlier_multiplier: float = DEFAULT_OUTLIER_MULTIPLIER
    critical_value: float = DEFAULT_CRITICAL_VALUE
    min_samples: int = DEFAULT_MIN_SAMPLES
    disable_gc: bool = True

    def __post_init__(self) -> None:
        if self.num_trials < 1:
            raise ValueError("num_trials must be positive")
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be at least 1 byte")
        if self.outlier_multiplier <= 1:
            raise ValueError("outlier_multiplier must be greater than 1")
        if self.critical_value <= 0:
            raise ValueError("critical_value must be positive")
        if self.min_samples < 2:
            raise ValueError("min_samples must be at least 2 for variance estimation")

    @property
    def total_trials(self) -> int:
        """Collector iterations for one run (both categories)."""
        return 2 * self.num_trials

    def with_overrides(self, **changes) -> "HarnessConfig":
        """Return a copy with `changes` applied (validated again)."""
        logger.debug("HarnessConfig overrides: %s", changes)
        return dataclasses.replace(self, **changes)
