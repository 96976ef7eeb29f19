"""
timingsafe.collector
--------------------

Drives a comparator across many mutate-measure-restore trials.

Notes:
- The timed window holds exactly one comparator call between two clock
  reads. Mutation, restoration and bookkeeping happen outside it.
- Results go into preallocated lists; nothing is appended or logged while
  trials run.
- Each comparator result is counted as 0 or 1 by truthiness right after the
  second clock read, and the count is checked once the loop ends.
  Every trial compares a mismatched pair, so any nonzero count is a
  ComparatorFault.
"""

from __future__ import annotations

import gc
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, NamedTuple, Tuple

from .errors import ComparatorFault, TimingHarnessError
from .mutator import BytesLike, Category, mutate, position_for, restore

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

Clock = Callable[[], int]
# Returns anything truthy for equal buffers and anything falsy otherwise.
Comparator = Callable[[BytesLike, BytesLike], Any]


class Measurement(NamedTuple):
    trial_index: int
    category: Category
    elapsed: int


@dataclass(frozen=True)
class MeasurementSet:
    """Measurements of one collector pass, ordered by trial index."""

    measurements: Tuple[Measurement, ...]

    def __len__(self) -> int:
        return len(self.measurements)

    def __iter__(self) -> Iterator[Measurement]:
        return iter(self.measurements)

    def by_category(self, category: Category) -> Tuple[Measurement, ...]:
        return tuple(m for m in self.measurements if m.category is category)

    def elapsed(self, category: Category) -> List[int]:
        """Elapsed ticks of one category, in trial order."""
        return [m.elapsed for m in self.measurements if m.category is category]

    @property
    def fast(self) -> Tuple[Measurement, ...]:
        return self.by_category(Category.FAST)

    @property
    def slow(self) -> Tuple[Measurement, ...]:
        return self.by_category(Category.SLOW)


def _check_trial_count(total_trials: int) -> None:
    if not isinstance(total_trials, int) or isinstance(total_trials, bool):
        raise TypeError("total_trials must be an int")
    if total_trials < 2 or total_trials % 2:
        raise ValueError("total_trials must be a positive even number")


class TimingCollector:
    """
    Owns the trial buffer for one reference and runs trial passes against it.

    The reference is copied to immutable bytes on construction and is only
    ever read afterwards.
    """

    def __init__(
        self,
        reference: BytesLike,
        clock: Clock = time.perf_counter_ns,
        disable_gc: bool = True,
    ):
        if not isinstance(reference, (bytes, bytearray, memoryview)):
            raise TypeError("reference must be bytes-like")
        if len(reference) < 1:
            raise ValueError("reference must hold at least one byte")
        self.reference: bytes = bytes(reference)
        self.trial_buffer = bytearray(self.reference)
        self._clock = clock
        self._disable_gc = disable_gc

    def run(self, comparator: Comparator, total_trials: int) -> MeasurementSet:
        """
        Run `total_trials` trials and return their measurements.

        Raises:
            ComparatorFault: if any call reported equality.
            ValueError: if total_trials is not a positive even number.
        """
        _check_trial_count(total_trials)
        reference = self.reference
        buffer = self.trial_buffer
        clock = self._clock
        length = len(reference)

        elapsed = [0] * total_trials
        categories = [Category.FAST] * total_trials
        equal_count = 0

        logger.debug(
            "Running %d trials over a %d-byte buffer with %r",
            total_trials, length, comparator,
        )
        gc_paused = self._disable_gc and gc.isenabled()
        if gc_paused:
            gc.disable()
        try:
            for i in range(total_trials):
                category = mutate(i, buffer, reference)
                position = position_for(category, length)
                try:
                    t0 = clock()
                    result = comparator(buffer, reference)
                    t1 = clock()
                    elapsed[i] = t1 - t0
                    equal_count += 1 if result else 0
                    categories[i] = category
                finally:
                    restore(buffer, reference, position)
        finally:
            if gc_paused:
                gc.enable()

        if equal_count:
            logger.error(
                "Comparator reported equality %d times in %d mismatched trials",
                equal_count, total_trials,
            )
            raise ComparatorFault(equal_count, total_trials)
        if buffer != reference:
            raise TimingHarnessError("trial buffer diverged from reference")

        logger.debug("Collected %d measurements", total_trials)
        return MeasurementSet(
            tuple(
                Measurement(i, categories[i], elapsed[i])
                for i in range(total_trials)
            )
        )


def run_trials(
    comparator: Comparator,
    total_trials: int,
    reference: BytesLike,
    *,
    clock: Clock = time.perf_counter_ns,
    disable_gc: bool = True,
) -> MeasurementSet:
    """One-shot convenience wrapper around TimingCollector.run()."""
    return TimingCollector(reference, clock, disable_gc).run(comparator, total_trials)
