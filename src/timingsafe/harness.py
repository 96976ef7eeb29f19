"""
timingsafe.harness
------------------

Decision engine: turns one collector pass into a report and a verdict, and
runs the self-calibration protocol.

Main API:
    - TimingHarness(reference_bytes, config=None, clock=time.perf_counter_ns)
    - TimingHarness.generate(buffer_size=None, config=None)
    - harness.measure(comparator) -> TimingReport
    - harness.calibrate(comparator, baseline=unsafe_compare) -> CalibrationResult
    - assert_timing_safe(comparator, ...)

Notes / limitations:
 - The default critical value rejects a timing-safe comparator about 0.01%
   of the time. Such a failure is a bounded false positive, not a bug to
   retry away.
 - Subject and baseline runs execute one after the other. Drift between
   them (thermal state, frequency scaling) is not corrected for.
"""

from __future__ import annotations

import json
import logging
import math
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

from . import environment
from .collector import Clock, Comparator, MeasurementSet, TimingCollector
from .comparators import unsafe_compare
from .config import DEFAULT_CRITICAL_VALUE, HarnessConfig
from .errors import CalibrationError, TimingLeakDetected
from .mutator import BytesLike, Category
from .outliers import filter_measurements, require_samples
from .stats import TTestResult, t_test

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class Verdict(NamedTuple):
    accepted: bool
    t_statistic: float


def decide(t_statistic: float, critical_value: float = DEFAULT_CRITICAL_VALUE) -> Verdict:
    """Accept ("no detectable leak") iff |t| is strictly below the critical value."""
    return Verdict(abs(t_statistic) < critical_value, t_statistic)


def _finite_or_none(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _finite_or_none(item) for key, item in value.items()}
    return value


def _comparator_name(comparator: Comparator) -> str:
    return getattr(comparator, "__qualname__", None) or repr(comparator)


@dataclass(frozen=True)
class TimingReport:
    """Outcome of one harness pass, ready for serialization."""

    comparator: str
    raw_fast_measurements: Tuple[int, ...]
    raw_slow_measurements: Tuple[int, ...]
    fast_samples: int
    slow_samples: int
    result: TTestResult
    verdict: Verdict
    critical_value: float
    environment: Dict[str, Any] = field(default_factory=dict)

    @property
    def fast_mean(self) -> float:
        return self.result.fast_mean

    @property
    def slow_mean(self) -> float:
        return self.result.slow_mean

    @property
    def t_statistic(self) -> float:
        return self.result.t_statistic

    @property
    def accepted(self) -> bool:
        return self.verdict.accepted

    def to_dict(self, include_raw: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "comparator": self.comparator,
            "fast_mean": self.fast_mean,
            "slow_mean": self.slow_mean,
            "pooled_std_dev": self.result.pooled_std_dev,
            "standard_error": self.result.standard_error,
            "t_statistic": self.t_statistic,
            "critical_value": self.critical_value,
            "accepted": self.accepted,
            "fast_samples": self.fast_samples,
            "slow_samples": self.slow_samples,
            "environment": dict(self.environment),
        }
        if include_raw:
            data["raw_fast_measurements"] = list(self.raw_fast_measurements)
            data["raw_slow_measurements"] = list(self.raw_slow_measurements)
        return data

    def to_json(self, include_raw: bool = True) -> str:
        """Strict JSON: non-finite floats (an infinite t) are written as null."""
        data = {
            key: _finite_or_none(value)
            for key, value in self.to_dict(include_raw=include_raw).items()
        }
        return json.dumps(data, allow_nan=False)


@dataclass(frozen=True)
class CalibrationResult:
    """Subject and baseline reports of one self-calibrated invocation."""

    subject: TimingReport
    baseline: TimingReport

    @property
    def conclusive(self) -> bool:
        """True when the baseline was rejected, i.e. the harness had power."""
        return not self.baseline.accepted

    @property
    def accepted(self) -> bool:
        return self.conclusive and self.subject.accepted


class TimingHarness:
    """
    Measures comparators against one fixed reference buffer.

    The reference bytes are supplied once (see generate() for random ones)
    and never modified; every measure() call reuses the same trial buffer.
    """

    def __init__(
        self,
        reference_bytes: BytesLike,
        config: Optional[HarnessConfig] = None,
        clock: Clock = time.perf_counter_ns,
    ):
        self.config = config or HarnessConfig()
        self._collector = TimingCollector(
            reference_bytes, clock=clock, disable_gc=self.config.disable_gc
        )

    @property
    def reference(self) -> bytes:
        return self._collector.reference

    @classmethod
    def generate(
        cls,
        buffer_size: Optional[int] = None,
        config: Optional[HarnessConfig] = None,
        clock: Clock = time.perf_counter_ns,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> "TimingHarness":
        """Build a harness over `buffer_size` fresh random bytes (config default if None)."""
        config = config or HarnessConfig()
        size = config.buffer_size if buffer_size is None else buffer_size
        if size < 1:
            raise ValueError("buffer_size must be at least 1 byte")
        logger.debug("Generated random %d-byte reference buffer", size)
        return cls(random_bytes(size), config=config, clock=clock)

    def collect(self, comparator: Comparator) -> MeasurementSet:
        """Raw measurements of one pass (2 * num_trials trials)."""
        return self._collector.run(comparator, self.config.total_trials)

    def analyze(self, comparator: Comparator, measurements: MeasurementSet) -> TimingReport:
        """Filter, test and decide on an already collected pass."""
        config = self.config
        filtered = filter_measurements(measurements, config.outlier_multiplier)
        fast = filtered.elapsed(Category.FAST)
        slow = filtered.elapsed(Category.SLOW)
        require_samples(fast, config.min_samples, "fast samples")
        require_samples(slow, config.min_samples, "slow samples")

        result = t_test(fast, slow)
        verdict = decide(result.t_statistic, config.critical_value)
        report = TimingReport(
            comparator=_comparator_name(comparator),
            raw_fast_measurements=tuple(measurements.elapsed(Category.FAST)),
            raw_slow_measurements=tuple(measurements.elapsed(Category.SLOW)),
            fast_samples=len(fast),
            slow_samples=len(slow),
            result=result,
            verdict=verdict,
            critical_value=config.critical_value,
            environment=environment.snapshot(),
        )
        logger.debug(
            "%s: fast_mean=%.2f slow_mean=%.2f t=%.4f accepted=%s",
            report.comparator, result.fast_mean, result.slow_mean,
            result.t_statistic, verdict.accepted,
        )
        return report

    def measure(self, comparator: Comparator) -> TimingReport:
        """
        Run one full pass: collect, filter, test, decide.

        Raises:
            ComparatorFault: if the comparator reported equality.
            InsufficientSamplesError: if filtering left too few samples.
        """
        return self.analyze(comparator, self.collect(comparator))

    def calibrate(
        self,
        comparator: Comparator,
        baseline: Comparator = unsafe_compare,
    ) -> CalibrationResult:
        """Measure `comparator`, then `baseline`, sequentially."""
        subject = self.measure(comparator)
        base = self.measure(baseline)
        result = CalibrationResult(subject=subject, baseline=base)
        if not result.conclusive:
            logger.warning(
                "Baseline %s was not rejected (t=%s); harness lacks statistical power",
                base.comparator, base.t_statistic,
            )
        elif not subject.accepted:
            logger.warning(
                "%s leaks mismatch position through timing (t=%s)",
                subject.comparator, subject.t_statistic,
            )
        return result


def assert_timing_safe(
    comparator: Comparator,
    harness: Optional[TimingHarness] = None,
    baseline: Comparator = unsafe_compare,
    config: Optional[HarnessConfig] = None,
) -> CalibrationResult:
    """
    Calibrated pass/fail check for `comparator`.

    Raises:
        TimingLeakDetected: the subject's |t| reached the critical value.
        CalibrationError: the baseline's |t| stayed below it.
        ComparatorFault: either comparator reported equality.
    """
    if harness is None:
        harness = TimingHarness.generate(config=config)
    result = harness.calibrate(comparator, baseline)
    if not result.subject.accepted:
        raise TimingLeakDetected(
            f"{result.subject.comparator} should not leak information from its execution time",
            result.subject.t_statistic,
        )
    if not result.conclusive:
        raise CalibrationError(
            f"{result.baseline.comparator} should leak information from its execution time",
            result.baseline.t_statistic,
        )
    return result
