"""
timingsafe.errors
-----------------

Exception hierarchy for the timing harness.

Two failure classes are kept apart:
 - ComparatorFault: the comparator reported equality for a mismatched pair.
   Fatal; the timings of such a run mean nothing.
 - TimingLeakDetected / CalibrationError: statistical outcomes of a completed
   run. These carry the computed t-statistic for diagnosis.
"""

from __future__ import annotations


class TimingHarnessError(Exception):
    """Base exception for timingsafe errors."""


class ComparatorFault(TimingHarnessError):
    """Raised when a comparator reports equality during measurement."""

    def __init__(self, equal_count: int, total_trials: int):
        self.equal_count = equal_count
        self.total_trials = total_trials
        super().__init__(
            f"comparator reported equality in {equal_count} of {total_trials} "
            "mismatched trials; no timing conclusion can be drawn"
        )


class InsufficientSamplesError(TimingHarnessError):
    """Raised when too few samples remain for variance estimation."""


class StatisticalRejection(TimingHarnessError):
    """Base for verdicts that contradict the expected outcome."""

    def __init__(self, message: str, t_statistic: float):
        self.t_statistic = t_statistic
        super().__init__(f"{message} (t={t_statistic})")


class TimingLeakDetected(StatisticalRejection):
    """Raised when the comparator under test leaks mismatch position."""


class CalibrationError(StatisticalRejection):
    """Raised when the early-exit baseline is not rejected (no statistical power)."""
