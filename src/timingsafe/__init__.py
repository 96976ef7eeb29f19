"""
timingsafe: statistical checks that byte comparators do not leak mismatch position through timing.
"""

from .config import HarnessConfig
from .errors import (
    TimingHarnessError,
    ComparatorFault,
    InsufficientSamplesError,
    StatisticalRejection,
    TimingLeakDetected,
    CalibrationError,
)
from .mutator import Category, mutate, restore
from .collector import Measurement, MeasurementSet, TimingCollector, run_trials
from .outliers import filter_outliers, filter_measurements
from .stats import TTestResult, t_test, t_statistic
from .comparators import (
    constant_time_compare,
    compare_digest,
    bytes_eq,
    unsafe_compare,
    get_comparator,
)
from .harness import (
    Verdict,
    TimingReport,
    CalibrationResult,
    TimingHarness,
    decide,
    assert_timing_safe,
)

__all__ = ["HarnessConfig",
                "TimingHarnessError",
                "ComparatorFault",
                "InsufficientSamplesError",
                "StatisticalRejection",
                "TimingLeakDetected",
                "CalibrationError",
                "Category",
                "mutate",
                "restore",
                "Measurement",
                "MeasurementSet",
                "TimingCollector",
                "run_trials",
                "filter_outliers",
                "filter_measurements",
                "TTestResult",
                "t_test",
                "t_statistic",
                "Verdict",
                "TimingReport",
                "CalibrationResult",
                "TimingHarness",
                "decide",
                "assert_timing_safe",
                ]

__all__.extend(["constant_time_compare", "compare_digest", "bytes_eq", "unsafe_compare", "get_comparator"])
__version__ = "1.0.0"
__license__ = "MIT"
