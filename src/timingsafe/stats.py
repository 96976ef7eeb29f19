"""
timingsafe.stats
----------------

Pooled two-sample Student's t-test over timing samples.

https://wikipedia.org/wiki/Student%27s_t-test#Independent_two-sample_t-test

All functions are pure and deterministic. Sums go through math.fsum so the
result does not drift with sample count or order of magnitude.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from .errors import InsufficientSamplesError

Samples = Sequence[float]


class TTestResult(NamedTuple):
    fast_mean: float
    slow_mean: float
    pooled_std_dev: float
    standard_error: float
    t_statistic: float


def _require(xs: Samples, minimum: int) -> None:
    if len(xs) < minimum:
        raise InsufficientSamplesError(
            f"need at least {minimum} samples, got {len(xs)}"
        )


def mean(xs: Samples) -> float:
    _require(xs, 1)
    return math.fsum(xs) / len(xs)


def sample_std_dev(xs: Samples) -> float:
    """Sample standard deviation with Bessel's correction."""
    _require(xs, 2)
    m = mean(xs)
    return math.sqrt(math.fsum((x - m) ** 2 for x in xs) / (len(xs) - 1))


def pooled_std_dev(a: Samples, b: Samples) -> float:
    """Common standard deviation of two samples assumed to share a variance."""
    sum_a = sample_std_dev(a) ** 2 * (len(a) - 1)
    sum_b = sample_std_dev(b) ** 2 * (len(b) - 1)
    return math.sqrt((sum_a + sum_b) / (len(a) + len(b) - 2))


def standard_error(a: Samples, b: Samples) -> float:
    return pooled_std_dev(a, b) * math.sqrt(1 / len(a) + 1 / len(b))


def _t_from(mean_a: float, mean_b: float, std_err: float) -> float:
    diff = mean_a - mean_b
    if std_err == 0:
        # Zero variance in both samples: any difference is infinitely significant.
        return 0.0 if diff == 0 else math.copysign(math.inf, diff)
    return diff / std_err


def t_statistic(a: Samples, b: Samples) -> float:
    return _t_from(mean(a), mean(b), standard_error(a, b))


def t_test(fast: Samples, slow: Samples) -> TTestResult:
    """Compute every intermediate of the fast-vs-slow t-test in one pass."""
    fast_mean = mean(fast)
    slow_mean = mean(slow)
    pooled = pooled_std_dev(fast, slow)
    std_err = pooled * math.sqrt(1 / len(fast) + 1 / len(slow))
    return TTestResult(
        fast_mean=fast_mean,
        slow_mean=slow_mean,
        pooled_std_dev=pooled,
        standard_error=std_err,
        t_statistic=_t_from(fast_mean, slow_mean, std_err),
    )
