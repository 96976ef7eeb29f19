import pytest
from hypothesis import given, strategies as st

from timingsafe.collector import Measurement, MeasurementSet
from timingsafe.errors import InsufficientSamplesError
from timingsafe.mutator import Category
from timingsafe.outliers import filter_measurements, filter_outliers, require_samples

# ---------------------------------------------------------------------------
# Normal behavior tests
# ---------------------------------------------------------------------------

def test_removes_single_value_100x_mean_of_rest():
    rest = [1] * 999
    spike = 100 * (sum(rest) / len(rest))
    samples = rest[:500] + [spike] + rest[500:]
    kept = filter_outliers(samples, 50)
    assert kept == rest


def test_keeps_moderate_spikes():
    # 1000 is only ~5x the mean of this sample.
    samples = [1, 1, 1, 1, 1000]
    assert filter_outliers(samples, 50) == samples


def test_ratio_exactly_at_multiplier_is_dropped():
    # mean = 2.0; 100 / 2.0 == 50
    samples = [0] * 48 + [100] + [0]
    assert filter_outliers(samples, 50) == [0] * 49


def test_custom_multiplier():
    samples = [10, 10, 10, 100]
    # mean 32.5; 100 / 32.5 ~ 3.08
    assert filter_outliers(samples, 3) == [10, 10, 10]
    assert filter_outliers(samples, 4) == samples


def test_all_zero_samples_are_kept():
    assert filter_outliers([0, 0, 0], 50) == [0, 0, 0]


def test_empty_input():
    assert filter_outliers([], 50) == []


def test_filter_measurements_per_category_preserves_order():
    fast = [5] * 99 + [10_000]
    slow = [10_000] * 100
    raw = []
    for i in range(200):
        if i % 2 == 0:
            raw.append(Measurement(i, Category.FAST, fast[i // 2]))
        else:
            raw.append(Measurement(i, Category.SLOW, slow[i // 2]))
    filtered = filter_measurements(MeasurementSet(tuple(raw)), 50)

    # The fast spike is removed; the equally large slow values are not,
    # since each category is judged against its own mean.
    assert len(filtered.fast) == 99
    assert len(filtered.slow) == 100
    assert 198 not in [m.trial_index for m in filtered]
    indices = [m.trial_index for m in filtered]
    assert indices == sorted(indices)


def test_require_samples_guard():
    require_samples([1, 2], 2)
    with pytest.raises(InsufficientSamplesError):
        require_samples([1], 2, "fast samples")

# ---------------------------------------------------------------------------
# Hypothesis fuzz tests
# ---------------------------------------------------------------------------

@pytest.mark.fuzz
@given(st.lists(st.integers(min_value=0, max_value=10**9), max_size=200))
def test_filter_is_order_preserving_subsequence_fuzz(samples):
    kept = filter_outliers(samples, 50)
    it = iter(samples)
    assert all(any(k == s for s in it) for k in kept)
    if samples and sum(samples):
        mean = sum(samples) / len(samples)
        assert all(k / mean < 50 for k in kept)
