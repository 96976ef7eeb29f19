import dataclasses

import pytest

from timingsafe.config import HarnessConfig


def test_defaults():
    config = HarnessConfig()
    assert config.num_trials == 100_000
    assert config.total_trials == 200_000
    assert config.buffer_size == 16384
    assert config.outlier_multiplier == 50.0
    assert config.critical_value == 3.892
    assert config.min_samples == 2
    assert config.disable_gc is True


def test_with_overrides_returns_copy():
    config = HarnessConfig()
    small = config.with_overrides(num_trials=10, critical_value=2.0)
    assert small.num_trials == 10
    assert small.critical_value == 2.0
    assert config.num_trials == 100_000


def test_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        HarnessConfig().num_trials = 5


@pytest.mark.parametrize(
    "changes",
    [
        {"num_trials": 0},
        {"buffer_size": 0},
        {"outlier_multiplier": 1.0},
        {"critical_value": 0},
        {"min_samples": 1},
    ],
)
def test_invalid_values(changes):
    with pytest.raises(ValueError):
        HarnessConfig(**changes)
    with pytest.raises(ValueError):
        HarnessConfig().with_overrides(**changes)
