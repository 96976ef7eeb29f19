import random

import pytest


class FakeClock:
    """Deterministic tick source; stub comparators advance it to simulate work."""

    def __init__(self, jitter: int = 0, seed: int = 0):
        self.now = 0
        self._jitter = jitter
        self._rng = random.Random(seed)

    def __call__(self) -> int:
        return self.now

    def advance(self, ticks: int) -> None:
        self.now += ticks
        if self._jitter:
            self.now += self._rng.randint(0, self._jitter)


def make_early_exit_stub(clock: FakeClock):
    """One tick per byte visited, stopping at the first mismatch."""
    def early_exit(a, b):
        for x, y in zip(a, b):
            clock.advance(1)
            if x != y:
                return False
        return len(a) == len(b)
    return early_exit


def make_constant_time_stub(clock: FakeClock):
    """Always charges one tick per byte."""
    def constant_time(a, b):
        clock.advance(len(a))
        return bytes(a) == bytes(b)
    return constant_time


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def jittery_clock():
    return FakeClock(jitter=3, seed=1234)


@pytest.fixture
def reference():
    return bytes(range(1, 65))
