# tests/conftest.py

import pytest

from eq_blindtest.core.filters import Configuration, FilterBand, FilterShape


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start=100.0):
        self.now = start

    def advance(self, seconds):
        self.now += seconds

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config_a():
    return Configuration(
        preamp_db=0.0,
        bands=[FilterBand(FilterShape.PEAKING, 1000.0, 3.0, 1.0)],
        name="Preset A",
    )


@pytest.fixture
def config_b():
    return Configuration(
        preamp_db=-2.0,
        bands=[
            FilterBand(FilterShape.LOW_SHELF, 100.0, 6.0, 0.707),
            FilterBand(FilterShape.HIGH_SHELF, 8000.0, -2.0, 0.707),
        ],
        name="Preset B",
    )
