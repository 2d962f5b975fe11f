# src/eq_blindtest/core/loudness.py

"""
Loudness matching between two EQ configurations.

The default strategy matches predicted peak gain, a heuristic stand-in
for perceived loudness with no frequency weighting. Other estimators can
be plugged in by subclassing LoudnessStrategy.
"""

import logging

from ..errors import InvalidParameter
from .spectrum import peak_gain

logger = logging.getLogger(__name__)


class LoudnessStrategy:
    """Estimates a single loudness figure (dB) for a configuration."""

    name = "base"

    def estimate(self, configuration):
        raise NotImplementedError


class PeakGainStrategy(LoudnessStrategy):
    """Worst-case gain of the summed response over the shared grid."""

    name = "peak"

    def __init__(self, sample_rate=None):
        self.sample_rate = sample_rate

    def estimate(self, configuration):
        return peak_gain(configuration, self.sample_rate)


class NominalBoostStrategy(LoudnessStrategy):
    """
    Preamp plus the largest positive band gain. Cuts are ignored and
    overlapping bands are not summed.
    """

    name = "nominal"

    def estimate(self, configuration):
        boosts = [band.gain_db for band in configuration.enabled_bands if band.gain_db > 0]
        return configuration.preamp_db + max(boosts, default=0.0)


STRATEGIES = {
    PeakGainStrategy.name: PeakGainStrategy,
    NominalBoostStrategy.name: NominalBoostStrategy,
}


def get_strategy(name):
    """Instantiate a strategy by its registered name ('peak' or 'nominal')."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise InvalidParameter(f"Unknown loudness strategy: {name!r}") from None


def auto_trim(config_a, config_b, strategy=None):
    """
    Gain offset (dB) to apply to B so its estimated loudness matches A.
    Negative when B is louder.
    """
    strategy = strategy or PeakGainStrategy()
    loudness_a = strategy.estimate(config_a)
    loudness_b = strategy.estimate(config_b)
    trim = loudness_a - loudness_b
    logger.debug("Auto trim (%s): A=%.2f dB, B=%.2f dB -> %.2f dB",
                 strategy.name, loudness_a, loudness_b, trim)
    return trim
