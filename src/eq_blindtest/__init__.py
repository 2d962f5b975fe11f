"""
eq_blindtest - EQ response prediction and blind listening tests.

Predicts the frequency response of parametric EQ configurations and runs
randomized A/B, blind A/B and ABX comparisons with loudness-matched
playback and exact statistics.
"""

__version__ = "1.0.0"

from .errors import AudioApplyFailed, EqBlindTestError, InvalidParameter, InvalidSessionOperation
from .core import Configuration, FilterBand, FilterShape, auto_trim, evaluate, magnitude_db
from .abtest import ABTestSession, TestMode, summarize

__all__ = [
    "AudioApplyFailed",
    "EqBlindTestError",
    "InvalidParameter",
    "InvalidSessionOperation",
    "Configuration",
    "FilterBand",
    "FilterShape",
    "auto_trim",
    "evaluate",
    "magnitude_db",
    "ABTestSession",
    "TestMode",
    "summarize",
]
