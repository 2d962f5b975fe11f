# src/eq_blindtest/core/spectrum.py

"""
Samples the filter response model over the shared logarithmic grid.
"""

from dataclasses import dataclass

import numpy as np

from .. import config
from ..utils import log_frequency_grid
from .filters import magnitude_db_array

# One grid for the whole process so curves from different configurations line up.
FREQUENCIES = log_frequency_grid(config.GRID_MIN_FREQ, config.GRID_MAX_FREQ, config.NUM_POINTS)


@dataclass(frozen=True, eq=False)
class ResponseCurve:
    """
    Combined response of a configuration on the shared grid.

    Attributes:
        frequencies (np.ndarray): Grid frequencies in Hz, strictly increasing.
        magnitudes_db (np.ndarray): Preamp plus the sum of all enabled bands, in dB.
    """
    frequencies: np.ndarray
    magnitudes_db: np.ndarray

    def __iter__(self):
        return iter(zip(self.frequencies.tolist(), self.magnitudes_db.tolist()))

    def __len__(self):
        return len(self.frequencies)

    @property
    def peak_frequency_hz(self):
        return float(self.frequencies[int(np.argmax(self.magnitudes_db))])


def compute_response(configuration, frequencies=None, sample_rate=None):
    """
    Sum preamp and every enabled band's magnitude at each frequency.
    Returns a float64 numpy array.
    """
    freqs = FREQUENCIES if frequencies is None else np.asarray(frequencies, dtype=float)
    total = np.full(freqs.shape, configuration.preamp_db, dtype=float)
    for band in configuration.enabled_bands:
        total += magnitude_db_array(freqs, band, sample_rate)
    return total


def evaluate(configuration, sample_rate=None):
    """
    Evaluate a configuration on the shared grid.

    Returns (ResponseCurve, peak_gain_db). The peak is the maximum of the
    summed curve, so overlapping bands that add up constructively are
    accounted for.
    """
    magnitudes = compute_response(configuration, sample_rate=sample_rate)
    magnitudes.setflags(write=False)
    curve = ResponseCurve(frequencies=FREQUENCIES, magnitudes_db=magnitudes)
    return curve, float(np.max(magnitudes))


def peak_gain(configuration, sample_rate=None):
    """Worst-case gain (dB) of a configuration over the shared grid."""
    return evaluate(configuration, sample_rate)[1]
