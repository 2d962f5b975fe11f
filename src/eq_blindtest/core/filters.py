# src/eq_blindtest/core/filters.py

"""
Parametric filter descriptions and their biquad magnitude response.

The coefficient formulas follow the RBJ Audio EQ Cookbook, the same
formulas Equalizer APO uses, so a predicted curve matches what the
engine actually plays. Shelving filters take Q through the slope
mapping S = 1 / (2 Q^2).

Degenerate parameters (a gain so large that 10^(gain/40) overflows, a
negative shelf radicand, a zero or non-finite squared magnitude) do not
raise: the magnitude saturates to ``config.MAGNITUDE_FLOOR_DB``. Invalid
inputs are rejected earlier, when a FilterBand is built.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .. import config
from ..errors import InvalidParameter
from ..utils import require_finite

logger = logging.getLogger(__name__)


class FilterShape(Enum):
    PEAKING = "peaking"
    LOW_SHELF = "lowshelf"
    HIGH_SHELF = "highshelf"

    @classmethod
    def from_code(cls, code):
        """
        Resolve a filter type name or Equalizer APO code (e.g. 'PK', 'LSC', 'hs').
        Raises InvalidParameter for anything unknown.
        """
        if isinstance(code, cls):
            return code
        try:
            return _SHAPE_ALIASES[str(code).strip().lower()]
        except KeyError:
            raise InvalidParameter(f"Unknown filter type: {code!r}") from None

    @property
    def eapo_code(self):
        return _EAPO_CODES[self]


_SHAPE_ALIASES = {
    "peaking": FilterShape.PEAKING,
    "pk": FilterShape.PEAKING,
    "peq": FilterShape.PEAKING,
    "lowshelf": FilterShape.LOW_SHELF,
    "low shelf": FilterShape.LOW_SHELF,
    "ls": FilterShape.LOW_SHELF,
    "lsc": FilterShape.LOW_SHELF,
    "highshelf": FilterShape.HIGH_SHELF,
    "high shelf": FilterShape.HIGH_SHELF,
    "hs": FilterShape.HIGH_SHELF,
    "hsc": FilterShape.HIGH_SHELF,
}

_EAPO_CODES = {
    FilterShape.PEAKING: "PK",
    FilterShape.LOW_SHELF: "LSC",
    FilterShape.HIGH_SHELF: "HSC",
}


@dataclass(frozen=True)
class FilterBand:
    """
    A single parametric filter.

    Attributes:
        shape (FilterShape): Peaking, low shelf or high shelf.
        center_frequency_hz (float): Centre/corner frequency, 20..20000 Hz.
        gain_db (float): Boost or cut in dB. Any finite value is accepted.
        q_factor (float): Bandwidth parameter, strictly positive.
        enabled (bool): Disabled bands contribute nothing to a response.
    """
    shape: FilterShape
    center_frequency_hz: float
    gain_db: float
    q_factor: float
    enabled: bool = True

    def __post_init__(self):
        object.__setattr__(self, "shape", FilterShape.from_code(self.shape))
        fc = require_finite("center_frequency_hz", self.center_frequency_hz)
        if not config.BAND_MIN_FREQ <= fc <= config.BAND_MAX_FREQ:
            raise InvalidParameter(
                f"center_frequency_hz must be within {config.BAND_MIN_FREQ:g}.."
                f"{config.BAND_MAX_FREQ:g} Hz, got {fc:g}"
            )
        q = require_finite("q_factor", self.q_factor)
        if q <= 0:
            raise InvalidParameter(f"q_factor must be positive, got {q:g}")
        object.__setattr__(self, "center_frequency_hz", fc)
        object.__setattr__(self, "gain_db", require_finite("gain_db", self.gain_db))
        object.__setattr__(self, "q_factor", q)
        object.__setattr__(self, "enabled", bool(self.enabled))


@dataclass(frozen=True)
class Configuration:
    """
    One complete EQ curve: a preamp plus an ordered list of bands.
    The name is a display label only and does not take part in equality.
    """
    preamp_db: float = 0.0
    bands: Tuple[FilterBand, ...] = ()
    name: str = field(default="", compare=False)

    def __post_init__(self):
        object.__setattr__(self, "preamp_db", require_finite("preamp_db", self.preamp_db))
        bands = tuple(self.bands)
        for band in bands:
            if not isinstance(band, FilterBand):
                raise InvalidParameter(f"Expected FilterBand, got {type(band).__name__}")
        object.__setattr__(self, "bands", bands)

    @property
    def enabled_bands(self):
        return tuple(band for band in self.bands if band.enabled)


class BiquadCoefficients(NamedTuple):
    """Biquad coefficients normalized so that a0 == 1."""
    b0: float
    b1: float
    b2: float
    a1: float
    a2: float


def _clamp(value, low, high):
    return max(low, min(value, high))


def _resolve_sample_rate(sample_rate):
    if sample_rate is None:
        return config.SAMPLE_RATE
    fs = require_finite("sample_rate", sample_rate)
    if fs <= 0:
        raise InvalidParameter(f"sample_rate must be positive, got {sample_rate!r}")
    return fs


def biquad_coefficients(band, sample_rate=None) -> Optional[BiquadCoefficients]:
    """
    Compute normalized RBJ cookbook coefficients for a band.
    Returns None when the parameters are numerically degenerate.
    """
    fs = _resolve_sample_rate(sample_rate)
    fc = _clamp(band.center_frequency_hz, config.MIN_CENTER_FREQ_HZ,
                fs / 2 - config.NYQUIST_MARGIN_HZ)
    w0 = 2 * math.pi * fc / fs
    cos_w0 = math.cos(w0)
    sin_w0 = math.sin(w0)

    try:
        A = 10 ** (band.gain_db / 40)
        if band.shape is FilterShape.PEAKING:
            alpha = sin_w0 / (2 * band.q_factor)
            b0 = 1 + alpha * A
            b1 = -2 * cos_w0
            b2 = 1 - alpha * A
            a0 = 1 + alpha / A
            a1 = -2 * cos_w0
            a2 = 1 - alpha / A
        else:
            safe_q = max(config.SHELF_MIN_Q, band.q_factor)
            S = 1 / (2 * safe_q * safe_q)
            radicand = (A + 1 / A) * (1 / S - 1) + 2
            if not radicand >= 0:
                logger.debug("Negative shelf radicand for %s; saturating.", band)
                return None
            alpha = (sin_w0 / 2) * math.sqrt(radicand)
            two_sqrt_a_alpha = 2 * math.sqrt(A) * alpha

            if band.shape is FilterShape.LOW_SHELF:
                b0 = A * ((A + 1) - (A - 1) * cos_w0 + two_sqrt_a_alpha)
                b1 = 2 * A * ((A - 1) - (A + 1) * cos_w0)
                b2 = A * ((A + 1) - (A - 1) * cos_w0 - two_sqrt_a_alpha)
                a0 = (A + 1) + (A - 1) * cos_w0 + two_sqrt_a_alpha
                a1 = -2 * ((A - 1) + (A + 1) * cos_w0)
                a2 = (A + 1) + (A - 1) * cos_w0 - two_sqrt_a_alpha
            else:
                b0 = A * ((A + 1) + (A - 1) * cos_w0 + two_sqrt_a_alpha)
                b1 = -2 * A * ((A - 1) + (A + 1) * cos_w0)
                b2 = A * ((A + 1) + (A - 1) * cos_w0 - two_sqrt_a_alpha)
                a0 = (A + 1) - (A - 1) * cos_w0 + two_sqrt_a_alpha
                a1 = 2 * ((A - 1) - (A + 1) * cos_w0)
                a2 = (A + 1) - (A - 1) * cos_w0 - two_sqrt_a_alpha

        coeffs = BiquadCoefficients(b0 / a0, b1 / a0, b2 / a0, a1 / a0, a2 / a0)
    except (OverflowError, ZeroDivisionError):
        logger.debug("Degenerate coefficients for %s; saturating.", band)
        return None

    if not all(math.isfinite(c) for c in coeffs):
        logger.debug("Non-finite coefficients for %s; saturating.", band)
        return None
    return coeffs


def _squared_magnitude(coeffs, cos_w, sin_w, cos_2w, sin_2w):
    # H(e^jw) split into real/imaginary parts; works for floats and numpy arrays
    b0, b1, b2, a1, a2 = coeffs
    num_real = b0 + b1 * cos_w + b2 * cos_2w
    num_imag = -(b1 * sin_w + b2 * sin_2w)
    den_real = 1 + a1 * cos_w + a2 * cos_2w
    den_imag = -(a1 * sin_w + a2 * sin_2w)
    return (num_real * num_real + num_imag * num_imag) / (den_real * den_real + den_imag * den_imag)


def magnitude_db(frequency_hz, band, sample_rate=None):
    """
    Magnitude response of a single band at frequency_hz, in dB.

    Negative frequencies raise InvalidParameter and frequencies above fs/2
    are clamped to Nyquist. Degenerate cases return config.MAGNITUDE_FLOOR_DB instead of NaN or infinity.
    """
    fs = _resolve_sample_rate(sample_rate)
    freq = require_finite("frequency_hz", frequency_hz)
    if freq < 0:
        raise InvalidParameter(f"frequency_hz must not be negative, got {frequency_hz!r}")
    freq = min(freq, fs / 2)
    coeffs = biquad_coefficients(band, fs)
    if coeffs is None:
        return config.MAGNITUDE_FLOOR_DB

    w = 2 * math.pi * freq / fs
    try:
        mag_squared = _squared_magnitude(coeffs, math.cos(w), math.sin(w),
                                         math.cos(2 * w), math.sin(2 * w))
    except (OverflowError, ZeroDivisionError):
        return config.MAGNITUDE_FLOOR_DB

    if mag_squared <= 0 or not math.isfinite(mag_squared):
        return config.MAGNITUDE_FLOOR_DB
    return 10 * math.log10(mag_squared)


def magnitude_db_array(frequencies, band, sample_rate=None):
    """
    Vectorized magnitude_db over an array of frequencies.
    Returns a float64 numpy array of the same length.
    """
    fs = _resolve_sample_rate(sample_rate)
    freqs = np.asarray(frequencies, dtype=float)
    if not np.all(np.isfinite(freqs)) or np.any(freqs < 0):
        raise InvalidParameter("frequencies must be finite and non-negative")
    freqs = np.minimum(freqs, fs / 2)
    coeffs = biquad_coefficients(band, fs)
    result = np.full(freqs.shape, config.MAGNITUDE_FLOOR_DB, dtype=float)
    if coeffs is None:
        return result

    w = 2 * np.pi * freqs / fs
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        mag_squared = _squared_magnitude(coeffs, np.cos(w), np.sin(w),
                                         np.cos(2 * w), np.sin(2 * w))
        valid = np.isfinite(mag_squared) & (mag_squared > 0)
        result[valid] = 10 * np.log10(mag_squared[valid])
    return result
