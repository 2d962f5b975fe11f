from .filters import (
    BiquadCoefficients,
    Configuration,
    FilterBand,
    FilterShape,
    biquad_coefficients,
    magnitude_db,
    magnitude_db_array,
)
from .spectrum import FREQUENCIES, ResponseCurve, compute_response, evaluate, peak_gain
from .loudness import (
    LoudnessStrategy,
    NominalBoostStrategy,
    PeakGainStrategy,
    auto_trim,
    get_strategy,
)

__all__ = [
    "BiquadCoefficients",
    "Configuration",
    "FilterBand",
    "FilterShape",
    "biquad_coefficients",
    "magnitude_db",
    "magnitude_db_array",
    "FREQUENCIES",
    "ResponseCurve",
    "compute_response",
    "evaluate",
    "peak_gain",
    "LoudnessStrategy",
    "NominalBoostStrategy",
    "PeakGainStrategy",
    "auto_trim",
    "get_strategy",
]
