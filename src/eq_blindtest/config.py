# src/eq_blindtest/config.py

"""
Central configuration settings for the EQ blind-test application.
"""

import os
from pathlib import Path

# =============================================================================
# FILTER RESPONSE SETTINGS
# =============================================================================
SAMPLE_RATE = 48000  # Hz, the rate the external equalizer engine runs at
MAGNITUDE_FLOOR_DB = -100.0  # dB returned for degenerate filter evaluations
SHELF_MIN_Q = 1e-4  # Q floor for the shelf slope conversion S = 1 / (2 Q^2)
NYQUIST_MARGIN_HZ = 1.0  # centre frequencies stay this far below fs/2
MIN_CENTER_FREQ_HZ = 1.0

# Accepted input ranges for a filter band
BAND_MIN_FREQ = 20.0  # Hz
BAND_MAX_FREQ = 20000.0  # Hz

# =============================================================================
# SPECTRUM GRID
# =============================================================================
NUM_POINTS = 200  # log-spaced evaluation points shared by every curve
GRID_MIN_FREQ = 20.0  # Hz
GRID_MAX_FREQ = 20000.0  # Hz

# =============================================================================
# BLIND TEST SETTINGS
# =============================================================================
DEFAULT_TOTAL_TRIALS = 10
BALANCE_TOLERANCE = 0.15  # max deviation of the hidden mapping share from 0.5

# =============================================================================
# STATISTICS
# =============================================================================
P_VALUE_EXTREMELY_SIGNIFICANT = 0.001
P_VALUE_HIGHLY_SIGNIFICANT = 0.01
P_VALUE_SIGNIFICANT = 0.05
CONFIDENCE_LEVEL = 0.95  # Wilson score interval

# =============================================================================
# FILE PATHS
# =============================================================================
EQ_CONFIG_PATH = os.environ.get(
    "EQ_BLINDTEST_CONFIG_PATH",
    r"C:\Program Files\EqualizerAPO\config\live_config.txt",
)
RESULTS_DIR = Path.home() / "eq_blindtest" / "ab_results"
