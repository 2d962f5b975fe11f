# src/eq_blindtest/ui/response_plot.py

"""Static response-curve plots for reports and the command line."""

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from .. import config
from ..core.spectrum import evaluate

REFERENCE_FREQS = [50, 100, 200, 500, 1000, 2000, 5000, 10000, 20000]


def plot_responses(configurations, output_path, title="Predicted EQ Response"):
    """
    Plot the predicted response of one or more configurations on the shared grid.

    Each curve is labelled with its configuration name and predicted peak gain,
    and the peak is marked. Returns the output path.
    """
    fig, ax = plt.subplots(figsize=(12, 6))
    try:
        for index, configuration in enumerate(configurations):
            curve, peak = evaluate(configuration)
            label = configuration.name or f"Configuration {index + 1}"
            line, = ax.semilogx(curve.frequencies, curve.magnitudes_db,
                                label=f"{label} (peak {peak:+.1f} dB)")
            ax.plot(curve.peak_frequency_hz, peak, "o", color=line.get_color())

        ax.set_title(title)
        ax.set_xlabel('Frequency (Hz)')
        ax.set_ylabel('Magnitude (dB)')
        ax.grid(True, which="both", ls="-", alpha=0.3)
        ax.set_xlim(config.GRID_MIN_FREQ, config.GRID_MAX_FREQ)
        ax.set_xticks(REFERENCE_FREQS)
        ax.set_xticklabels([f"{f // 1000}k" if f >= 1000 else str(f) for f in REFERENCE_FREQS])

        # keep flat curves readable
        low, high = ax.get_ylim()
        if np.ptp([low, high]) < 6:
            mid = (low + high) / 2
            ax.set_ylim(mid - 3, mid + 3)

        ax.axhline(y=0, color='k', linestyle='-', linewidth=0.8)
        ax.legend()
        fig.tight_layout()
        fig.savefig(output_path, dpi=150)
    finally:
        plt.close(fig)
    return output_path
