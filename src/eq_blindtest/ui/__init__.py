from .response_plot import plot_responses

__all__ = ["plot_responses"]
