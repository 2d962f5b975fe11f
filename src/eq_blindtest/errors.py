# src/eq_blindtest/errors.py

"""
Exception hierarchy shared by the response model and the blind-test engine.
"""


class EqBlindTestError(Exception):
    """Base class for all errors raised by eq_blindtest."""


class InvalidParameter(EqBlindTestError, ValueError):
    """Raised when an input value is rejected before any evaluation happens."""


class InvalidSessionOperation(EqBlindTestError):
    """Raised when an operation is not allowed in the current session state."""


class AudioApplyFailed(EqBlindTestError):
    """Raised when the audio-apply collaborator could not push a configuration.

    The session state is left untouched so the same trial can be retried.
    """
