# src/eq_blindtest/abtest/models.py

"""
Value types for blind listening sessions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..errors import InvalidParameter


class TestMode(Enum):
    """How the two configurations are presented to the listener."""
    AB = "ab"            # sighted A/B switching
    BLIND_AB = "blindab"  # options 1/2 hide which one is A
    ABX = "abx"          # identify whether hidden X is A or B

    @classmethod
    def from_name(cls, name):
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise InvalidParameter(f"Unknown test mode: {name!r}") from None

    @property
    def option_labels(self):
        """Labels the listener can switch between."""
        if self is TestMode.BLIND_AB:
            return ("1", "2")
        if self is TestMode.ABX:
            return ("A", "B", "X")
        return ("A", "B")

    @property
    def answer_choices(self):
        """Valid answers. In ABX, 'A' means 'X is A'."""
        if self is TestMode.BLIND_AB:
            return ("1", "2")
        return ("A", "B")

    @property
    def is_blind(self):
        return self is not TestMode.AB


class SessionState(Enum):
    SETUP = "setup"
    RUNNING = "running"
    RESULTS = "results"


class TrialPhase(Enum):
    READY = "ready"          # trial shown, nothing played yet
    SWITCHING = "switching"  # listener is toggling between options


class Side(Enum):
    A = "A"
    B = "B"


@dataclass(frozen=True)
class Answer:
    trial_index: int
    hidden_mapping: bool
    user_choice: str
    response_time_ms: int
    trim_db_at_answer_time: float
    x_is_a: Optional[bool] = None
    correct: Optional[bool] = None


@dataclass(frozen=True)
class Trial:
    """
    One trial of a session.

    hidden_mapping is True when option 1 plays A. x_is_a is only set in
    ABX mode. The answer is filled exactly once.
    """
    index: int
    hidden_mapping: bool
    x_is_a: Optional[bool] = None
    answer: Optional[Answer] = None

    @property
    def is_answered(self):
        return self.answer is not None


@dataclass(frozen=True)
class Statistics:
    """
    Summary of a finished session.

    p_value comes from a two-sided exact binomial test for ABX and a
    chi-square goodness-of-fit test against 50/50 for preference modes.
    confidence_interval is the Wilson score interval for `proportion`
    (share correct in ABX, share preferring A otherwise).
    """
    preference_count_a: int
    preference_count_b: int
    correct_count: int
    incorrect_count: int
    p_value: float
    verdict: str
    test_name: str
    proportion: float
    confidence_interval: Tuple[float, float]

    @property
    def total(self):
        return (self.preference_count_a + self.preference_count_b
                + self.correct_count + self.incorrect_count)


@dataclass(frozen=True)
class SessionResults:
    """Everything handed outward once a session reaches Results."""
    mode: TestMode
    preset_a: str
    preset_b: str
    trim_db: float
    auto_trim_db: float
    total_trials: int
    answers: Tuple[Answer, ...]
    statistics: Statistics
    seed: Optional[int] = None


@dataclass(frozen=True)
class PublicSessionState:
    """Session view that is safe to show during a blind test."""
    mode: Optional[TestMode]
    state: SessionState
    current_trial: int
    total_trials: int
    trim_db: float
    auto_trim_db: float
    trim_is_manual: bool
    active_option: Optional[str]
    preset_a: Optional[str]
    preset_b: Optional[str]
