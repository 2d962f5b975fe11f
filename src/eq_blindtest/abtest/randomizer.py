# src/eq_blindtest/abtest/randomizer.py

"""
Hidden-mapping assignment for blind trials.

Instead of an independent coin flip per trial, a balanced multiset of
True/False values is built and shuffled once. Each trial is still
unpredictable to the listener while the overall split stays within one
trial of 50/50.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .. import config
from ..errors import InvalidParameter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialAssignment:
    hidden_mapping: bool  # True = option 1 plays A
    x_is_a: Optional[bool] = None  # ABX only


def is_balanced(values, tolerance=None):
    """
    Check that the share of True values is within `tolerance` of 0.5.
    A split that differs by a single trial is always accepted, since
    that is the best an odd or tiny session can do.
    """
    tolerance = config.BALANCE_TOLERANCE if tolerance is None else tolerance
    values = [bool(v) for v in values]
    if not values:
        return False
    trues = sum(values)
    falses = len(values) - trues
    if abs(trues - falses) <= 1:
        return True
    return abs(trues / len(values) - 0.5) <= tolerance


class TrialRandomizer:
    """
    Generates per-trial hidden mappings (and ABX references).

    Attributes:
        seed (int): Entropy of the underlying SeedSequence, kept so a plan can be replayed.
        balance_tolerance (float): Allowed deviation of the True share from 0.5.
    """

    def __init__(self, seed=None, balance_tolerance=None):
        seed_sequence = np.random.SeedSequence(seed)
        self.seed = seed_sequence.entropy
        self.balance_tolerance = (config.BALANCE_TOLERANCE if balance_tolerance is None
                                  else balance_tolerance)
        self._rng = np.random.default_rng(seed_sequence)
        self._plan: Optional[List[TrialAssignment]] = None

    def _balanced_sequence(self, n):
        # odd counts: a random side gets the extra trial
        extra = int(self._rng.integers(0, 2)) if n % 2 else 0
        trues = n // 2 + extra
        values = np.array([True] * trues + [False] * (n - trues))
        self._rng.shuffle(values)
        return [bool(v) for v in values]

    def generate(self, total_trials, with_reference=False):
        """
        Pre-generate assignments for a whole session.

        :param total_trials: Number of trials, at least 1.
        :param with_reference: Also draw an independent X reference per trial (ABX).
        :return: List of TrialAssignment, one per trial.
        """
        if isinstance(total_trials, bool) or not isinstance(total_trials, int) or total_trials < 1:
            raise InvalidParameter(f"total_trials must be a positive integer, got {total_trials!r}")

        mappings = self._balanced_sequence(total_trials)
        references = (self._balanced_sequence(total_trials) if with_reference
                      else [None] * total_trials)
        self._plan = [TrialAssignment(m, x) for m, x in zip(mappings, references)]
        logger.debug("Generated plan for %d trials (%d with option 1 = A).",
                     total_trials, sum(mappings))
        return list(self._plan)

    def assign_trial(self, trial_index, total_trials, with_reference=False):
        """
        Assignment for one trial, drawn from the current pre-generated plan.
        A new plan is generated when none exists for this session length.
        """
        plan = self._plan
        if (plan is None or len(plan) != total_trials
                or (with_reference and plan[0].x_is_a is None)):
            plan = self.generate(total_trials, with_reference)
        if not 0 <= trial_index < total_trials:
            raise InvalidParameter(f"trial_index {trial_index} outside 0..{total_trials - 1}")
        return plan[trial_index]

    def plan_is_balanced(self, plan):
        """True when both mappings and references (if any) of a plan are balanced."""
        if not is_balanced([a.hidden_mapping for a in plan], self.balance_tolerance):
            return False
        references = [a.x_is_a for a in plan if a.x_is_a is not None]
        return not references or is_balanced(references, self.balance_tolerance)
