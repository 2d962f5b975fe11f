# src/eq_blindtest/abtest/statistics.py

"""
Hypothesis tests for finished blind-test sessions.

Everything is recomputed from the answer log on each call; nothing is
accumulated while the session runs.
"""

import logging

from scipy import stats

from .. import config
from ..errors import InvalidSessionOperation
from .models import SessionState, Statistics, TestMode

logger = logging.getLogger(__name__)


def binomial_p_value(successes, trials, p=0.5):
    """Two-sided exact binomial test of `successes` out of `trials` against p."""
    if trials <= 0:
        raise InvalidSessionOperation("Cannot test an empty set of trials.")
    return float(stats.binomtest(successes, trials, p, alternative="two-sided").pvalue)


def chi_square_p_value(count_a, count_b):
    """Chi-square goodness-of-fit of an A/B preference split against 50/50."""
    if count_a + count_b <= 0:
        raise InvalidSessionOperation("Cannot test an empty set of preferences.")
    return float(stats.chisquare([count_a, count_b]).pvalue)


def wilson_interval(successes, trials, confidence=None):
    """Wilson score interval for a binomial proportion."""
    confidence = config.CONFIDENCE_LEVEL if confidence is None else confidence
    if trials <= 0:
        raise InvalidSessionOperation("Cannot build an interval from zero trials.")
    ci = stats.binomtest(successes, trials).proportion_ci(
        confidence_level=confidence, method="wilson")
    return float(ci.low), float(ci.high)


def verdict_for(p_value):
    if p_value < config.P_VALUE_EXTREMELY_SIGNIFICANT:
        return "Extremely significant (p < 0.001)"
    if p_value < config.P_VALUE_HIGHLY_SIGNIFICANT:
        return "Highly significant (p < 0.01)"
    if p_value < config.P_VALUE_SIGNIFICANT:
        return "Significant (p < 0.05)"
    return "Not significant (p >= 0.05)"


def preferred_a(mode, answer):
    """Un-blind a preference answer: did the listener pick configuration A?"""
    if mode is TestMode.BLIND_AB:
        chose_option_1 = answer.user_choice == "1"
        return chose_option_1 == answer.hidden_mapping
    return answer.user_choice == "A"


def summarize_answers(mode, answers):
    """
    Compute Statistics for a complete answer log.
    Raises InvalidSessionOperation for an empty log.
    """
    mode = TestMode.from_name(mode)
    answers = list(answers)
    if not answers:
        raise InvalidSessionOperation("No answers recorded; nothing to summarize.")

    preference_a = preference_b = correct = incorrect = 0
    if mode is TestMode.ABX:
        for answer in answers:
            if answer.correct:
                correct += 1
            else:
                incorrect += 1
        n = correct + incorrect
        p_value = binomial_p_value(correct, n)
        successes = correct
        test_name = "exact binomial (two-sided)"
    else:
        for answer in answers:
            if preferred_a(mode, answer):
                preference_a += 1
            else:
                preference_b += 1
        n = preference_a + preference_b
        p_value = chi_square_p_value(preference_a, preference_b)
        successes = preference_a
        test_name = "chi-square goodness of fit"

    statistics = Statistics(
        preference_count_a=preference_a,
        preference_count_b=preference_b,
        correct_count=correct,
        incorrect_count=incorrect,
        p_value=p_value,
        verdict=verdict_for(p_value),
        test_name=test_name,
        proportion=successes / n,
        confidence_interval=wilson_interval(successes, n),
    )
    logger.info("%s: %d trials, p=%.4f -> %s", mode.value, n, p_value, statistics.verdict)
    return statistics


def summarize(session):
    """Statistics for a session that has reached the Results state."""
    if session.state is not SessionState.RESULTS:
        raise InvalidSessionOperation(
            f"Statistics are only available in Results, session is {session.state.value}.")
    return summarize_answers(session.mode, session.answers)
