# src/eq_blindtest/abtest/session.py

"""
Blind listening test session: Setup -> Running -> Results.

A session object is the single owner of its trials. All public
operations take the same re-entrant lock, so calls from a UI thread and
a hotkey thread are serialized. Once Results is reached the session is
frozen; run another test with a fresh ABTestSession.
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import replace

from ..core.filters import Configuration
from ..core.loudness import PeakGainStrategy, auto_trim
from ..errors import AudioApplyFailed, InvalidParameter, InvalidSessionOperation
from ..utils import require_finite
from .models import (
    Answer,
    PublicSessionState,
    SessionResults,
    SessionState,
    Side,
    TestMode,
    Trial,
    TrialPhase,
)
from .randomizer import TrialRandomizer
from .statistics import summarize

logger = logging.getLogger(__name__)


class AudioApplier:
    """
    Interface of the collaborator that pushes a configuration to the audio engine.
    Implementations raise on failure; the session never retries.
    """

    def apply(self, configuration, applied_trim_db):
        raise NotImplementedError


class ABTestSession:
    """
    State machine for one A/B, blind A/B or ABX run.

    Attributes:
        mode (TestMode): Test protocol, set by start().
        config_a, config_b (Configuration): The two curves under test.
        total_trials (int): Number of trials in the run.
        trim_db (float): Live gain offset applied to B.
        auto_trim_db (float): Last automatically computed trim.
        trim_is_manual (bool): True once the listener overrides the trim.
        current_trial_index (int): Index of the trial awaiting an answer.
        active_option (str): Last option label that was applied successfully.
    """

    def __init__(self, applier, randomizer=None, loudness_strategy=None, clock=time.monotonic):
        self._applier = applier
        self._randomizer = randomizer or TrialRandomizer()
        self._strategy = loudness_strategy or PeakGainStrategy()
        self._clock = clock
        self._lock = threading.RLock()

        self._state = SessionState.SETUP
        self.mode = None
        self.config_a = None
        self.config_b = None
        self.total_trials = 0
        self.trim_db = 0.0
        self.auto_trim_db = 0.0
        self.trim_is_manual = False
        self.current_trial_index = 0
        self.active_option = None
        self._phase = None
        self._trials = []
        self._trial_started_at = None
        self._statistics = None

    # --- Read-only views ---

    @property
    def state(self):
        return self._state

    @property
    def trials(self):
        with self._lock:
            return tuple(self._trials)

    @property
    def answers(self):
        with self._lock:
            return tuple(t.answer for t in self._trials if t.answer is not None)

    @property
    def current_trial(self):
        with self._lock:
            if self._state is not SessionState.RUNNING:
                return None
            return self._trials[self.current_trial_index]

    @property
    def trial_phase(self):
        return self._phase

    @property
    def statistics(self):
        """Statistics produced when the session entered Results, else None."""
        return self._statistics

    @property
    def seed(self):
        return getattr(self._randomizer, "seed", None)

    # --- Transitions ---

    def start(self, mode, config_a, config_b, total_trials, trim_override=None):
        """
        Validate the setup, compute (or accept) the trim, pre-generate all
        trials and move to Running.
        """
        with self._lock:
            if self._state is not SessionState.SETUP:
                raise InvalidSessionOperation(
                    "Session already started; create a new session for another run.")
            mode = TestMode.from_name(mode)
            for label, cfg in (("config_a", config_a), ("config_b", config_b)):
                if not isinstance(cfg, Configuration):
                    raise InvalidParameter(f"{label} must be a Configuration")
            if config_a == config_b:
                raise InvalidSessionOperation("Configurations A and B are identical.")
            if isinstance(total_trials, bool) or not isinstance(total_trials, int) or total_trials < 1:
                raise InvalidSessionOperation(
                    f"total_trials must be at least 1, got {total_trials!r}")

            auto = auto_trim(config_a, config_b, self._strategy)
            if trim_override is None:
                trim, manual = auto, False
            else:
                trim, manual = require_finite("trim_override", trim_override), True

            plan = self._randomizer.generate(total_trials, with_reference=mode is TestMode.ABX)
            if len(plan) != total_trials:
                raise InvalidSessionOperation(
                    f"Trial plan has {len(plan)} entries, expected {total_trials}.")
            if not self._randomizer.plan_is_balanced(plan):
                raise InvalidSessionOperation("Generated trial plan is not balanced.")

            self.mode = mode
            self.config_a = config_a
            self.config_b = config_b
            self.total_trials = total_trials
            self.auto_trim_db = auto
            self.trim_db = trim
            self.trim_is_manual = manual
            self.current_trial_index = 0
            self._trials = [Trial(i, a.hidden_mapping, a.x_is_a) for i, a in enumerate(plan)]
            self._begin_trial()
            self._state = SessionState.RUNNING
            logger.info("Started %s session: %d trials, trim %.2f dB (%s).",
                        mode.value, total_trials, trim, "manual" if manual else "auto")

    def apply_option(self, label):
        """
        Play the configuration behind a listener-facing label ('A', 'B',
        '1', '2' or 'X'). Only a playback side effect; may be called any
        number of times, the last call wins.
        """
        with self._lock:
            self._require_running("apply an option")
            label = self._normalize_label(label)
            self._push(self._resolve_side(label))
            self.active_option = label
            self._phase = TrialPhase.SWITCHING

    def record_answer(self, choice, trial_index=None):
        """
        Record the listener's answer for the current trial and advance.

        :param choice: 'A'/'B' (AB, and ABX meaning "X is A/B") or '1'/'2' (blind AB).
        :param trial_index: Optional index the caller believes it is answering.
            Answering a trial that already has an answer is an error.
        :return: The recorded Answer.
        """
        with self._lock:
            if self._state is SessionState.SETUP:
                raise InvalidSessionOperation("No active trial: session has not started.")
            if self._state is SessionState.RESULTS:
                raise InvalidSessionOperation("Session is finished; all trials are answered.")
            if trial_index is not None and trial_index != self.current_trial_index:
                if 0 <= trial_index < self.current_trial_index:
                    raise InvalidSessionOperation(f"Trial {trial_index} is already answered.")
                raise InvalidSessionOperation(f"Trial {trial_index} is not the active trial.")

            trial = self._trials[self.current_trial_index]
            if trial.is_answered:
                raise InvalidSessionOperation(f"Trial {trial.index} is already answered.")

            choice = self._normalize_choice(choice)
            correct = None
            if self.mode is TestMode.ABX:
                correct = (choice == "A") == trial.x_is_a

            now = self._clock()
            answer = Answer(
                trial_index=trial.index,
                hidden_mapping=trial.hidden_mapping,
                user_choice=choice,
                response_time_ms=max(0, int(round((now - self._trial_started_at) * 1000))),
                trim_db_at_answer_time=self.trim_db,
                x_is_a=trial.x_is_a,
                correct=correct,
            )
            self._trials[trial.index] = replace(trial, answer=answer)
            self.current_trial_index += 1
            self.active_option = None
            logger.debug("Trial %d answered: %s", trial.index, choice)

            if self.current_trial_index >= self.total_trials:
                self._state = SessionState.RESULTS
                self._phase = None
                self._statistics = summarize(self)
                logger.info("Session finished: %s", self._statistics.verdict)
            else:
                self._begin_trial(now)
            return answer

    def update_trim(self, new_trim_db):
        """Set a manual trim and re-apply the option currently playing."""
        with self._lock:
            self._require_running("update the trim")
            new_trim_db = require_finite("trim_db", new_trim_db)
            with self._rollback_on_apply_failure():
                self.trim_db = new_trim_db
                self.trim_is_manual = True
                self._reapply_active()
            logger.info("Trim set manually to %.2f dB.", self.trim_db)

    def reset_trim_to_auto(self):
        """Drop a manual override and go back to the automatic trim."""
        with self._lock:
            self._require_running("reset the trim")
            with self._rollback_on_apply_failure():
                self.trim_db = self.auto_trim_db
                self.trim_is_manual = False
                self._reapply_active()
            logger.info("Trim reset to auto (%.2f dB).", self.trim_db)

    def refresh_auto_trim(self, strategy=None):
        """
        Recompute the automatic trim. The live trim only follows when the
        listener has not overridden it.
        """
        with self._lock:
            self._require_running("recalculate the trim")
            with self._rollback_on_apply_failure():
                if strategy is not None:
                    self._strategy = strategy
                self.auto_trim_db = auto_trim(self.config_a, self.config_b, self._strategy)
                if not self.trim_is_manual:
                    self.trim_db = self.auto_trim_db
                    self._reapply_active()
            return self.auto_trim_db

    # --- Outward views ---

    def public_state(self):
        """State for display; preset names stay hidden until a blind run ends."""
        with self._lock:
            reveal = self._state is SessionState.RESULTS or self.mode is TestMode.AB
            return PublicSessionState(
                mode=self.mode,
                state=self._state,
                current_trial=self.current_trial_index,
                total_trials=self.total_trials,
                trim_db=self.trim_db,
                auto_trim_db=self.auto_trim_db,
                trim_is_manual=self.trim_is_manual,
                active_option=self.active_option,
                preset_a=self.config_a.name if reveal and self.config_a else None,
                preset_b=self.config_b.name if reveal and self.config_b else None,
            )

    def results(self):
        """Session and statistics bundle for export; only available in Results."""
        with self._lock:
            if self._state is not SessionState.RESULTS:
                raise InvalidSessionOperation("Results are only available after the last trial.")
            return SessionResults(
                mode=self.mode,
                preset_a=self.config_a.name,
                preset_b=self.config_b.name,
                trim_db=self.trim_db,
                auto_trim_db=self.auto_trim_db,
                total_trials=self.total_trials,
                answers=self.answers,
                statistics=self._statistics,
                seed=self.seed,
            )

    # --- Internals ---

    def _begin_trial(self, now=None):
        self._trial_started_at = self._clock() if now is None else now
        self._phase = TrialPhase.READY

    def _require_running(self, action):
        if self._state is not SessionState.RUNNING:
            raise InvalidSessionOperation(
                f"Cannot {action} while the session is {self._state.value}.")

    def _normalize_label(self, label):
        label = str(label).strip().upper()
        if label not in self.mode.option_labels:
            raise InvalidParameter(
                f"Option {label!r} is not valid in {self.mode.value} mode "
                f"(expected one of {', '.join(self.mode.option_labels)}).")
        return label

    def _normalize_choice(self, choice):
        choice = str(choice).strip().upper()
        if choice not in self.mode.answer_choices:
            raise InvalidParameter(
                f"Answer {choice!r} is not valid in {self.mode.value} mode "
                f"(expected one of {', '.join(self.mode.answer_choices)}).")
        return choice

    def _resolve_side(self, label):
        trial = self._trials[self.current_trial_index]
        if label == "X":
            return Side.A if trial.x_is_a else Side.B
        if label in ("1", "2"):
            option_1_is_a = trial.hidden_mapping
            return Side.A if (label == "1") == option_1_is_a else Side.B
        return Side(label)

    def _push(self, side):
        if side is Side.A:
            configuration, trim = self.config_a, 0.0
        else:
            configuration, trim = self.config_b, self.trim_db
        logger.debug("Applying %s with trim %.2f dB.", side.value, trim)
        try:
            self._applier.apply(configuration, trim)
        except AudioApplyFailed:
            logger.error("Audio apply failed for trial %d.", self.current_trial_index)
            raise
        except Exception as e:
            logger.error("Audio apply failed for trial %d: %s", self.current_trial_index, e)
            raise AudioApplyFailed(f"Failed to apply configuration: {e}") from e

    @contextmanager
    def _rollback_on_apply_failure(self):
        # trim fields only change when the engine accepted the new trim
        saved = (self.trim_db, self.trim_is_manual, self.auto_trim_db, self._strategy)
        try:
            yield
        except AudioApplyFailed:
            self.trim_db, self.trim_is_manual, self.auto_trim_db, self._strategy = saved
            logger.warning("Trim change rolled back to %.2f dB.", self.trim_db)
            raise

    def _reapply_active(self):
        if self.active_option is not None:
            self._push(self._resolve_side(self.active_option))
