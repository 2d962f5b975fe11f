from .models import (
    Answer,
    PublicSessionState,
    SessionResults,
    SessionState,
    Side,
    Statistics,
    TestMode,
    Trial,
    TrialPhase,
)
from .randomizer import TrialAssignment, TrialRandomizer, is_balanced
from .session import ABTestSession, AudioApplier
from .statistics import summarize, summarize_answers
from .export import export_results_csv, export_results_json, results_to_dict, save_results

__all__ = [
    "Answer",
    "PublicSessionState",
    "SessionResults",
    "SessionState",
    "Side",
    "Statistics",
    "TestMode",
    "Trial",
    "TrialPhase",
    "TrialAssignment",
    "TrialRandomizer",
    "is_balanced",
    "ABTestSession",
    "AudioApplier",
    "summarize",
    "summarize_answers",
    "export_results_csv",
    "export_results_json",
    "results_to_dict",
    "save_results",
]
