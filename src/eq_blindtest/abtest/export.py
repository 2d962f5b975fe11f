# src/eq_blindtest/abtest/export.py

"""
Serializes finished session results to plain dicts, JSON and CSV.
"""

import csv
import io
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from .. import config

logger = logging.getLogger(__name__)

CSV_HEADER = ["trial", "hidden_mapping", "x_is_a", "user_choice", "correct", "time_ms", "trim_db"]


def _csv_bool(value):
    if value is None:
        return ""
    return "true" if value else "false"


def results_to_dict(results):
    """JSON-safe dict of a SessionResults."""
    statistics = asdict(results.statistics)
    statistics["confidence_interval"] = list(results.statistics.confidence_interval)
    return {
        "mode": results.mode.value,
        "preset_a": results.preset_a,
        "preset_b": results.preset_b,
        "trim_db": results.trim_db,
        "auto_trim_db": results.auto_trim_db,
        "total_trials": results.total_trials,
        "seed": None if results.seed is None else str(results.seed),
        "answers": [asdict(answer) for answer in results.answers],
        "statistics": statistics,
    }


def export_results_json(results):
    return json.dumps(results_to_dict(results), indent=2)


def export_results_csv(results):
    """One row per answer; quoting follows RFC 4180 via the csv module."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for answer in results.answers:
        writer.writerow([
            answer.trial_index,
            _csv_bool(answer.hidden_mapping),
            _csv_bool(answer.x_is_a),
            answer.user_choice,
            _csv_bool(answer.correct),
            answer.response_time_ms,
            f"{answer.trim_db_at_answer_time:g}",
        ])
    return buffer.getvalue()


def save_results(results, directory=None, stem=None):
    """
    Write <stem>.json and <stem>.csv into `directory` (default config.RESULTS_DIR).
    Returns the two paths.
    """
    directory = Path(directory or config.RESULTS_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    stem = stem or f"ab_test_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

    json_path = directory / f"{stem}.json"
    csv_path = directory / f"{stem}.csv"
    json_path.write_text(export_results_json(results), encoding="utf-8")
    with open(csv_path, "w", newline="", encoding="utf-8") as csvfile:
        csvfile.write(export_results_csv(results))
    logger.info("Results saved to %s and %s", json_path, csv_path)
    return json_path, csv_path
