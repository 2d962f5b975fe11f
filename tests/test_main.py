# tests/test_main.py

import json

import pytest
from unittest.mock import patch

from eq_blindtest.cli.__main__ import main
from eq_blindtest.eq_control.equalizer_apo import EqualizerPreset


@pytest.fixture
def preset_files(tmp_path, config_a, config_b):
    path_a = tmp_path / "preset_a.txt"
    path_b = tmp_path / "preset_b.txt"
    EqualizerPreset.from_configuration(config_a).apply_to_file(str(path_a))
    EqualizerPreset.from_configuration(config_b).apply_to_file(str(path_b))
    return str(path_a), str(path_b)


def test_trim_command(preset_files, capsys):
    assert main(["trim", *preset_files]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Suggested trim for preset_b: ")
    trim = float(out.split(": ")[1].split()[0])
    assert trim == pytest.approx(-1.0, abs=0.05)


def test_curve_command(preset_files, capsys):
    assert main(["curve", preset_files[0]]) == 0
    captured = capsys.readouterr()
    assert "Preset: preset_a" in captured.out
    assert "Peak gain: +3.00 dB" in captured.out


def test_missing_preset_reports_error(tmp_path, capsys):
    assert main(["curve", str(tmp_path / "nope.txt")]) == 1
    assert "Error:" in capsys.readouterr().out


def test_run_sighted_session(preset_files, tmp_path, capsys):
    live = tmp_path / "live_config.txt"
    results_dir = tmp_path / "results"
    inputs = ["A", "B", "answer A", "trim -1", "bogus", "answer B"]
    with patch("builtins.input", side_effect=inputs):
        code = main(["run", *preset_files, "--mode", "ab", "--trials", "2",
                     "--config-path", str(live), "--results-dir", str(results_dir),
                     "--seed", "3"])
    assert code == 0

    out = capsys.readouterr().out
    assert "Playing B" in out
    assert "Trim: -1.00 dB" in out
    assert "Unknown command: bogus" in out
    assert "Preferred A: 1, B: 1" in out
    assert "Verdict: Not significant" in out
    # last option played was B at the auto trim of about -1 dB
    preamp_line = next(line for line in live.read_text().splitlines()
                       if line.startswith("Preamp:"))
    assert float(preamp_line.split()[1]) == pytest.approx(-3.0, abs=0.05)

    saved = sorted(results_dir.iterdir())
    assert [p.suffix for p in saved] == [".csv", ".json"]
    data = json.loads(saved[1].read_text(encoding="utf-8"))
    assert data["mode"] == "ab"
    assert data["answers"][1]["trim_db_at_answer_time"] == -1.0


def test_run_abx_reports_correct_count(preset_files, tmp_path, capsys):
    with patch("builtins.input", side_effect=["X", "answer A", "answer A"]):
        code = main(["run", *preset_files, "--mode", "abx", "--trials", "2",
                     "--config-path", str(tmp_path / "live.txt")])
    assert code == 0
    assert "Correct: " in capsys.readouterr().out


def test_run_quit_aborts(preset_files, tmp_path, capsys):
    with patch("builtins.input", side_effect=["quit"]):
        code = main(["run", *preset_files, "--config-path", str(tmp_path / "live.txt")])
    assert code == 1
    assert "Test aborted." in capsys.readouterr().out


def test_run_end_of_input_aborts(preset_files, tmp_path):
    with patch("builtins.input", side_effect=EOFError):
        code = main(["run", *preset_files, "--config-path", str(tmp_path / "live.txt")])
    assert code == 1


def test_run_invalid_answer_is_reported(preset_files, tmp_path, capsys):
    with patch("builtins.input", side_effect=["answer X", "quit"]):
        main(["run", *preset_files, "--mode", "blindab", "--trials", "2",
              "--config-path", str(tmp_path / "live.txt")])
    assert "Error:" in capsys.readouterr().out
