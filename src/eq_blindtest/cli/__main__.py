# src/eq_blindtest/cli/__main__.py

"""
Command line entry point: inspect presets, compute loudness trims and run
blind listening tests against the Equalizer APO live config.
"""

import argparse
import logging
import sys

from .. import config
from ..abtest.export import save_results
from ..abtest.models import SessionState, TestMode
from ..abtest.randomizer import TrialRandomizer
from ..abtest.session import ABTestSession
from ..core.loudness import auto_trim, get_strategy
from ..core.spectrum import evaluate
from ..eq_control.equalizer_apo import EqualizerApoApplier, load_configuration
from ..errors import EqBlindTestError

logger = logging.getLogger(__name__)

REPORT_FREQS = [31, 63, 125, 250, 500, 1000, 2000, 4000, 8000, 16000]


def build_parser():
    parser = argparse.ArgumentParser(prog="eq-blindtest", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    curve = sub.add_parser("curve", help="predicted response and peak gain of a preset")
    curve.add_argument("preset")

    trim = sub.add_parser("trim", help="loudness trim for preset B against preset A")
    trim.add_argument("preset_a")
    trim.add_argument("preset_b")
    trim.add_argument("--strategy", choices=["peak", "nominal"], default="peak")

    plot = sub.add_parser("plot", help="plot predicted responses to an image")
    plot.add_argument("presets", nargs="+")
    plot.add_argument("-o", "--output", default="eq_response.png")

    run = sub.add_parser("run", help="run an interactive listening test")
    run.add_argument("preset_a")
    run.add_argument("preset_b")
    run.add_argument("--mode", choices=[m.value for m in TestMode], default="blindab")
    run.add_argument("--trials", type=int, default=config.DEFAULT_TOTAL_TRIALS)
    run.add_argument("--trim", type=float, default=None, help="manual trim for B in dB")
    run.add_argument("--config-path", default=None, help="Equalizer APO config file to write")
    run.add_argument("--results-dir", default=None, help="save JSON and CSV results here")
    run.add_argument("--seed", type=int, default=None)
    return parser


def cmd_curve(args):
    configuration = load_configuration(args.preset)
    curve, peak = evaluate(configuration)
    print(f"Preset: {configuration.name}")
    print(f"Preamp: {configuration.preamp_db:+.2f} dB, {len(configuration.enabled_bands)} active bands")
    for target in REPORT_FREQS:
        freq, mag = min(curve, key=lambda point: abs(point[0] - target))
        print(f"  {freq:8.1f} Hz  {mag:+7.2f} dB")
    print(f"Peak gain: {peak:+.2f} dB at {curve.peak_frequency_hz:.1f} Hz")
    return 0


def cmd_trim(args):
    config_a = load_configuration(args.preset_a)
    config_b = load_configuration(args.preset_b)
    trim = auto_trim(config_a, config_b, get_strategy(args.strategy))
    print(f"Suggested trim for {config_b.name}: {trim:+.2f} dB")
    return 0


def cmd_plot(args):
    from ..ui.response_plot import plot_responses

    configurations = [load_configuration(path) for path in args.presets]
    plot_responses(configurations, args.output)
    print(f"Plot saved to '{args.output}'")
    return 0


def _print_help(mode):
    print(f"Switch with: {', '.join(mode.option_labels)}")
    print(f"Answer with: answer {'|'.join(mode.answer_choices)}"
          + ("  (X is A / X is B)" if mode is TestMode.ABX else ""))
    print("Other commands: trim <dB>, auto, help, quit")


def cmd_run(args, input_func=None):
    input_func = input_func or input
    config_a = load_configuration(args.preset_a)
    config_b = load_configuration(args.preset_b)
    session = ABTestSession(EqualizerApoApplier(args.config_path),
                            randomizer=TrialRandomizer(args.seed))
    session.start(args.mode, config_a, config_b, args.trials, trim_override=args.trim)
    mode = session.mode
    print(f"Starting {mode.value} test with {args.trials} trials "
          f"(trim {session.trim_db:+.2f} dB).")
    _print_help(mode)

    while session.state is SessionState.RUNNING:
        try:
            line = input_func(f"[{session.current_trial_index + 1}/{session.total_trials}] > ")
        except EOFError:
            print("Test aborted.")
            return 1
        parts = line.strip().split()
        if not parts:
            continue
        command = parts[0].lower()
        try:
            if command == "quit":
                print("Test aborted.")
                return 1
            elif command == "help":
                _print_help(mode)
            elif command == "answer" and len(parts) == 2:
                session.record_answer(parts[1])
            elif command == "trim" and len(parts) == 2:
                session.update_trim(float(parts[1]))
                print(f"Trim: {session.trim_db:+.2f} dB")
            elif command == "auto":
                session.reset_trim_to_auto()
                print(f"Trim: {session.trim_db:+.2f} dB (auto)")
            elif parts[0].upper() in mode.option_labels and len(parts) == 1:
                session.apply_option(parts[0])
                print(f"Playing {parts[0].upper()}")
            else:
                print(f"Unknown command: {line.strip()}")
        except (EqBlindTestError, ValueError) as e:
            print(f"Error: {e}")

    statistics = session.statistics
    print("Results")
    print(f"  {config_a.name} vs {config_b.name}")
    if mode is TestMode.ABX:
        print(f"  Correct: {statistics.correct_count}/{session.total_trials}")
    else:
        print(f"  Preferred A: {statistics.preference_count_a}, B: {statistics.preference_count_b}")
    low, high = statistics.confidence_interval
    print(f"  p-value: {statistics.p_value:.4f} ({statistics.test_name})")
    print(f"  {config.CONFIDENCE_LEVEL:.0%} CI: {low:.2f} - {high:.2f}")
    print(f"  Verdict: {statistics.verdict}")

    if args.results_dir:
        json_path, csv_path = save_results(session.results(), args.results_dir)
        print(f"Results saved to '{json_path}' and '{csv_path}'")
    return 0


COMMANDS = {
    "curve": cmd_curve,
    "trim": cmd_trim,
    "plot": cmd_plot,
    "run": cmd_run,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s - %(levelname)s - %(message)s')
    try:
        return COMMANDS[args.command](args)
    except (EqBlindTestError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
