"""Command line helpers for the counterpoint generator.

This module implements the console entry points for the project. The
``run_cli`` function parses command line arguments, composes a cantus and
counterpoint and writes them as MIDI or Csound. Options left out on the
command line fall back to the JSON settings file and then to built-in
defaults; a missing key, measure count or tempo is prompted for
interactively.

Example
-------
Running ``python -m counterpoint_generator --key C --measures 2 --bpm 90 \
    --output counterpoint.mid --seed 7`` writes an eight-note counterpoint in
C major to ``counterpoint.mid``. Use an output path ending in ``.csd`` (or
``--format csound``) to produce a Csound score instead.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from . import DEFAULT_SETTINGS_FILE, load_settings, save_settings
from .composer import DEFAULT_MAX_ATTEMPTS, FirstSpeciesComposer
from .errors import CounterpointError, KeyNotFoundError
from .frequencies import CANTUS_RANGE, COUNTERPOINT_RANGE, load_frequency_table
from .keys import KEYS, canonical_key, load_key_table
from .utils import calc_total_notes, validate_time_signature, validate_voice_range

__all__ = ["build_parser", "run_cli", "main"]

T = TypeVar("T")

_FORMATS = ("midi", "csound")


def build_parser(settings: Optional[dict] = None) -> argparse.ArgumentParser:
    """Return the argument parser with defaults taken from ``settings``."""

    settings = settings or {}
    parser = argparse.ArgumentParser(
        description="Generate a first-species counterpoint and save it as MIDI or Csound."
    )
    parser.add_argument("--list-keys", action="store_true", help="List all supported keys and exit")
    parser.add_argument("--key", type=str, default=settings.get("key"), help="Musical key (e.g., C, A, F#m).")
    parser.add_argument("--measures", type=int, default=settings.get("measures"), help="Number of measures to write.")
    parser.add_argument("--bpm", type=int, default=settings.get("bpm"), help="Tempo in beats per minute.")
    parser.add_argument(
        "--timesig",
        type=str,
        default=settings.get("timesig", "4/4"),
        help="Time signature; the numerator sets notes per measure (default: 4/4).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=settings.get("output", "counterpoint.mid"),
        help="Output file path (default: counterpoint.mid).",
    )
    parser.add_argument(
        "--format",
        choices=_FORMATS,
        help="Output format. Defaults to csound for .csd paths and midi otherwise.",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=settings.get("max_attempts", DEFAULT_MAX_ATTEMPTS),
        help=f"Cantus lines to try before giving up (default: {DEFAULT_MAX_ATTEMPTS}).",
    )
    ranges = settings.get("voice_ranges", {})
    parser.add_argument(
        "--cantus-range",
        type=float,
        nargs=2,
        metavar=("LOW", "HIGH"),
        default=ranges.get("cantus", list(CANTUS_RANGE)),
        help="Cantus frequency range in Hz.",
    )
    parser.add_argument(
        "--counterpoint-range",
        type=float,
        nargs=2,
        metavar=("LOW", "HIGH"),
        default=ranges.get("counterpoint", list(COUNTERPOINT_RANGE)),
        help="Counterpoint frequency range in Hz.",
    )
    parser.add_argument("--keys-file", type=str, default=settings.get("keys_file"), help="Key table to use instead of the built-in keys")
    parser.add_argument(
        "--frequencies-file",
        type=str,
        default=settings.get("frequencies_file"),
        help="Note frequency table to use instead of equal temperament",
    )
    parser.add_argument("--print", dest="print_notes", action="store_true", help="Print both lines as note names")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--settings-file", type=str, help="Path to the JSON settings file")
    parser.add_argument("--save-settings", action="store_true", help="Store the options used as new defaults")
    return parser


def _prompt(message: str, convert: Callable[[str], T]) -> T:
    """Ask for a value until ``convert`` accepts the answer."""

    while True:
        try:
            answer = input(message)
        except EOFError:
            logging.error("No input available for: %s", message.strip())
            sys.exit(1)
        try:
            return convert(answer.strip())
        except ValueError as exc:
            logging.error(str(exc) or f"Invalid value: {answer}")


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise ValueError("Value must be a positive integer.")
    return value


def _output_format(args: argparse.Namespace) -> str:
    if args.format:
        return args.format
    return "csound" if Path(args.output).suffix.lower() == ".csd" else "midi"


def run_cli(argv: Optional[List[str]] = None) -> None:
    """Parse CLI arguments and write a counterpoint file.

    Validation failures and generation errors are logged and terminate the
    process with exit status ``1`` so calling scripts can react.
    """

    argv = sys.argv[1:] if argv is None else argv
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--settings-file", type=str)
    pre_args, _ = pre_parser.parse_known_args(argv)
    settings_path = (
        Path(pre_args.settings_file).expanduser() if pre_args.settings_file else DEFAULT_SETTINGS_FILE
    )
    settings = load_settings(settings_path)
    args = build_parser(settings).parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    key_table = None
    if args.keys_file:
        try:
            key_table = load_key_table(args.keys_file)
        except OSError as exc:
            logging.error("Could not read key table: %s", exc)
            sys.exit(1)

    if args.list_keys:
        print("\n".join(sorted(key_table if key_table is not None else KEYS)))
        return

    frequencies = None
    if args.frequencies_file:
        try:
            frequencies = load_frequency_table(args.frequencies_file)
        except OSError as exc:
            logging.error("Could not read frequency table: %s", exc)
            sys.exit(1)

    if args.key is None:
        args.key = _prompt(
            "Please input desired key (A, B, C#, etc...): ",
            lambda text: canonical_key(text, key_table),
        )
    if args.measures is None:
        args.measures = _prompt("Please enter the desired number of measures: ", _positive_int)
    if args.bpm is None:
        args.bpm = _prompt("Please enter your desired tempo (BPM): ", _positive_int)

    if args.bpm <= 0:
        logging.error("BPM must be a positive integer.")
        sys.exit(1)
    if args.measures <= 0:
        logging.error("Number of measures must be a positive integer.")
        sys.exit(1)
    if args.max_attempts <= 0:
        logging.error("Maximum attempts must be a positive integer.")
        sys.exit(1)

    try:
        numerator, denominator = validate_time_signature(args.timesig)
        voice_ranges = {
            "cantus": validate_voice_range(args.cantus_range),
            "counterpoint": validate_voice_range(args.counterpoint_range),
        }
    except ValueError as exc:
        logging.error(str(exc))
        sys.exit(1)

    total = calc_total_notes(args.measures, numerator)
    rng = random.Random(args.seed)

    try:
        composer = FirstSpeciesComposer(
            args.key,
            voice_ranges=voice_ranges,
            frequencies=frequencies,
            key_table=key_table,
            rng=rng,
            max_attempts=args.max_attempts,
        )
        composition = composer.generate(total)
    except KeyNotFoundError as exc:
        logging.error("Invalid key provided: %s", exc)
        sys.exit(1)
    except (CounterpointError, ValueError) as exc:
        logging.error("Could not compose counterpoint: %s", exc)
        sys.exit(1)

    if args.print_notes:
        for voice, names in composition.note_names().items():
            print(f"{voice}: {' '.join(names)}")

    try:
        if _output_format(args) == "csound":
            composer.to_csound(composition, args.bpm, args.output)
        else:
            composer.to_midi(
                composition, args.bpm, args.output, time_signature=(numerator, denominator)
            )
    except OSError as exc:
        logging.error("Could not write output file: %s", exc)
        sys.exit(1)

    if args.save_settings:
        save_settings(
            {
                "key": composer.key_name,
                "measures": args.measures,
                "bpm": args.bpm,
                "timesig": f"{numerator}/{denominator}",
                "output": args.output,
                "max_attempts": args.max_attempts,
                "voice_ranges": {voice: list(bounds) for voice, bounds in voice_ranges.items()},
            },
            settings_path,
        )
    logging.info("Counterpoint generation complete.")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m counterpoint_generator`` and the console script."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli(argv)
