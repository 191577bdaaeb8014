"""Tests for the counterpoint pruning rules in :mod:`counterpoint_generator.voice_leading`.

Pitches use the C major encoding (``41`` is middle C, ``37`` the B below it).
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from counterpoint_generator.voice_leading import (  # noqa: E402
    RULES,
    apply_rules,
    remove_consecutive_leaps,
    remove_leaps_in_same_direction,
    remove_parallel_fifths,
    remove_parallel_octaves,
    remove_repetitions,
)


def test_parallel_fifths_removed_after_fifth():
    """A fifth may not be followed by another fifth."""

    # 34 (F3) against 41 (C4) is a fifth; 31 would form a twelfth with 45.
    assert remove_parallel_fifths([31, 33, 34, 37], [34], [41, 45, 44]) == [33, 34, 37]


def test_parallel_fifths_untouched_otherwise():
    """Without a preceding fifth every candidate survives."""

    assert remove_parallel_fifths([31, 33, 34, 37], [33], [41, 45, 44]) == [31, 33, 34, 37]
    assert remove_parallel_fifths([31, 33], [], [41, 45]) == [31, 33]


def test_parallel_octaves_removed_after_octave():
    """An octave may not be followed by another octave or unison."""

    assert remove_parallel_octaves([42, 44, 45], [41], [51, 52, 51]) == [44, 45]


def test_parallel_octaves_untouched_after_sixth():
    """Other preceding intervals do not restrict perfect consonances."""

    assert remove_parallel_octaves([42, 44, 45], [43], [51, 52, 51]) == [42, 44, 45]


def test_consecutive_leaps_force_step():
    """After two leaps only steps and repeats remain."""

    cantus = [51, 52, 53, 54, 53]
    assert remove_consecutive_leaps([43, 44, 45, 46, 47], [41, 43, 45], cantus) == [44, 45, 46]
    # One leap followed by a step leaves the candidates alone.
    assert remove_consecutive_leaps([43, 47], [41, 43, 44], cantus) == [43, 47]
    assert remove_consecutive_leaps([43, 47], [41, 43], cantus) == [43, 47]


def test_leap_forbids_same_direction():
    """A leap must not be followed by motion in the same direction."""

    cantus = [51, 52, 53, 54]
    assert remove_leaps_in_same_direction([42, 43, 44, 46], [41, 43], cantus) == [42, 43]
    assert remove_leaps_in_same_direction([37, 41, 42], [45, 41], cantus) == [41, 42]


def test_step_allows_any_direction():
    """Stepwise motion leaves the candidates untouched."""

    assert remove_leaps_in_same_direction([37, 43, 47], [41, 42], [51, 52, 53]) == [37, 43, 47]


def test_repeated_pitch_and_interval_removed():
    """A pitch or harmonic interval may not sound three times in a row."""

    # 43 against 51 twice is a sixth both times; 44 would repeat it against 52.
    assert remove_repetitions([43, 44, 45], [43, 43], [51, 51, 52]) == [45]


def test_repeated_interval_only():
    """Two equal intervals rule out a third even when the pitches move."""

    assert remove_repetitions([41, 43, 44], [41, 42], [43, 44, 45]) == [41, 44]


def test_repetition_needs_two_notes():
    """A single note cannot establish a repetition."""

    assert remove_repetitions([41, 43], [41], [43, 45]) == [41, 43]


def test_apply_rules_runs_every_rule():
    """Rules compose: each only removes candidates."""

    counterpoint = [41, 43]
    cantus = [51, 52, 53, 52, 51]
    candidates = [35, 37, 42, 44, 45, 47]
    combined = apply_rules(candidates, counterpoint, cantus)
    for rule in RULES:
        assert set(combined) <= set(rule(candidates, counterpoint, cantus))
    assert apply_rules([], counterpoint, cantus) == []
