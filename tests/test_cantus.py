"""Tests for cantus firmus generation."""

import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from counterpoint_generator.cantus import allowed_cantus_notes, generate_cantus  # noqa: E402
from counterpoint_generator.errors import CantusGenerationStalled  # noqa: E402
from counterpoint_generator.frequencies import CANTUS_RANGE, build_note_table  # noqa: E402
from counterpoint_generator.keys import KEYS  # noqa: E402
from counterpoint_generator.note_utils import degree_of, get_interval  # noqa: E402

ALTO_C = build_note_table(KEYS["C"], 1, CANTUS_RANGE)


def test_first_note_is_tonic():
    """The cantus opens on any tonic in range."""

    assert allowed_cantus_notes(ALTO_C, [], 8) == [41, 51]


def test_last_note_resolves_by_step():
    """The final tonic lies a step from the penultimate note."""

    assert allowed_cantus_notes(ALTO_C, [41, 43, 45, 44, 46, 45, 42], 8) == [41]
    assert allowed_cantus_notes(ALTO_C, [41, 43, 45, 44, 46, 45, 47], 8) == [51]


def test_penultimate_note_is_second_or_seventh_degree():
    """The note before the final is a leading tone or supertonic within a sixth."""

    assert allowed_cantus_notes(ALTO_C, [41, 43, 45, 44, 46, 45], 8) == [37, 42, 47, 52]


def test_second_note_moves_within_a_sixth():
    """Without two earlier notes only the leap limit applies."""

    assert allowed_cantus_notes(ALTO_C, [41], 8) == [35, 36, 37, 41, 42, 43, 44, 45, 46]


def test_no_third_repetition():
    """After a repeated note the cantus must move."""

    allowed = allowed_cantus_notes(ALTO_C, [41, 43, 43], 8)
    assert 43 not in allowed
    assert allowed == [35, 36, 37, 41, 42, 44, 45, 46, 47, 51]


def test_small_leap_followed_by_step():
    """A leap of a third is followed by a step or a repeat."""

    assert allowed_cantus_notes(ALTO_C, [42, 41, 43], 8) == [42, 43, 44]


def test_large_leap_recovered_in_opposite_direction():
    """Leaps of a fourth or more are answered by a step the other way."""

    assert allowed_cantus_notes(ALTO_C, [41, 42, 45], 8) == [44]
    assert allowed_cantus_notes(ALTO_C, [47, 46, 42], 8) == [43]


def test_free_motion_after_step():
    """Stepwise motion leaves the next note free within a sixth."""

    assert allowed_cantus_notes(ALTO_C, [41, 42, 43], 8) == [
        35, 36, 37, 41, 42, 43, 44, 45, 46, 47, 51,
    ]


@pytest.mark.parametrize("seed", range(20))
def test_generated_cantus_obeys_every_rule(seed):
    """Each note of a generated cantus is legal at its position."""

    total = 8
    cantus = generate_cantus(ALTO_C, total, random.Random(seed))
    assert len(cantus) == total
    assert degree_of(cantus[0]) == 1
    assert degree_of(cantus[-1]) == 1
    assert get_interval(cantus[-2], cantus[-1]) == 2
    for n in range(total):
        assert cantus[n] in allowed_cantus_notes(ALTO_C, cantus[:n], total)


def test_generated_cantus_is_reproducible():
    """Equal seeds produce equal melodies."""

    assert generate_cantus(ALTO_C, 16, random.Random(5)) == generate_cantus(
        ALTO_C, 16, random.Random(5)
    )


def test_long_cantus():
    """Long melodies are produced without recursion problems."""

    cantus = generate_cantus(ALTO_C, 400, random.Random(2))
    assert len(cantus) == 400


def test_too_short_cantus_rejected():
    """A cadence needs at least three notes."""

    with pytest.raises(ValueError):
        generate_cantus(ALTO_C, 2, random.Random(0))


def test_stall_reported():
    """Tables that cannot hold a cadence raise ``CantusGenerationStalled``."""

    with pytest.raises(CantusGenerationStalled):
        generate_cantus({}, 8, random.Random(0))
    with pytest.raises(CantusGenerationStalled):
        generate_cantus({41: 261.63, 43: 329.63, 45: 392.0}, 8, random.Random(0))
