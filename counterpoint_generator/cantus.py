"""Cantus firmus generation.

The cantus is the fixed melody the counterpoint is written against. Each note
is drawn at random from the pitches allowed at its position:

* the first note is the tonic;
* the penultimate note is the second or seventh degree, no more than a sixth
  from its predecessor;
* the last note is the tonic, a step away from the penultimate note;
* the second note may move anywhere within a sixth;
* afterwards the allowed motion depends on the previous interval. A repeated
  note must move (no third repetition), a leap of a third is followed by a
  step or a repeat, a larger leap is recovered by a step in the opposite
  direction and stepwise motion leaves the next note free within a sixth.

The rules only look two notes back, so a dead end is usually resolved by
undoing a single choice. Generation runs through the shared
:func:`~counterpoint_generator.search.backtrack` search.
"""

from __future__ import annotations

import logging
import random
from typing import List, Mapping, Optional, Sequence, Tuple

from .errors import CantusGenerationStalled
from .note_utils import degree_of, direction, get_interval
from .search import backtrack

__all__ = ["allowed_cantus_notes", "generate_cantus"]

logger = logging.getLogger(__name__)

# Widest melodic leap allowed in either voice (a sixth).
MAX_LEAP = 6


def allowed_cantus_notes(
    notes: Mapping[int, float],
    previous: Sequence[int],
    total: int,
) -> List[int]:
    """Return the pitches that may follow ``previous`` in the cantus.

    Parameters
    ----------
    notes:
        Note table of the cantus voice.
    previous:
        Pitches chosen so far, oldest first.
    total:
        Length of the finished cantus.
    """

    position = len(previous) + 1
    pitches = sorted(notes)

    if position == 1:
        return [p for p in pitches if degree_of(p) == 1]

    last = previous[-1]
    if position == total:
        return [p for p in pitches if degree_of(p) == 1 and get_interval(last, p) == 2]
    if position == total - 1:
        return [
            p
            for p in pitches
            if degree_of(p) in (2, 7) and get_interval(last, p) <= MAX_LEAP
        ]
    if position == 2:
        return [p for p in pitches if get_interval(last, p) <= MAX_LEAP]

    before = previous[-2]
    prev_interval = get_interval(last, before)
    if prev_interval == 1:
        return [
            p for p in pitches if 1 < get_interval(last, p) <= MAX_LEAP
        ]
    if prev_interval == 3:
        return [p for p in pitches if get_interval(last, p) <= 2]
    if prev_interval >= 4:
        leap = direction(before, last)
        return [
            p
            for p in pitches
            if get_interval(last, p) == 2 and direction(last, p) == -leap
        ]
    return [p for p in pitches if get_interval(last, p) <= MAX_LEAP]


def generate_cantus(
    notes: Mapping[int, float],
    total: int,
    rng: Optional[random.Random] = None,
) -> Tuple[int, ...]:
    """Return a cantus of ``total`` encoded pitches drawn from ``notes``.

    Raises
    ------
    ValueError
        If ``total`` is below three, the shortest length with a cadence.
    CantusGenerationStalled
        If no sequence obeys the rules with the given note table.
    """

    if total < 3:
        raise ValueError("A cantus needs at least three notes")
    if not notes:
        raise CantusGenerationStalled("The cantus note table is empty")
    tonics = [p for p in notes if degree_of(p) == 1]
    if not any(
        degree_of(p) in (2, 7) and get_interval(p, t) == 2
        for p in notes
        for t in tonics
    ):
        # Without a step into a tonic no cadence exists, however the earlier
        # notes are chosen.
        raise CantusGenerationStalled("The cantus range cannot hold a final cadence")

    result = backtrack(total, lambda seq: allowed_cantus_notes(notes, seq, total), rng)
    if not result:
        raise CantusGenerationStalled(
            f"No cantus of {total} notes fits the available pitches"
        )
    if result.backtracks:
        logger.debug("Cantus needed %d backtracks", result.backtracks)
    return result.notes
