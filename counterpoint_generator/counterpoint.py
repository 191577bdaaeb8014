"""First-species counterpoint search.

The counterpoint is written note against note below a finished cantus. The
legal pitches for position ``k`` depend on where ``k`` falls:

``k == 0``
    The tonic.
``k == len(cantus) - 2``
    The penultimate note approaches the final by contrary step: the seventh
    degree under a cantus on the second degree, the second degree under a
    cantus on the seventh. Any other cantus degree leaves no cadence.
``k == len(cantus) - 1``
    The tonic, one step from the penultimate note.
otherwise
    Pitches consonant with the cantus note and within a twelfth of it, no
    more than a sixth from the previous counterpoint note, then pruned by the
    rules in :mod:`counterpoint_generator.voice_leading`.

Every position keeps the counterpoint strictly below the cantus and no
pitch or harmonic interval may sound three times in a row. Candidates are
explored in random order with chronological backtracking by
:func:`~counterpoint_generator.search.backtrack`.

Algorithm Pseudocode
--------------------
::

    if some position has no possible pitch at all:
        fail
    frames = [candidates(())]
    while frames:
        if top frame empty: pop frame, undo last note
        else: draw a random pitch from it, append it
              if the line is complete: succeed
              push candidates(line)
    fail
"""

from __future__ import annotations

import logging
import random
from typing import List, Mapping, Optional, Sequence, Tuple

from .cantus import MAX_LEAP
from .errors import CounterpointSearchExhausted
from .note_utils import degree_of, get_interval, is_consonant
from .search import SearchResult, backtrack
from .voice_leading import apply_rules, remove_repetitions

__all__ = [
    "MAX_HARMONIC_INTERVAL",
    "allowed_counterpoint_notes",
    "search_counterpoint",
    "generate_counterpoint",
]

logger = logging.getLogger(__name__)

# Widest distance between the voices outside the cadence (a twelfth).
MAX_HARMONIC_INTERVAL = 12

# Cantus degree on the penultimate beat -> counterpoint degree answering it.
_CADENCE_DEGREES = {2: 7, 7: 2}


def _interior_candidates(pitches: Sequence[int], cantus_note: int) -> List[int]:
    candidates = []
    for p in pitches:
        interval = get_interval(p, cantus_note)
        if p < cantus_note and interval <= MAX_HARMONIC_INTERVAL and is_consonant(interval):
            candidates.append(p)
    return candidates


def allowed_counterpoint_notes(
    notes: Mapping[int, float],
    counterpoint: Sequence[int],
    cantus: Sequence[int],
) -> List[int]:
    """Return the pitches that may extend ``counterpoint`` against ``cantus``.

    Parameters
    ----------
    notes:
        Note table of the counterpoint voice.
    counterpoint:
        Counterpoint pitches written so far.
    cantus:
        The complete cantus.

    Returns
    -------
    List[int]
        Legal pitches in ascending order, empty at a dead end.
    """

    k = len(counterpoint)
    length = len(cantus)
    if k >= length:
        return []
    pitches = sorted(notes)

    if k == 0:
        return [p for p in pitches if degree_of(p) == 1 and p < cantus[0]]

    if k == length - 2:
        wanted = _CADENCE_DEGREES.get(degree_of(cantus[k]))
        if wanted is None:
            return []
        penultimate = [p for p in pitches if degree_of(p) == wanted and p < cantus[k]]
        return remove_repetitions(penultimate, counterpoint, cantus)

    last = counterpoint[-1]
    if k == length - 1:
        return [
            p
            for p in pitches
            if degree_of(p) == 1 and get_interval(last, p) == 2 and p < cantus[k]
        ]

    candidates = [
        p for p in _interior_candidates(pitches, cantus[k])
        if get_interval(last, p) <= MAX_LEAP
    ]
    return apply_rules(candidates, counterpoint, cantus)


def _infeasibility(notes: Mapping[int, float], cantus: Sequence[int]) -> Optional[str]:
    """Return why no counterpoint can exist regardless of history, or ``None``.

    Only constraints that do not depend on earlier counterpoint notes are
    checked, so a ``None`` result does not guarantee a solution.
    """

    pitches = sorted(notes)
    length = len(cantus)
    for k, cantus_note in enumerate(cantus):
        if k == 0:
            if not any(degree_of(p) == 1 and p < cantus_note for p in pitches):
                return "no tonic below the first cantus note"
        elif k == length - 2:
            wanted = _CADENCE_DEGREES.get(degree_of(cantus_note))
            if wanted is None:
                return f"cantus degree {degree_of(cantus_note)} cannot start a cadence"
            finals = [p for p in pitches if degree_of(p) == 1 and p < cantus[-1]]
            if not any(
                degree_of(p) == wanted
                and p < cantus_note
                and any(get_interval(p, f) == 2 for f in finals)
                for p in pitches
            ):
                return "no penultimate note resolves to a final tonic"
        elif k < length - 1 and not _interior_candidates(pitches, cantus_note):
            return f"no consonance below cantus note {cantus_note} at position {k}"
    return None


def search_counterpoint(
    cantus: Sequence[int],
    notes: Mapping[int, float],
    rng: Optional[random.Random] = None,
) -> SearchResult:
    """Search for a counterpoint to ``cantus`` without raising on failure.

    The result's ``success`` flag tells whether ``notes`` holds a complete
    line. Hopeless inputs are detected up front and fail immediately instead
    of enumerating the whole search tree.
    """

    cantus = tuple(cantus)
    reason = _infeasibility(notes, cantus)
    if reason is not None:
        logger.debug("Counterpoint impossible: %s", reason)
        return SearchResult((), False)
    return backtrack(
        len(cantus),
        lambda line: allowed_counterpoint_notes(notes, line, cantus),
        rng,
    )


def generate_counterpoint(
    cantus: Sequence[int],
    notes: Mapping[int, float],
    rng: Optional[random.Random] = None,
) -> Tuple[int, ...]:
    """Return a counterpoint line for ``cantus`` drawn from ``notes``.

    Raises
    ------
    ValueError
        If ``cantus`` is empty.
    CounterpointSearchExhausted
        If every branch of the search fails for this cantus.
    """

    if not cantus:
        raise ValueError("cantus must not be empty")
    result = search_counterpoint(cantus, notes, rng)
    if not result:
        raise CounterpointSearchExhausted(
            f"No counterpoint satisfies the rules for cantus {list(cantus)}", cantus
        )
    logger.debug("Counterpoint found after %d backtracks", result.backtracks)
    return result.notes
