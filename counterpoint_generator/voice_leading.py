"""Voice-leading rules that prune counterpoint candidates.

Each rule takes the candidate pitches for the next counterpoint position, the
counterpoint written so far and the complete cantus, and returns the
candidates that survive. Rules only ever remove pitches, so they can be
applied in any combination. ``RULES`` lists them in the order the engine
applies them.

Example
-------
>>> cantus = [41, 45, 44]
>>> remove_parallel_fifths([31, 33, 34, 37], [34], cantus)
[33, 34, 37]

Only the previous three notes of either voice are ever consulted, which keeps
dead ends local and backtracking shallow.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence

from .note_utils import direction, get_interval, reduce_interval

__all__ = [
    "remove_parallel_fifths",
    "remove_parallel_octaves",
    "remove_consecutive_leaps",
    "remove_leaps_in_same_direction",
    "remove_repetitions",
    "RULES",
    "apply_rules",
]

Rule = Callable[[Iterable[int], Sequence[int], Sequence[int]], List[int]]


def _remove_parallel(
    reduced: int,
    candidates: Iterable[int],
    counterpoint: Sequence[int],
    cantus: Sequence[int],
) -> List[int]:
    candidates = list(candidates)
    if not counterpoint:
        return candidates
    k = len(counterpoint)
    previous = reduce_interval(get_interval(counterpoint[-1], cantus[k - 1]))
    if previous != reduced:
        return candidates
    return [
        c for c in candidates
        if reduce_interval(get_interval(c, cantus[k])) != reduced
    ]


def remove_parallel_fifths(candidates, counterpoint, cantus) -> List[int]:
    """Drop candidates that would follow a fifth with another fifth."""

    return _remove_parallel(5, candidates, counterpoint, cantus)


def remove_parallel_octaves(candidates, counterpoint, cantus) -> List[int]:
    """Drop candidates that would follow a unison or octave with another."""

    return _remove_parallel(1, candidates, counterpoint, cantus)


def remove_consecutive_leaps(candidates, counterpoint, cantus) -> List[int]:
    """After two leaps of a third or more, only allow a step or a repeat."""

    candidates = list(candidates)
    if len(counterpoint) < 3:
        return candidates
    last, before, earliest = counterpoint[-1], counterpoint[-2], counterpoint[-3]
    if get_interval(last, before) >= 3 and get_interval(before, earliest) >= 3:
        return [c for c in candidates if get_interval(c, last) < 3]
    return candidates


def remove_leaps_in_same_direction(candidates, counterpoint, cantus) -> List[int]:
    """After a leap, forbid further motion in the direction of the leap."""

    candidates = list(candidates)
    if len(counterpoint) < 2:
        return candidates
    last, before = counterpoint[-1], counterpoint[-2]
    if get_interval(last, before) < 3:
        return candidates
    leap = direction(before, last)
    return [c for c in candidates if direction(last, c) != leap]


def remove_repetitions(candidates, counterpoint, cantus) -> List[int]:
    """Forbid a pitch, or an interval against the cantus, a third time in a row.

    A pitch already sounded on the last two positions is removed, and so is
    any candidate that would form the same interval with the cantus as the
    last two positions did.
    """

    candidates = list(candidates)
    if len(counterpoint) < 2:
        return candidates
    k = len(counterpoint)
    if counterpoint[-1] == counterpoint[-2]:
        candidates = [c for c in candidates if c != counterpoint[-1]]
    last_interval = get_interval(counterpoint[-1], cantus[k - 1])
    if last_interval == get_interval(counterpoint[-2], cantus[k - 2]):
        candidates = [
            c for c in candidates if get_interval(c, cantus[k]) != last_interval
        ]
    return candidates


RULES: Sequence[Rule] = (
    remove_parallel_fifths,
    remove_parallel_octaves,
    remove_consecutive_leaps,
    remove_leaps_in_same_direction,
    remove_repetitions,
)


def apply_rules(
    candidates: Iterable[int],
    counterpoint: Sequence[int],
    cantus: Sequence[int],
    rules: Sequence[Rule] = RULES,
) -> List[int]:
    """Run ``candidates`` through every rule in ``rules`` and return the survivors."""

    remaining = list(candidates)
    for rule in rules:
        if not remaining:
            break
        remaining = rule(remaining, counterpoint, cantus)
    return remaining
