"""Randomised depth-first backtracking search over pitch sequences.

Both melodic lines are produced by the same search: a ``candidates`` callback
receives the partial sequence built so far and returns every pitch that may
legally come next. The search picks one of them uniformly at random, extends
the sequence and asks again. When a position has nothing left to try, the
most recent choice is undone and another untried candidate at the previous
position is drawn.

The search keeps an explicit stack of frames instead of recursing, one frame
per position holding the candidates not tried yet. Long sequences therefore
never run into the interpreter's recursion limit, and every iteration either
extends the sequence or permanently discards a candidate, so the loop always
terminates.

Example
-------
>>> import random
>>> result = backtrack(3, lambda seq: [1, 2] if not seq else [seq[-1] + 1], random.Random(0))
>>> result.success, len(result.notes)
(True, 3)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

__all__ = ["SearchResult", "CandidateFunction", "backtrack"]

logger = logging.getLogger(__name__)

CandidateFunction = Callable[[Sequence[int]], Iterable[int]]


@dataclass(frozen=True)
class SearchResult:
    """Outcome of :func:`backtrack`.

    ``notes`` holds the finished sequence on success. On failure it is
    empty, so a failed search can never be mistaken for a melody.
    """

    notes: Tuple[int, ...]
    success: bool
    backtracks: int = 0

    def __bool__(self) -> bool:
        return self.success


def backtrack(
    length: int,
    candidates: CandidateFunction,
    rng: Optional[random.Random] = None,
) -> SearchResult:
    """Search for a sequence of ``length`` pitches accepted by ``candidates``.

    Parameters
    ----------
    length:
        Number of pitches to place.
    candidates:
        Callback returning the legal pitches for the next position given the
        partial sequence as a tuple.
    rng:
        Random source used to pick among candidates. A fresh unseeded
        :class:`random.Random` is used when omitted.

    Returns
    -------
    SearchResult
        ``success`` is ``False`` when every branch was exhausted.
    """

    if length < 0:
        raise ValueError("length must be non-negative")
    rng = rng or random.Random()
    if length == 0:
        return SearchResult((), True)

    sequence: List[int] = []
    # ``frames[i]`` holds the untried candidates for position ``i``; the
    # sequence is always one element shorter than the stack.
    frames: List[List[int]] = [sorted(set(candidates(())))]
    backtracks = 0
    while frames:
        remaining = frames[-1]
        if not remaining:
            frames.pop()
            if sequence:
                sequence.pop()
            backtracks += 1
            continue
        choice = remaining.pop(rng.randrange(len(remaining)))
        sequence.append(choice)
        if len(sequence) == length:
            logger.debug("Search placed %d notes after %d backtracks", length, backtracks)
            return SearchResult(tuple(sequence), True, backtracks)
        frames.append(sorted(set(candidates(tuple(sequence)))))

    logger.debug("Search exhausted after %d backtracks", backtracks)
    return SearchResult((), False, backtracks)
