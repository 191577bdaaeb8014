"""Utility functions for translating note names to encoded pitches.

Pitches are handled internally as two-digit integers: the tens place holds
the octave and the ones place the scale degree (``1`` is the tonic). The
octave digit does not increment at ``C`` like scientific pitch notation but
at the key's *octave anchor*, the scale degree on which ``C`` falls. This
keeps every octave of encoded pitches contiguous when read in scale order.

Example
-------
>>> from counterpoint_generator.note_utils import note_to_pitch, get_interval
>>> key = ["C", "D", "E", "F", "G", "A", "B"]
>>> note_to_pitch("E4", key, 1)
43
>>> get_interval(41, 45)
5

Design Notes
------------
- Encoded pitches are *not* evenly spaced integers (``47`` is followed by
  ``51``). Every interval calculation converts to a scale-step count first.
- Comparing two encoded pitches with ``<`` still orders them by height
  because the degree never exceeds seven.
"""

# Modification Summary
# ---------------------
# * Replaced the MIDI conversion helpers with key-relative scale degree
#   encoding so voice-leading rules can reason in diatonic steps.
# * ``octave_anchor`` raises ``OctaveAnchorError`` instead of returning a
#   magic ``-1`` when a key has no recognisable octave boundary.

from __future__ import annotations

import re
from typing import Sequence, Tuple

from .errors import NoteNotInKeyError, OctaveAnchorError

__all__ = [
    "CONSONANCES",
    "parse_note",
    "encode_pitch",
    "note_to_pitch",
    "pitch_to_note",
    "degree_of",
    "octave_of",
    "scale_step",
    "get_interval",
    "reduce_interval",
    "is_consonant",
    "direction",
    "octave_anchor",
]

# Reduced intervals treated as consonant in first species: unison/octave,
# third, fifth and sixth.
CONSONANCES = frozenset({1, 3, 5, 6})

_NOTE_RE = re.compile(r"([A-Ga-g][#b]?)(\d+)")


def parse_note(note: str) -> Tuple[str, int]:
    """Split ``note`` such as ``"C#4"`` into ``("C#", 4)``.

    Raises
    ------
    ValueError
        If ``note`` is not a letter, optional accidental and octave number.
    """

    match = _NOTE_RE.fullmatch(note.strip())
    if not match:
        raise ValueError(f"Invalid note format: {note}")
    name, octave = match.groups()
    return name[0].upper() + name[1:], int(octave)


def encode_pitch(name: str, octave: int, key: Sequence[str], anchor: int) -> int:
    """Return the encoded pitch for ``name`` in ``octave``.

    Parameters
    ----------
    name:
        Note name without octave, spelled exactly as in ``key``.
    octave:
        Scientific octave number of the note.
    key:
        Seven note names, tonic first.
    anchor:
        Scale degree at which the octave number increments.

    Raises
    ------
    NoteNotInKeyError
        If ``name`` is not one of the key's degrees.
    """

    try:
        position = list(key).index(name) + 1
    except ValueError:
        raise NoteNotInKeyError(name, key) from None
    # Degrees below the anchor belong to the octave that started at the
    # previous tonic, so they are counted one octave higher.
    if position >= anchor:
        return 10 * octave + position
    return 10 * (octave + 1) + position


def note_to_pitch(note: str, key: Sequence[str], anchor: int) -> int:
    """Encode a note string with octave, e.g. ``"F#3"``."""

    name, octave = parse_note(note)
    return encode_pitch(name, octave, key, anchor)


def pitch_to_note(pitch: int, key: Sequence[str], anchor: int) -> str:
    """Return the note name with scientific octave for ``pitch``.

    This is the inverse of :func:`note_to_pitch` and is mostly used for
    logging and printing generated lines.
    """

    degree = degree_of(pitch)
    octave = octave_of(pitch)
    if degree < anchor:
        octave -= 1
    return f"{key[degree - 1]}{octave}"


def degree_of(pitch: int) -> int:
    """Return the scale degree (1-7) of ``pitch``."""

    return pitch % 10


def octave_of(pitch: int) -> int:
    """Return the encoded octave of ``pitch``."""

    return pitch // 10


def scale_step(pitch: int) -> int:
    """Return a continuous count of scale steps for ``pitch``."""

    return 7 * octave_of(pitch) + degree_of(pitch)


def get_interval(pitch1: int, pitch2: int) -> int:
    """Return the diatonic interval between two pitches.

    Musical convention is used: a note against itself is a unison (``1``),
    neighbouring degrees form a second (``2``) and so on.
    """

    return abs(scale_step(pitch1) - scale_step(pitch2)) + 1


def reduce_interval(interval: int) -> int:
    """Fold a compound interval into the range ``1-7`` (e.g. ``10 -> 3``)."""

    if interval < 1:
        raise ValueError(f"Interval must be positive, got {interval}")
    while interval > 7:
        interval -= 7
    return interval


def is_consonant(interval: int) -> bool:
    """Return ``True`` if ``interval`` reduces to a unison, third, fifth or sixth."""

    return reduce_interval(interval) in CONSONANCES


def direction(pitch1: int, pitch2: int) -> int:
    """Return ``1`` for upward, ``-1`` for downward and ``0`` for repeated notes."""

    diff = pitch2 - pitch1
    if diff > 0:
        return 1
    if diff < 0:
        return -1
    return 0


def octave_anchor(key: Sequence[str]) -> int:
    """Return the scale degree at which the octave number increments.

    Note names are compared lexicographically against ``"C"``. A tonic that
    sorts before ``C`` (A, A#, B) crosses into the next octave at the first
    later degree sorting at or after ``C``. A tonic after ``C`` is scanned from
    the top of the key downwards for the degree that is ``C`` itself or the
    last one that sorts below it.

    Raises
    ------
    OctaveAnchorError
        If no crossing point exists, which only happens for malformed keys.
    """

    if not key:
        raise OctaveAnchorError("Cannot derive an octave anchor for an empty key")
    tonic = key[0]
    if tonic == "C":
        return 1
    if tonic < "C":
        for i in range(1, len(key)):
            if key[i] >= "C":
                return i + 1
    else:
        for i in range(len(key) - 1, 0, -1):
            if key[i] < "C":
                # ``key[i]`` is the last degree before the crossing. When it
                # is the leading tone the octave turns over at the tonic.
                return i + 2 if i + 1 < len(key) else 1
            if key[i] == "C":
                return i + 1
    raise OctaveAnchorError(f"Cannot derive an octave anchor for key {list(key)}")
