"""Frequency lookup and per-voice note tables.

A *note table* maps encoded pitches (see :mod:`counterpoint_generator.note_utils`)
to the frequency that should sound for them. Tables are built once per voice
from a frequency list restricted to that voice's range and to the notes of
the active key, and are treated as read-only afterwards.

Example
-------
>>> from counterpoint_generator.frequencies import build_note_table, COUNTERPOINT_RANGE
>>> table = build_note_table(["C", "D", "E", "F", "G", "A", "B"], 1, COUNTERPOINT_RANGE)
>>> table[31], table[51]
(130.81, 523.25)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, NamedTuple, Optional, Sequence, Union

from .errors import NoteNotInKeyError
from .keys import NOTES
from .note_utils import note_to_pitch

__all__ = [
    "VoiceRange",
    "CANTUS_RANGE",
    "COUNTERPOINT_RANGE",
    "NOTE_FREQUENCIES",
    "load_frequency_table",
    "build_note_table",
]

logger = logging.getLogger(__name__)


class VoiceRange(NamedTuple):
    """Inclusive frequency bounds of a voice in Hz."""

    low: float
    high: float


# Default ranges: the cantus sits in the alto register and the counterpoint
# in the tenor register below it.
CANTUS_RANGE = VoiceRange(196.00, 698.47)
COUNTERPOINT_RANGE = VoiceRange(130.81, 523.26)


def _equal_temperament(octaves=range(0, 9)) -> Dict[str, float]:
    """Return A440 equal-tempered frequencies rounded to two decimals."""

    table: Dict[str, float] = {}
    for octave in octaves:
        for semitone, name in enumerate(NOTES):
            midi = 12 * (octave + 1) + semitone
            table[f"{name}{octave}"] = round(440.0 * 2 ** ((midi - 69) / 12), 2)
    return table


NOTE_FREQUENCIES: Dict[str, float] = _equal_temperament()


def load_frequency_table(path: Union[str, Path]) -> Dict[str, float]:
    """Read ``note frequency`` rows from ``path``.

    The first line is a header and is ignored. Rows whose frequency column
    cannot be parsed are skipped with a warning.
    """

    table: Dict[str, float] = {}
    with open(path, "r", encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    for lineno, line in enumerate(lines[1:], start=2):
        fields = line.split()
        if len(fields) < 2:
            continue
        try:
            table[fields[0]] = float(fields[1])
        except ValueError:
            logger.warning("Skipping malformed frequency row %d in %s: %r", lineno, path, line)
    logger.debug("Loaded %d note frequencies from %s", len(table), path)
    return table


def build_note_table(
    key: Sequence[str],
    anchor: int,
    voice_range: Union[VoiceRange, Sequence[float]],
    frequencies: Optional[Mapping[str, float]] = None,
) -> Dict[int, float]:
    """Return the encoded pitches of ``key`` that sound inside ``voice_range``.

    Parameters
    ----------
    key:
        Seven note names, tonic first.
    anchor:
        Octave anchor of ``key``.
    voice_range:
        ``(low, high)`` bounds in Hz, both inclusive.
    frequencies:
        Mapping of note names with octave (``"C#4"``) to Hz. Defaults to
        :data:`NOTE_FREQUENCIES`.

    Returns
    -------
    Dict[int, float]
        Encoded pitch to frequency. Notes whose spelling does not match a key
        degree exactly (including sharp versus natural) are skipped.
    """

    low, high = voice_range
    if low > high:
        raise ValueError(f"Invalid voice range {low}-{high}")
    source = NOTE_FREQUENCIES if frequencies is None else frequencies
    table: Dict[int, float] = {}
    for note, freq in source.items():
        if not low <= freq <= high:
            continue
        try:
            pitch = note_to_pitch(note, key, anchor)
        except NoteNotInKeyError:
            # Chromatic notes outside the key are expected here.
            continue
        except ValueError as exc:
            logger.debug("Ignoring unparsable note %r: %s", note, exc)
            continue
        table[pitch] = freq
    logger.debug("Built note table with %d pitches for range %s-%s", len(table), low, high)
    return table
