"""Score assembly.

Turns encoded pitch sequences into timed events that renderers can write out
without knowing anything about scale degrees. Times are measured in beats;
first species places one note on every beat, so each event lasts one beat
and starts where the previous one ended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

__all__ = ["ScoreEvent", "Score", "voice_events", "assemble_score"]


@dataclass(frozen=True)
class ScoreEvent:
    """A single sounding note."""

    start: float
    duration: float
    frequency: float


@dataclass
class Score:
    """Timed events for every voice of a composition.

    ``voices`` preserves insertion order, which renderers use as the track
    or instrument order.
    """

    bpm: int
    voices: Dict[str, List[ScoreEvent]] = field(default_factory=dict)
    beats_per_measure: int = 4

    @property
    def total_beats(self) -> float:
        """Length of the longest voice in beats."""
        ends = [e.start + e.duration for events in self.voices.values() for e in events]
        return max(ends, default=0.0)


def voice_events(
    pitches: Sequence[int],
    notes: Mapping[int, float],
    *,
    duration: float = 1.0,
) -> List[ScoreEvent]:
    """Return one event per pitch using the frequencies in ``notes``.

    Raises
    ------
    ValueError
        If a pitch has no entry in ``notes``.
    """

    events = []
    for beat, pitch in enumerate(pitches):
        try:
            freq = notes[pitch]
        except KeyError:
            raise ValueError(f"Pitch {pitch} is not in the voice's note table") from None
        events.append(ScoreEvent(beat * duration, duration, freq))
    return events


def assemble_score(
    lines: Mapping[str, Sequence[int]],
    tables: Mapping[str, Mapping[int, float]],
    bpm: int,
    *,
    beats_per_measure: int = 4,
) -> Score:
    """Build a :class:`Score` from pitch ``lines`` keyed by voice name.

    @param lines (Mapping): Voice name to encoded pitches.
    @param tables (Mapping): Voice name to that voice's note table.
    @param bpm (int): Tempo in beats per minute.
    @returns Score: Events for every voice in ``lines`` order.
    """
    if bpm <= 0:
        raise ValueError("bpm must be a positive integer")
    lengths = {len(p) for p in lines.values()}
    if len(lengths) > 1:
        raise ValueError("All voices must contain the same number of notes")
    score = Score(bpm=bpm, beats_per_measure=beats_per_measure)
    for voice, pitches in lines.items():
        if voice not in tables:
            raise ValueError(f"No note table for voice '{voice}'")
        score.voices[voice] = voice_events(pitches, tables[voice])
    return score
