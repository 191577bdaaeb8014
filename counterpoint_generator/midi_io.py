"""Utilities for writing scores as MIDI files.

Modification summary
--------------------
* ``create_midi_file`` now takes an assembled :class:`~counterpoint_generator.score.Score`
  and writes one track per voice instead of a melody plus chord tracks.
* Frequencies are converted to the nearest equal-tempered MIDI note with
  :func:`frequency_to_midi`; out-of-range values raise ``ValueError``.
* Imports from ``mido`` are deferred inside ``create_midi_file`` so the module
  can load even when the MIDI dependency is missing.
* ``create_midi_file`` returns the ``MidiFile`` it wrote so callers and tests
  can inspect the in-memory representation.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, List, Tuple

if TYPE_CHECKING:
    from mido import MidiFile

from .score import Score

__all__ = ["frequency_to_midi", "create_midi_file"]

logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480


def frequency_to_midi(freq: float) -> int:
    """Return the MIDI note number closest to ``freq`` Hz (A4 = 440 Hz = 69).

    Raises
    ------
    ValueError
        If ``freq`` is not positive or maps outside ``0-127``.
    """

    if freq <= 0:
        raise ValueError(f"Frequency must be positive, got {freq}")
    midi = int(round(69 + 12 * math.log2(freq / 440.0)))
    if not 0 <= midi <= 127:
        raise ValueError(f"Frequency {freq} Hz maps to MIDI note {midi} outside 0-127")
    return midi


def create_midi_file(
    score: Score,
    output_file: str,
    *,
    time_signature: Tuple[int, int] = (4, 4),
    program: int = 0,
    velocity: int = 80,
) -> "MidiFile":
    """Write ``score`` to ``output_file`` with one track per voice.

    The parent directory of ``output_file`` is created automatically. Each
    voice is placed on its own channel so both parts can be edited
    independently after importing the file into notation software.

    Returns
    -------
    MidiFile
        In-memory representation of the written file.
    """
    try:
        import mido
        from mido import Message, MetaMessage, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to create MIDI files; install it with 'pip install mido'"
        ) from exc

    if not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")
    if score.bpm <= 0:
        raise ValueError("bpm must be a positive integer")

    mid = MidiFile(ticks_per_beat=TICKS_PER_BEAT)
    for channel, (voice, events) in enumerate(score.voices.items()):
        track = MidiTrack()
        mid.tracks.append(track)
        track.append(MetaMessage("track_name", name=voice, time=0))
        if channel == 0:
            # Tempo and meter live on the first track only.
            track.append(MetaMessage("set_tempo", tempo=mido.bpm2tempo(score.bpm), time=0))
            track.append(
                MetaMessage(
                    "time_signature",
                    numerator=time_signature[0],
                    denominator=time_signature[1],
                    time=0,
                )
            )
        track.append(Message("program_change", program=program, channel=channel, time=0))

        # Messages carry delta times, so track the absolute tick of the last
        # message written and convert each event's start into an offset.
        timeline: List[Tuple[int, "Message"]] = []
        for event in events:
            note = frequency_to_midi(event.frequency)
            start = int(round(event.start * TICKS_PER_BEAT))
            end = int(round((event.start + event.duration) * TICKS_PER_BEAT))
            timeline.append((start, Message("note_on", note=note, velocity=velocity, channel=channel)))
            timeline.append((end, Message("note_off", note=note, velocity=0, channel=channel)))
        # ``note_off`` sorts before ``note_on`` at the same tick so repeated
        # pitches are re-struck instead of cut short.
        timeline.sort(key=lambda item: (item[0], item[1].type == "note_on"))
        last = 0
        for tick, msg in timeline:
            track.append(msg.copy(time=tick - last))
            last = tick

    Path(output_file).expanduser().parent.mkdir(parents=True, exist_ok=True)
    mid.save(output_file)
    logger.info("MIDI file saved to %s", output_file)
    return mid
