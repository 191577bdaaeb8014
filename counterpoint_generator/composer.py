"""Two-voice first-species composition.

:class:`FirstSpeciesComposer` ties the pieces together: it resolves the key,
builds a note table for each voice range, generates a cantus and then
searches for a counterpoint below it. Rare cantus shapes admit no legal
counterpoint at all; in that case a fresh cantus is generated and the search
repeated, up to ``max_attempts`` times.

Example
-------
>>> import random
>>> composer = FirstSpeciesComposer("C", rng=random.Random(3))
>>> piece = composer.generate(8)
>>> len(piece.cantus), len(piece.counterpoint)
(8, 8)
>>> score = composer.to_score(piece, 90)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .cantus import generate_cantus
from .counterpoint import generate_counterpoint
from .errors import CounterpointSearchExhausted
from .frequencies import CANTUS_RANGE, COUNTERPOINT_RANGE, VoiceRange, build_note_table
from .keys import canonical_key, get_music_key
from .note_utils import octave_anchor, pitch_to_note
from .score import Score, assemble_score

__all__ = ["Composition", "FirstSpeciesComposer", "DEFAULT_MAX_ATTEMPTS"]

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 50


@dataclass(frozen=True)
class Composition:
    """A finished cantus/counterpoint pair and the context it was built in."""

    key_name: str
    key: Tuple[str, ...]
    anchor: int
    cantus: Tuple[int, ...]
    counterpoint: Tuple[int, ...]
    attempts: int = 1

    def note_names(self) -> Dict[str, List[str]]:
        """Return both lines as note names with octave, e.g. ``"E4"``."""
        return {
            "cantus": [pitch_to_note(p, self.key, self.anchor) for p in self.cantus],
            "counterpoint": [
                pitch_to_note(p, self.key, self.anchor) for p in self.counterpoint
            ],
        }


class FirstSpeciesComposer:
    """Generate a cantus and a first-species counterpoint below it."""

    voices = ["cantus", "counterpoint"]

    def __init__(
        self,
        key: str,
        *,
        voice_ranges: Optional[Mapping[str, Sequence[float]]] = None,
        frequencies: Optional[Mapping[str, float]] = None,
        key_table: Optional[Mapping[str, List[str]]] = None,
        rng: Optional[random.Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        """Create a composer for ``key``.

        Parameters
        ----------
        key:
            Key name looked up in ``key_table`` (case-insensitive).
        voice_ranges:
            Optional ``{"cantus": (low, high), "counterpoint": (low, high)}``
            overrides in Hz. Missing voices keep their default range.
        frequencies:
            Note name to frequency mapping, defaults to equal temperament.
        key_table:
            Key name to scale degrees, defaults to the built-in table.
        rng:
            Random source shared by both generators.
        max_attempts:
            How many cantus lines to try before giving up.

        Raises
        ------
        KeyNotFoundError
            If ``key`` is not in the key table.
        OctaveAnchorError
            If the key's octave boundary cannot be derived.
        """

        if max_attempts <= 0:
            raise ValueError("max_attempts must be a positive integer")
        self.key_name = canonical_key(key, key_table)
        self.key = tuple(get_music_key(self.key_name, key_table))
        self.anchor = octave_anchor(self.key)
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

        ranges: Dict[str, VoiceRange] = {
            "cantus": CANTUS_RANGE,
            "counterpoint": COUNTERPOINT_RANGE,
        }
        for voice, bounds in (voice_ranges or {}).items():
            if voice not in ranges:
                raise ValueError(f"Unknown voice '{voice}'")
            ranges[voice] = VoiceRange(*bounds)
        self.voice_ranges = ranges
        self.note_tables: Dict[str, Dict[int, float]] = {
            voice: build_note_table(self.key, self.anchor, bounds, frequencies)
            for voice, bounds in ranges.items()
        }

    def generate(self, num_notes: int) -> Composition:
        """Return a cantus and counterpoint of ``num_notes`` notes each.

        Raises
        ------
        ValueError
            If ``num_notes`` is too small to hold a cadence.
        CantusGenerationStalled
            If the cantus range cannot hold a legal melody.
        CounterpointSearchExhausted
            If no attempt produced a counterpoint.
        """

        for attempt in range(1, self.max_attempts + 1):
            cantus = generate_cantus(self.note_tables["cantus"], num_notes, self.rng)
            try:
                counterpoint = generate_counterpoint(
                    cantus, self.note_tables["counterpoint"], self.rng
                )
            except CounterpointSearchExhausted:
                logger.warning(
                    "No counterpoint for cantus %s (attempt %d/%d); regenerating cantus",
                    list(cantus),
                    attempt,
                    self.max_attempts,
                )
                continue
            logger.info("Composed %d notes in %s after %d attempt(s)", num_notes, self.key_name, attempt)
            return Composition(
                self.key_name, self.key, self.anchor, cantus, counterpoint, attempt
            )
        raise CounterpointSearchExhausted(
            f"No counterpoint found in {self.max_attempts} attempts"
        )

    def to_score(self, composition: Composition, bpm: int, *, beats_per_measure: int = 4) -> Score:
        """Return timed frequency events for both voices of ``composition``."""

        return assemble_score(
            {"cantus": composition.cantus, "counterpoint": composition.counterpoint},
            self.note_tables,
            bpm,
            beats_per_measure=beats_per_measure,
        )

    def to_midi(
        self,
        composition: Composition,
        bpm: int,
        path: str,
        *,
        time_signature: Tuple[int, int] = (4, 4),
    ):
        """Write ``composition`` to ``path`` as a two-track MIDI file."""

        from .midi_io import create_midi_file  # Local import keeps mido optional

        score = self.to_score(composition, bpm, beats_per_measure=time_signature[0])
        return create_midi_file(score, path, time_signature=time_signature)

    def to_csound(self, composition: Composition, bpm: int, path: str) -> None:
        """Write ``composition`` to ``path`` as a Csound ``.csd`` file."""

        from .csound_io import write_csound_file

        write_csound_file(self.to_score(composition, bpm), path)
