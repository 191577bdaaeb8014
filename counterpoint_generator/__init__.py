#!/usr/bin/env python3
"""First-species counterpoint generator.

This package writes two-voice first-species counterpoint: a randomly
generated *cantus firmus* in the alto register and a rule-abiding
*counterpoint* below it in the tenor register. A typical workflow is to
create a :class:`FirstSpeciesComposer` for a key, call
:meth:`~FirstSpeciesComposer.generate` with the number of notes and render
the result with :meth:`~FirstSpeciesComposer.to_midi` or
:meth:`~FirstSpeciesComposer.to_csound`.

Underlying Algorithm
--------------------
Pitches are encoded as ``10 * octave + scale_degree`` relative to the key
so that every rule can be phrased in diatonic steps. The cantus is built
note by note from a small set of positional rules (start and end on the
tonic, approach the final by step, recover from leaps). The counterpoint
is found by randomised depth-first search: at each beat the set of
consonant pitches below the cantus is pruned by the voice-leading rules
(no parallel fifths or octaves, no chains of leaps, leap recovery, no
threefold repetition) and candidates are tried in random order, undoing
earlier choices when a beat has no legal pitch left. If a cantus admits no
counterpoint at all, a new cantus is generated.

Algorithm Pseudocode
--------------------
::

    tables = {voice: build_note_table(key, anchor, range) for voice in voices}
    for attempt in range(max_attempts):
        cantus = backtrack(total, allowed_cantus_notes)
        result = backtrack(total, allowed_counterpoint_notes)
        if result.success:
            return cantus, result.notes

Features include:
- Built-in major and natural minor keys, or custom key tables.
- Equal-tempered or file-supplied frequency tables.
- Configurable voice ranges and retry limits via a JSON settings file.
- MIDI output through ``mido`` and Csound ``.csd`` scores.
- Seedable random source for reproducible output.
"""

__version__ = "0.1.0"

import json
import logging
import os
from pathlib import Path

from .errors import (  # noqa: F401
    CounterpointError,
    KeyNotFoundError,
    NoteNotInKeyError,
    OctaveAnchorError,
    CantusGenerationStalled,
    CounterpointSearchExhausted,
)
from .keys import KEYS, NOTES, canonical_key, get_music_key, load_key_table  # noqa: F401
from .note_utils import (  # noqa: F401
    encode_pitch,
    note_to_pitch,
    pitch_to_note,
    get_interval,
    reduce_interval,
    is_consonant,
    octave_anchor,
)
from .frequencies import (  # noqa: F401
    CANTUS_RANGE,
    COUNTERPOINT_RANGE,
    NOTE_FREQUENCIES,
    VoiceRange,
    build_note_table,
    load_frequency_table,
)
from .search import SearchResult, backtrack  # noqa: F401
from .cantus import allowed_cantus_notes, generate_cantus  # noqa: F401
from .counterpoint import (  # noqa: F401
    allowed_counterpoint_notes,
    generate_counterpoint,
    search_counterpoint,
)
from .score import Score, ScoreEvent, assemble_score  # noqa: F401
from .composer import Composition, FirstSpeciesComposer  # noqa: F401

# Default path for storing user preferences. The file lives in the user's
# home directory so settings persist between runs.
env_path = os.environ.get("COUNTERPOINT_SETTINGS_FILE")
if env_path:
    DEFAULT_SETTINGS_FILE = Path(env_path).expanduser()
else:
    DEFAULT_SETTINGS_FILE = Path.home() / ".counterpoint_generator_settings.json"


def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> dict:
    """Load saved user settings from ``path`` if it exists.

    @param path (Path): Location of the settings file.
    @returns dict: Loaded settings or an empty dictionary when unavailable.
    """
    path = Path(path)
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logging.error("Could not load settings: %s", exc)
            return {}
        if isinstance(data, dict):
            return data
        logging.error("Ignoring settings file %s: expected a JSON object", path)
    return {}


def save_settings(settings: dict, path: Path = DEFAULT_SETTINGS_FILE) -> None:
    """Save user ``settings`` to ``path`` as JSON.

    @param settings (dict): Options to be persisted.
    @param path (Path): Destination file path.
    @returns None: Function does not return a value.
    """
    # Failing to save preferences never prevents generation, so errors are
    # logged rather than raised.
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2)
    except OSError as exc:
        logging.error("Could not save settings: %s", exc)


def run_cli(argv=None):
    from .cli import run_cli as _run_cli
    _run_cli(argv)


def main(argv=None):
    from .cli import main as _main
    _main(argv)


if __name__ == "__main__":
    main()
