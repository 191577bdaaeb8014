"""Key lookup tables.

``KEYS`` maps key names to their seven scale degrees, tonic first. Major keys
use the bare tonic as their name (``"D"``) and natural minor keys append
``m`` (``"Dm"``). Every name is spelled with sharps only so it matches the
spelling of the frequency table exactly.

Custom tables can be loaded from a plain text ``Keys.txt`` file: a
header line followed by one row per key holding seven whitespace separated
note names, the first of which doubles as the key name::

    I   II  III IV  V   VI  VII
    C   D   E   F   G   A   B
    A   B   C#  D   E   F#  G#
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .errors import KeyNotFoundError

__all__ = [
    "NOTES",
    "NOTE_TO_SEMITONE",
    "KEYS",
    "canonical_key",
    "get_music_key",
    "load_key_table",
]

logger = logging.getLogger(__name__)

# Sharp spellings of the twelve pitch classes, starting from C.
NOTES: List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
NOTE_TO_SEMITONE: Dict[str, int] = {n: i for i, n in enumerate(NOTES)}

_MODE_PATTERNS = {
    "": [0, 2, 4, 5, 7, 9, 11],
    "m": [0, 2, 3, 5, 7, 8, 10],
}


def _build_scale(root: str, pattern: List[int]) -> List[str]:
    """Return a scale starting at ``root`` following ``pattern`` intervals.

    @param root (str): Root note of the scale.
    @param pattern (List[int]): Semitone offsets from the root.
    @returns List[str]: Scale as sharp-spelled note names.
    """
    root_idx = NOTE_TO_SEMITONE[root]
    return [NOTES[(root_idx + interval) % 12] for interval in pattern]


KEYS: Dict[str, List[str]] = {
    f"{root}{suffix}": _build_scale(root, pattern)
    for suffix, pattern in _MODE_PATTERNS.items()
    for root in NOTES
}


@lru_cache(maxsize=None)
def _canonical_builtin(name: str) -> str:
    lookup = {k.lower(): k for k in KEYS}
    canonical = lookup.get(name.strip().lower())
    if canonical is None:
        raise KeyNotFoundError(name)
    return canonical


def canonical_key(name: str, table: Optional[Mapping[str, List[str]]] = None) -> str:
    """Return ``name`` spelled as it appears in ``table``.

    Matching is case-insensitive so ``"am"`` resolves to ``"Am"``.

    Raises
    ------
    KeyNotFoundError
        If no key of that name exists.
    """

    if table is None:
        return _canonical_builtin(name)
    wanted = name.strip().lower()
    for key in table:
        if key.lower() == wanted:
            return key
    raise KeyNotFoundError(name)


def get_music_key(name: str, table: Optional[Mapping[str, List[str]]] = None) -> List[str]:
    """Return the seven note names of key ``name``.

    @param name (str): Key name such as ``"C"`` or ``"F#m"``.
    @param table (Mapping): Optional key table, defaults to :data:`KEYS`.
    @returns List[str]: Copy of the scale degrees, tonic first.
    """
    source = KEYS if table is None else table
    return list(source[canonical_key(name, table)])


def load_key_table(path: Union[str, Path]) -> Dict[str, List[str]]:
    """Read a key table from ``path``.

    Rows that do not hold exactly seven distinct names are skipped with a
    warning rather than aborting the whole load.

    Raises
    ------
    OSError
        If the file cannot be read.
    """

    table: Dict[str, List[str]] = {}
    with open(path, "r", encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    # The first line is a column header.
    for lineno, line in enumerate(lines[1:], start=2):
        names = line.split()
        if not names:
            continue
        if len(names) != 7 or len(set(names)) != 7:
            logger.warning("Skipping malformed key row %d in %s: %r", lineno, path, line)
            continue
        table[names[0]] = names
    logger.debug("Loaded %d keys from %s", len(table), path)
    return table
