"""Tests for key lookup and key table loading."""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from counterpoint_generator.errors import KeyNotFoundError  # noqa: E402
from counterpoint_generator.keys import KEYS, canonical_key, get_music_key, load_key_table  # noqa: E402


def test_builtin_keys_are_well_formed():
    """Every built-in key holds seven distinct names starting on its tonic."""

    assert len(KEYS) == 24
    for name, degrees in KEYS.items():
        assert len(degrees) == 7
        assert len(set(degrees)) == 7
        assert name.rstrip("m") == degrees[0]


def test_builtin_keys_use_sharps():
    """Spelling matches the sharp-only frequency table."""

    assert KEYS["C"] == ["C", "D", "E", "F", "G", "A", "B"]
    assert KEYS["F"] == ["F", "G", "A", "A#", "C", "D", "E"]
    assert KEYS["Am"] == ["A", "B", "C", "D", "E", "F", "G"]
    assert all("b" not in n for degrees in KEYS.values() for n in degrees)


def test_canonical_key_is_case_insensitive():
    """Lower-case input resolves to the stored spelling."""

    assert canonical_key("am") == "Am"
    assert canonical_key(" f# ") == "F#"


def test_get_music_key_unknown():
    """Unknown keys raise ``KeyNotFoundError``, a ``ValueError`` subclass."""

    with pytest.raises(KeyNotFoundError):
        get_music_key("H")
    with pytest.raises(ValueError):
        get_music_key("Cb")


def test_get_music_key_returns_copy():
    """Mutating the result leaves the table untouched."""

    degrees = get_music_key("G")
    degrees.append("X")
    assert len(KEYS["G"]) == 7


def test_load_key_table(tmp_path, caplog):
    """Rows are keyed by their first column and malformed rows skipped."""

    path = tmp_path / "Keys.txt"
    path.write_text(
        "I II III IV V VI VII\n"
        "C D E F G A B\n"
        "A B C# D E F# G#\n"
        "G A B C\n"
        "\n",
        encoding="utf-8",
    )
    with caplog.at_level(logging.WARNING):
        table = load_key_table(path)

    assert table == {
        "C": ["C", "D", "E", "F", "G", "A", "B"],
        "A": ["A", "B", "C#", "D", "E", "F#", "G#"],
    }
    assert "malformed" in caplog.text
    assert get_music_key("a", table) == table["A"]
    with pytest.raises(KeyNotFoundError):
        get_music_key("G", table)


def test_load_key_table_missing_file(tmp_path):
    """A missing table surfaces as ``OSError``."""

    with pytest.raises(OSError):
        load_key_table(tmp_path / "missing.txt")
