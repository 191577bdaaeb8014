"""Tests for Csound ``.csd`` rendering."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from counterpoint_generator.csound_io import render_csound, write_csound_file  # noqa: E402
from counterpoint_generator.score import Score, ScoreEvent  # noqa: E402


def _score():
    return Score(
        bpm=90,
        voices={
            "cantus": [ScoreEvent(0.0, 1.0, 261.63), ScoreEvent(1.0, 1.0, 246.9)],
            "counterpoint": [ScoreEvent(0.0, 1.0, 130.81), ScoreEvent(1.0, 1.0, 196.0)],
        },
    )


def test_render_contains_instrument_per_voice():
    """Each voice gets its own ``vco2`` instrument."""

    text = render_csound(_score())
    assert text.startswith("<CsoundSynthesizer>")
    assert text.rstrip().endswith("</CsoundSynthesizer>")
    assert "instr 1" in text
    assert "instr 2" in text
    assert "instr 3" not in text
    assert text.count("vco2") == 2


def test_render_score_lines():
    """Score statements carry start, duration and frequency in beats."""

    lines = render_csound(_score()).splitlines()
    assert "t 0 90" in lines
    assert "i1 0 1 261.63" in lines
    assert "i1 1 1 246.90" in lines
    assert "i2 0 1 130.81" in lines
    assert "i2 1 1 196.00" in lines
    # Cantus statements come before the counterpoint's.
    assert lines.index("i1 1 1 246.90") < lines.index("i2 0 1 130.81")


def test_write_csound_file(tmp_path):
    """The document is written to disk, creating parent directories."""

    out = tmp_path / "nested" / "piece.csd"
    write_csound_file(_score(), str(out))
    assert out.read_text(encoding="utf-8") == render_csound(_score())
