"""Unit tests for ``midi_io``'s behaviour and error handling.

``create_midi_file`` is exercised with the real ``mido`` package; the
missing-dependency path is simulated by patching ``__import__``.
"""

from __future__ import annotations

import builtins
import sys
from pathlib import Path

import pytest

# Ensure the package is importable regardless of the current working directory
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from counterpoint_generator import midi_io  # noqa: E402  # isort:skip
from counterpoint_generator.score import Score, ScoreEvent  # noqa: E402  # isort:skip


def _score(bpm=120):
    return Score(
        bpm=bpm,
        voices={
            "cantus": [
                ScoreEvent(0.0, 1.0, 261.63),
                ScoreEvent(1.0, 1.0, 261.63),
                ScoreEvent(2.0, 1.0, 293.66),
            ],
            "counterpoint": [
                ScoreEvent(0.0, 1.0, 130.81),
                ScoreEvent(1.0, 1.0, 220.0),
                ScoreEvent(2.0, 1.0, 246.94),
            ],
        },
    )


@pytest.mark.parametrize(
    "freq, note", [(440.0, 69), (261.63, 60), (130.81, 48), (698.46, 77)]
)
def test_frequency_to_midi(freq, note):
    """Frequencies map to the nearest equal-tempered MIDI note."""

    assert midi_io.frequency_to_midi(freq) == note


@pytest.mark.parametrize("freq", [0.0, -5.0, 20000.0])
def test_frequency_to_midi_rejects_out_of_range(freq):
    """Non-positive or unplayable frequencies raise ``ValueError``."""

    with pytest.raises(ValueError):
        midi_io.frequency_to_midi(freq)


def test_create_midi_file_writes_one_track_per_voice(tmp_path):
    """Each voice gets its own named track and channel."""

    from mido import MidiFile

    out = tmp_path / "sub" / "song.mid"
    mid = midi_io.create_midi_file(_score(), str(out))

    assert isinstance(mid, MidiFile)
    assert out.exists()
    assert len(mid.tracks) == 2
    names = [
        msg.name for track in mid.tracks for msg in track if msg.type == "track_name"
    ]
    assert names == ["cantus", "counterpoint"]

    loaded = MidiFile(str(out))
    notes = [
        [msg.note for msg in track if msg.type == "note_on"] for track in loaded.tracks
    ]
    assert notes == [[60, 60, 62], [48, 57, 59]]
    channels = {msg.channel for msg in loaded.tracks[1] if msg.type == "note_on"}
    assert channels == {1}


def test_tempo_and_meter_on_first_track(tmp_path):
    """Tempo and time signature are written once, on the first track."""

    import mido

    mid = midi_io.create_midi_file(
        _score(bpm=90), str(tmp_path / "t.mid"), time_signature=(3, 4)
    )
    first = [msg for msg in mid.tracks[0] if msg.is_meta]
    tempo = [m for m in first if m.type == "set_tempo"]
    meter = [m for m in first if m.type == "time_signature"]
    assert tempo[0].tempo == mido.bpm2tempo(90)
    assert (meter[0].numerator, meter[0].denominator) == (3, 4)
    assert not any(m.type == "set_tempo" for m in mid.tracks[1])


def test_repeated_pitch_is_restruck(tmp_path):
    """A note released and struck on the same tick keeps ``note_off`` first."""

    mid = midi_io.create_midi_file(_score(), str(tmp_path / "r.mid"))
    events = [
        (msg.type, msg.time)
        for msg in mid.tracks[0]
        if msg.type in ("note_on", "note_off")
    ]
    assert events[:4] == [
        ("note_on", 0),
        ("note_off", midi_io.TICKS_PER_BEAT),
        ("note_on", 0),
        ("note_off", midi_io.TICKS_PER_BEAT),
    ]


def test_create_midi_file_invalid_program(tmp_path):
    """Programs outside ``0-127`` are rejected before writing."""

    with pytest.raises(ValueError):
        midi_io.create_midi_file(_score(), str(tmp_path / "x.mid"), program=200)


def test_create_midi_file_missing_mido(monkeypatch, tmp_path):
    """Absent ``mido`` should raise ``ImportError`` with install guidance."""

    real_import = builtins.__import__

    def fake_import(name, *args, **kwargs):
        if name == "mido" or name.startswith("mido."):
            raise ModuleNotFoundError("No module named 'mido'")
        return real_import(name, *args, **kwargs)

    monkeypatch.delitem(sys.modules, "mido", raising=False)
    monkeypatch.setattr(builtins, "__import__", fake_import)

    with pytest.raises(ImportError, match="pip install mido"):
        midi_io.create_midi_file(_score(), str(tmp_path / "x.mid"))
