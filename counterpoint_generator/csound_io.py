"""Csound ``.csd`` output.

Each voice becomes one instrument playing a band-limited sawtooth (``vco2``)
at the frequency given in ``p4``. The score section starts with a tempo
statement so start times and durations stay in beats::

    t 0 90
    i1 0 1 261.63
    i2 0 1 130.81
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .score import Score

__all__ = ["render_csound", "write_csound_file"]

logger = logging.getLogger(__name__)

_INSTRUMENT = """instr {number}
aSin vco2 0dbfs/4, p4
out aSin
endin
"""


def _fmt(value: float) -> str:
    return f"{value:g}"


def render_csound(score: Score) -> str:
    """Return the complete ``.csd`` document for ``score``."""

    lines: List[str] = [
        "<CsoundSynthesizer>",
        "<CsOptions>",
        "-odac",
        "</CsOptions>",
        "<CsInstruments>",
    ]
    for number in range(1, len(score.voices) + 1):
        lines.append(_INSTRUMENT.format(number=number))
    lines += ["</CsInstruments>", "<CsScore>", f"t 0 {score.bpm}", ""]
    for number, events in enumerate(score.voices.values(), start=1):
        for event in events:
            lines.append(
                f"i{number} {_fmt(event.start)} {_fmt(event.duration)} {event.frequency:.2f}"
            )
    lines += ["</CsScore>", "</CsoundSynthesizer>"]
    return "\n".join(lines) + "\n"


def write_csound_file(score: Score, output_file: str) -> None:
    """Write ``score`` to ``output_file`` as a Csound document."""

    path = Path(output_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_csound(score), encoding="utf-8")
    logger.info("Csound score saved to %s", path)
