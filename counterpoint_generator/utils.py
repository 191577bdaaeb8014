"""Validation helpers shared by the CLI and the composer.

Usage Example
-------------
>>> from counterpoint_generator.utils import validate_time_signature, calc_total_notes
>>> validate_time_signature("3/4")
(3, 4)
>>> calc_total_notes(2)
8
"""

from __future__ import annotations

from typing import Sequence, Tuple

__all__ = ["validate_time_signature", "calc_total_notes", "validate_voice_range"]

# Beats per measure when no time signature is given.
DEFAULT_BEATS_PER_MEASURE = 4


def validate_time_signature(ts: str) -> Tuple[int, int]:
    """Parse and validate a time signature string.

    Parameters
    ----------
    ts:
        Time signature in ``"NUM/DEN"`` form. Whitespace around the
        separator is ignored.

    Returns
    -------
    tuple[int, int]
        ``(numerator, denominator)`` when ``ts`` is valid.

    Raises
    ------
    ValueError
        If ``ts`` is malformed or uses an unsupported denominator.
    """

    parts = ts.strip().split("/")
    if len(parts) != 2:
        raise ValueError(
            "Time signature must be in the form 'numerator/denominator'."
        )

    try:
        numerator = int(parts[0])
        denominator = int(parts[1])
    except ValueError as exc:
        raise ValueError(
            "Time signature must contain integer numerator and denominator."
        ) from exc

    valid_denominators = {1, 2, 4, 8, 16}
    if numerator <= 0 or denominator not in valid_denominators:
        raise ValueError(
            "Time signature numerator must be > 0 and denominator one of 1, 2, 4, 8 or 16."
        )
    return numerator, denominator


def calc_total_notes(measures: int, beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE) -> int:
    """Return the number of notes per voice for ``measures`` bars.

    First species places one note on every beat.
    """

    if measures <= 0:
        raise ValueError("Number of measures must be a positive integer")
    if beats_per_measure <= 0:
        raise ValueError("Beats per measure must be a positive integer")
    return measures * beats_per_measure


def validate_voice_range(bounds: Sequence[float]) -> Tuple[float, float]:
    """Return ``bounds`` as a ``(low, high)`` tuple of positive frequencies.

    Raises
    ------
    ValueError
        If ``bounds`` does not hold two numbers with ``0 < low <= high``.
    """

    try:
        low, high = (float(b) for b in bounds)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Voice range must be two numbers, got {bounds!r}") from exc
    if not 0 < low <= high:
        raise ValueError(f"Voice range must satisfy 0 < low <= high, got {low}-{high}")
    return low, high
