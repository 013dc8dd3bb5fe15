"""Synthetic tone generation."""

from __future__ import annotations

import math
from typing import Final

import numpy as np

from pcmkit.codec import SampleBuffer
from pcmkit.exceptions import InvalidParameter
from pcmkit.models import CANONICAL_SAMPLE_RATE

MAJOR_SCALE_STEPS: Final[tuple[int, ...]] = (0, 2, 4, 5, 7, 9, 11, 12)
"""Semitone offsets of a major scale, root to octave."""


def _frame_count(duration_s: float, sample_rate: int) -> int:
    if sample_rate <= 0:
        raise InvalidParameter(f"sample_rate must be positive, got {sample_rate}")
    if not math.isfinite(duration_s) or duration_s < 0:
        raise InvalidParameter(f"duration_s must be >= 0, got {duration_s}")
    return round(sample_rate * duration_s)


def note(
    hz: float,
    duration_s: float,
    amplitude: float,
    *,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
) -> SampleBuffer:
    """
    Return a sine tone at ``hz`` lasting ``duration_s`` seconds.

    Args:
        hz: Frequency in Hz, must be positive.
        duration_s: Length in seconds, must not be negative.
        amplitude: Peak amplitude in [0.0, 1.0].
        sample_rate: Sample rate of the generated buffer.

    Raises:
        InvalidParameter: If any argument is out of range.
    """
    if not math.isfinite(hz) or hz <= 0:
        raise InvalidParameter(f"hz must be positive, got {hz}")
    if not 0.0 <= amplitude <= 1.0:
        raise InvalidParameter(f"amplitude must be within [0, 1], got {amplitude}")
    frames = _frame_count(duration_s, sample_rate)
    index = np.arange(frames, dtype=np.float64)
    return amplitude * np.sin(2.0 * math.pi * index * hz / sample_rate)


def silence(duration_s: float, *, sample_rate: int = CANONICAL_SAMPLE_RATE) -> SampleBuffer:
    """Return ``duration_s`` seconds of silence."""
    return np.zeros(_frame_count(duration_s, sample_rate), dtype=np.float64)


def scale_frequencies(root_hz: float) -> list[float]:
    """Return the major scale frequencies starting at ``root_hz``, ascending."""
    return [root_hz * 2.0 ** (step / 12.0) for step in MAJOR_SCALE_STEPS]


def major_scale(
    root_hz: float,
    *,
    duration_s: float = 1.0,
    amplitude: float = 0.5,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
) -> list[SampleBuffer]:
    """Return one tone per major scale degree, from ``root_hz`` up one octave."""
    return [
        note(hz, duration_s, amplitude, sample_rate=sample_rate)
        for hz in scale_frequencies(root_hz)
    ]
