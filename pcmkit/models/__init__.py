"""Models for pcmkit."""

from __future__ import annotations

from . import audio_format, types
from .audio_format import (
    CANONICAL_FORMAT,
    CANONICAL_SAMPLE_RATE,
    SUPPORTED_BIT_DEPTHS,
    FormatDescriptor,
    canonical_format,
)
from .types import ContainerType

__all__ = [
    "CANONICAL_FORMAT",
    "CANONICAL_SAMPLE_RATE",
    "SUPPORTED_BIT_DEPTHS",
    "ContainerType",
    "FormatDescriptor",
    "audio_format",
    "canonical_format",
    "types",
]
