"""PCM stream format description."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from mashumaro.mixins.orjson import DataClassORJSONMixin

from pcmkit.exceptions import FormatError

CANONICAL_SAMPLE_RATE: Final[int] = 44_100
"""Sample rate used for synthesized and saved audio."""

SUPPORTED_BIT_DEPTHS: Final[tuple[int, ...]] = (8, 16)


@dataclass(frozen=True)
class FormatDescriptor(DataClassORJSONMixin):
    """Shape of a PCM stream as declared by a container header."""

    sample_rate: int
    """Sample rate in Hz (e.g., 44100, 8000)."""
    bit_depth: int
    """Bits per sample (8 or 16)."""
    channels: int = 1
    """Number of audio channels (only mono is supported)."""
    signed: bool = True
    """Whether samples are two's complement integers."""
    little_endian: bool = True
    """Byte order of multi-byte samples."""

    def __post_init__(self) -> None:
        """Validate the provided PCM audio format."""
        if self.sample_rate <= 0:
            raise FormatError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise FormatError(f"bit_depth must be 8 or 16, got {self.bit_depth}")
        if self.channels != 1:
            raise FormatError(f"Only mono is supported, got {self.channels} channels")

    @property
    def frame_size(self) -> int:
        """Return bytes per PCM frame."""
        return self.channels * (self.bit_depth // 8)

    @property
    def byte_rate(self) -> int:
        """Return bytes per second of audio."""
        return self.sample_rate * self.frame_size

    def with_byte_order(self, *, little_endian: bool) -> FormatDescriptor:
        """Return a copy of this format using the given byte order."""
        return replace(self, little_endian=little_endian)

    def duration_s(self, byte_count: int) -> float:
        """Return the playback duration of ``byte_count`` bytes in seconds."""
        return (byte_count // self.frame_size) / self.sample_rate


CANONICAL_FORMAT: Final[FormatDescriptor] = FormatDescriptor(
    sample_rate=CANONICAL_SAMPLE_RATE,
    bit_depth=16,
    channels=1,
    signed=True,
    little_endian=True,
)
"""44.1 kHz, 16-bit, mono, signed, little-endian."""


def canonical_format(sample_rate: int = CANONICAL_SAMPLE_RATE) -> FormatDescriptor:
    """Return the canonical 16-bit signed little-endian mono format at ``sample_rate``."""
    if sample_rate == CANONICAL_SAMPLE_RATE:
        return CANONICAL_FORMAT
    return replace(CANONICAL_FORMAT, sample_rate=sample_rate)
