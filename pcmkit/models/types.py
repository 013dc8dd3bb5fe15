"""Enum types used by pcmkit."""

from __future__ import annotations

from enum import Enum


class ContainerType(Enum):
    """Supported audio container files, keyed by file extension."""

    WAV = "wav"
    """
    RIFF/WAVE with a PCM ``fmt `` chunk.

    8-bit samples are unsigned, 16-bit samples are signed little-endian.
    """
    AU = "au"
    """
    Sun/NeXT ``.snd`` container.

    Linear PCM samples are signed and big-endian.
    """

    @property
    def extension(self) -> str:
        """Return the file extension including the leading dot."""
        return f".{self.value}"
