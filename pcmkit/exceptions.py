"""Exceptions raised by pcmkit."""

from __future__ import annotations


class PCMKitError(Exception):
    """Base class for every error raised by pcmkit."""


class NotFound(PCMKitError, FileNotFoundError):
    """An audio path could not be resolved or read."""


class FormatError(PCMKitError, ValueError):
    """
    PCM data or a container header describes something unsupported.

    Raised for bit depths outside {8, 16}, more than one channel, non-PCM
    container encodings and malformed headers.
    """


class UnsupportedFormat(FormatError):
    """The file extension does not map to a supported container."""


class DeviceError(PCMKitError, RuntimeError):
    """The audio output line could not be opened, configured or written."""


class DeviceBusy(DeviceError):
    """Another playback already holds the output line."""


class InvalidParameter(PCMKitError, ValueError):
    """Tone generation was asked for an out-of-range value."""
