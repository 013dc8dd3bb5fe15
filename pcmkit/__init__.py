"""pcmkit: PCM sample codec, container files and blocking playback."""

from __future__ import annotations

from pcmkit.codec import SampleBuffer, decode, encode, quantization_step
from pcmkit.exceptions import (
    DeviceBusy,
    DeviceError,
    FormatError,
    InvalidParameter,
    NotFound,
    PCMKitError,
    UnsupportedFormat,
)
from pcmkit.models import CANONICAL_FORMAT, CANONICAL_SAMPLE_RATE, ContainerType, FormatDescriptor
from pcmkit.sink import PlaybackSink, play_blocking
from pcmkit.source import load, read_samples
from pcmkit.tone import major_scale, note, silence
from pcmkit.writer import save

__all__ = [
    "CANONICAL_FORMAT",
    "CANONICAL_SAMPLE_RATE",
    "ContainerType",
    "DeviceBusy",
    "DeviceError",
    "FormatDescriptor",
    "FormatError",
    "InvalidParameter",
    "NotFound",
    "PCMKitError",
    "PlaybackSink",
    "SampleBuffer",
    "UnsupportedFormat",
    "decode",
    "encode",
    "load",
    "major_scale",
    "note",
    "play_blocking",
    "quantization_step",
    "read_samples",
    "save",
    "silence",
]
