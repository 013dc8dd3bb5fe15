"""Header packing and parsing for the supported PCM containers."""

from __future__ import annotations

import logging
import os
import struct
from pathlib import PurePath
from typing import Final, NamedTuple

from pcmkit.exceptions import FormatError, UnsupportedFormat
from pcmkit.models import CANONICAL_SAMPLE_RATE, ContainerType, FormatDescriptor

logger = logging.getLogger(__name__)

# RIFF/WAVE (little-endian): "RIFF" size "WAVE", then chunks of id(4) + size(4)
WAV_RIFF_HEADER_FORMAT = "<4sI4s"
WAV_CHUNK_HEADER_FORMAT = "<4sI"
WAV_FMT_FORMAT = "<HHIIHH"
WAV_CANONICAL_HEADER_FORMAT = "<4sI4s4sIHHIIHH4sI"

WAVE_FORMAT_PCM: Final[int] = 0x0001
WAVE_FORMAT_EXTENSIBLE: Final[int] = 0xFFFE

# Sun/NeXT (big-endian): magic, data offset, data size, encoding, sample rate, channels
AU_HEADER_FORMAT = ">4sIIIII"
AU_HEADER_SIZE = struct.calcsize(AU_HEADER_FORMAT)
AU_MAGIC: Final[bytes] = b".snd"
AU_UNKNOWN_SIZE: Final[int] = 0xFFFFFFFF
AU_ENCODING_LINEAR_8: Final[int] = 2
AU_ENCODING_LINEAR_16: Final[int] = 3

_AU_BIT_DEPTHS: Final[dict[int, int]] = {
    AU_ENCODING_LINEAR_8: 8,
    AU_ENCODING_LINEAR_16: 16,
}


class ContainerPayload(NamedTuple):
    """PCM payload extracted from a container file."""

    data: bytes  # raw sample bytes, header stripped
    format: FormatDescriptor  # format as declared by the header


def container_for_path(path: str | os.PathLike[str]) -> ContainerType:
    """
    Return the container implied by the extension of ``path``.

    The comparison is case-insensitive.

    Raises:
        UnsupportedFormat: If the extension is not ``.wav`` or ``.au``.
    """
    suffix = PurePath(path).suffix.lower().lstrip(".")
    try:
        return ContainerType(suffix)
    except ValueError as exc:
        raise UnsupportedFormat(f"File format not supported: {os.fspath(path)}") from exc


def storage_format(
    container: ContainerType, sample_rate: int = CANONICAL_SAMPLE_RATE
) -> FormatDescriptor:
    """Return the 16-bit signed mono format ``container`` stores natively."""
    return FormatDescriptor(
        sample_rate=sample_rate,
        bit_depth=16,
        channels=1,
        signed=True,
        little_endian=container is ContainerType.WAV,
    )


def _parse_wav_fmt(chunk: bytes) -> FormatDescriptor:
    if len(chunk) < struct.calcsize(WAV_FMT_FORMAT):
        raise FormatError(f"WAV fmt chunk too short: {len(chunk)} bytes")
    format_tag, channels, sample_rate, _byte_rate, _block_align, bit_depth = struct.unpack(
        WAV_FMT_FORMAT, chunk[: struct.calcsize(WAV_FMT_FORMAT)]
    )
    if format_tag == WAVE_FORMAT_EXTENSIBLE:
        # cbSize(2) + valid bits(2) + channel mask(4), then the sub-format GUID
        if len(chunk) < 40:
            raise FormatError("WAV extensible fmt chunk is truncated")
        (format_tag,) = struct.unpack("<H", chunk[24:26])
    if format_tag != WAVE_FORMAT_PCM:
        raise FormatError(f"WAV encoding 0x{format_tag:04x} is not linear PCM")
    return FormatDescriptor(
        sample_rate=sample_rate,
        bit_depth=bit_depth,
        channels=channels,
        signed=bit_depth != 8,
        little_endian=True,
    )


def unpack_wav(blob: bytes) -> ContainerPayload:
    """
    Extract the PCM payload and format from a RIFF/WAVE file.

    Chunks other than ``fmt `` and ``data`` are skipped.

    Raises:
        FormatError: If the header is malformed or does not describe mono
            8/16-bit linear PCM.
    """
    riff_size = struct.calcsize(WAV_RIFF_HEADER_FORMAT)
    if len(blob) < riff_size:
        raise FormatError(f"Expected at least {riff_size} bytes, got {len(blob)}")
    riff, _size, wave = struct.unpack(WAV_RIFF_HEADER_FORMAT, blob[:riff_size])
    if riff != b"RIFF" or wave != b"WAVE":
        raise FormatError("Not a RIFF/WAVE file")

    chunk_header_size = struct.calcsize(WAV_CHUNK_HEADER_FORMAT)
    fmt: FormatDescriptor | None = None
    data: bytes | None = None
    offset = riff_size
    while offset + chunk_header_size <= len(blob) and (fmt is None or data is None):
        chunk_id, chunk_size = struct.unpack(
            WAV_CHUNK_HEADER_FORMAT, blob[offset : offset + chunk_header_size]
        )
        body_start = offset + chunk_header_size
        body = blob[body_start : body_start + chunk_size]
        if chunk_id == b"fmt ":
            fmt = _parse_wav_fmt(body)
        elif chunk_id == b"data":
            if len(body) < chunk_size:
                logger.warning(
                    "WAV data chunk declares %d bytes but only %d are present",
                    chunk_size,
                    len(body),
                )
            data = body
        else:
            logger.debug("Skipping WAV chunk %r (%d bytes)", chunk_id, chunk_size)
        # Chunks are word aligned
        offset = body_start + chunk_size + (chunk_size & 1)

    if fmt is None:
        raise FormatError("WAV file has no fmt chunk")
    if data is None:
        raise FormatError("WAV file has no data chunk")
    return ContainerPayload(data=data, format=fmt)


def pack_wav(data: bytes, fmt: FormatDescriptor) -> bytes:
    """
    Wrap raw PCM bytes in a canonical 44-byte RIFF/WAVE header.

    Raises:
        FormatError: If ``fmt`` cannot be stored in a WAV file as-is.
    """
    if not fmt.little_endian and fmt.bit_depth > 8:
        raise FormatError("WAV stores multi-byte samples little-endian")
    if fmt.signed != (fmt.bit_depth != 8):
        raise FormatError("WAV stores 8-bit samples unsigned and 16-bit samples signed")
    pad = b"\x00" if len(data) & 1 else b""
    header = struct.pack(
        WAV_CANONICAL_HEADER_FORMAT,
        b"RIFF",
        36 + len(data) + len(pad),
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size for PCM
        WAVE_FORMAT_PCM,
        fmt.channels,
        fmt.sample_rate,
        fmt.byte_rate,
        fmt.frame_size,
        fmt.bit_depth,
        b"data",
        len(data),
    )
    return header + data + pad


def unpack_au(blob: bytes) -> ContainerPayload:
    """
    Extract the PCM payload and format from a Sun/NeXT AU file.

    Raises:
        FormatError: If the header is malformed or does not describe mono
            8/16-bit linear PCM.
    """
    if len(blob) < AU_HEADER_SIZE:
        raise FormatError(f"Expected at least {AU_HEADER_SIZE} bytes, got {len(blob)}")
    magic, data_offset, data_size, encoding, sample_rate, channels = struct.unpack(
        AU_HEADER_FORMAT, blob[:AU_HEADER_SIZE]
    )
    if magic != AU_MAGIC:
        raise FormatError("Not an AU file")
    if data_offset < AU_HEADER_SIZE or data_offset > len(blob):
        raise FormatError(f"Invalid AU data offset: {data_offset}")
    bit_depth = _AU_BIT_DEPTHS.get(encoding)
    if bit_depth is None:
        raise FormatError(f"AU encoding {encoding} is not linear PCM")
    fmt = FormatDescriptor(
        sample_rate=sample_rate,
        bit_depth=bit_depth,
        channels=channels,
        signed=True,
        little_endian=False,
    )

    if data_size == AU_UNKNOWN_SIZE:
        data = blob[data_offset:]
    else:
        data = blob[data_offset : data_offset + data_size]
        if len(data) < data_size:
            logger.warning(
                "AU header declares %d bytes but only %d are present", data_size, len(data)
            )
    return ContainerPayload(data=data, format=fmt)


def pack_au(data: bytes, fmt: FormatDescriptor) -> bytes:
    """
    Prefix raw PCM bytes with a 24-byte AU header.

    Raises:
        FormatError: If ``fmt`` cannot be stored in an AU file as-is.
    """
    if fmt.little_endian and fmt.bit_depth > 8:
        raise FormatError("AU stores multi-byte samples big-endian")
    if not fmt.signed:
        raise FormatError("AU linear PCM samples are signed")
    encoding = AU_ENCODING_LINEAR_8 if fmt.bit_depth == 8 else AU_ENCODING_LINEAR_16
    header = struct.pack(
        AU_HEADER_FORMAT,
        AU_MAGIC,
        AU_HEADER_SIZE,
        len(data),
        encoding,
        fmt.sample_rate,
        fmt.channels,
    )
    return header + data


def unpack(container: ContainerType, blob: bytes) -> ContainerPayload:
    """Extract the PCM payload of ``blob`` stored as ``container``."""
    if container is ContainerType.WAV:
        return unpack_wav(blob)
    return unpack_au(blob)


def pack(container: ContainerType, data: bytes, fmt: FormatDescriptor) -> bytes:
    """Return ``data`` wrapped in the header of ``container``."""
    if container is ContainerType.WAV:
        return pack_wav(data, fmt)
    return pack_au(data, fmt)
