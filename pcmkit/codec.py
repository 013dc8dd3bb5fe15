"""Conversion between raw PCM bytes and normalized float samples."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

import numpy as np
import numpy.typing as npt

from pcmkit.exceptions import FormatError
from pcmkit.models import SUPPORTED_BIT_DEPTHS, FormatDescriptor

logger = logging.getLogger(__name__)

SampleBuffer = npt.NDArray[np.float64]
"""One-dimensional array of samples nominally in [-1.0, 1.0]."""

_MAGNITUDE: Final[dict[int, float]] = {8: 128.0, 16: 32768.0}


def _require_supported(fmt: FormatDescriptor) -> float:
    """Return the integer range magnitude for ``fmt`` or raise FormatError."""
    if fmt.bit_depth not in SUPPORTED_BIT_DEPTHS:
        raise FormatError(f"Only 8-bit and 16-bit PCM are supported, got {fmt.bit_depth}")
    if fmt.channels != 1:
        raise FormatError(f"Only mono PCM is supported, got {fmt.channels} channels")
    return _MAGNITUDE[fmt.bit_depth]


def _numpy_dtype(fmt: FormatDescriptor) -> np.dtype[np.integer]:
    kind = "i" if fmt.signed else "u"
    if fmt.bit_depth == 8:
        return np.dtype(f"{kind}1")
    order = "<" if fmt.little_endian else ">"
    return np.dtype(f"{order}{kind}{fmt.bit_depth // 8}")


def quantization_step(fmt: FormatDescriptor) -> float:
    """Return the smallest representable amplitude change for ``fmt``."""
    return 1.0 / _require_supported(fmt)


def decode(data: bytes, fmt: FormatDescriptor) -> SampleBuffer:
    """
    Decode raw PCM bytes into normalized samples.

    Each frame is read as an integer of ``fmt.bit_depth`` bits in the byte order
    and signedness declared by ``fmt``, then divided by the magnitude of the
    integer range (32768.0 for 16-bit). Unsigned data is re-centred first.

    A trailing partial frame is dropped.

    Args:
        data: Raw PCM bytes laid out as described by ``fmt``.
        fmt: Format of ``data``.

    Returns:
        A new float64 array with one sample per frame.

    Raises:
        FormatError: If ``fmt`` has an unsupported bit depth or channel count.
    """
    magnitude = _require_supported(fmt)
    remainder = len(data) % fmt.frame_size
    if remainder:
        logger.debug(
            "Dropping %d trailing bytes (frame size %d)", remainder, fmt.frame_size
        )
    view = memoryview(data)[: len(data) - remainder]
    samples = np.frombuffer(view, dtype=_numpy_dtype(fmt)).astype(np.float64)
    if not fmt.signed:
        samples -= magnitude
    samples /= magnitude
    return samples


def encode(samples: Sequence[float] | npt.ArrayLike, fmt: FormatDescriptor) -> bytes:
    """
    Encode normalized samples into raw PCM bytes.

    Samples are scaled by the integer range magnitude and truncated toward zero.
    Values beyond the representable range are clamped to the minimum/maximum
    integer instead of wrapping around. NaN encodes as silence.

    Args:
        samples: One-dimensional samples, nominally in [-1.0, 1.0].
        fmt: Target format.

    Returns:
        Raw PCM bytes in the byte order declared by ``fmt``.

    Raises:
        FormatError: If ``fmt`` is unsupported or ``samples`` is not one-dimensional.
    """
    magnitude = _require_supported(fmt)
    values = np.asarray(samples, dtype=np.float64)
    if values.ndim != 1:
        raise FormatError(f"Samples must be one-dimensional, got shape {values.shape}")

    scaled = np.trunc(np.nan_to_num(values, nan=0.0) * magnitude)
    np.clip(scaled, -magnitude, magnitude - 1, out=scaled)
    if not fmt.signed:
        scaled += magnitude
    return scaled.astype(_numpy_dtype(fmt)).tobytes()
