"""Load PCM audio from container files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from pcmkit import codec, container
from pcmkit.codec import SampleBuffer
from pcmkit.exceptions import NotFound
from pcmkit.models import FormatDescriptor

logger = logging.getLogger(__name__)

AudioPath = str | os.PathLike[str]


def resolve_path(location: AudioPath) -> Path:
    """
    Return the filesystem path for a filename or ``file:`` URL.

    Raises:
        NotFound: If ``location`` is a URL with a scheme other than ``file``.
    """
    if isinstance(location, str) and "://" in location:
        parsed = urlparse(location)
        if parsed.scheme != "file":
            raise NotFound(f"Only file: URLs can be loaded, got {location}")
        return Path(url2pathname(parsed.path))
    return Path(location)


def load(location: AudioPath) -> tuple[bytes, FormatDescriptor]:
    """
    Read the raw sample bytes and declared format of an audio file.

    The container is chosen by file extension (``.wav`` or ``.au``) before the
    file is opened. The returned format is the one stored in the file header;
    pass it to :func:`pcmkit.codec.decode` to obtain samples.

    Args:
        location: Path or ``file:`` URL of the audio file.

    Returns:
        Tuple of raw PCM bytes and their format.

    Raises:
        UnsupportedFormat: If the extension is not a supported container.
        NotFound: If the file cannot be read.
        FormatError: If the header is malformed or not mono 8/16-bit PCM.
    """
    path = resolve_path(location)
    kind = container.container_for_path(path)
    try:
        blob = path.read_bytes()
    except OSError as exc:
        raise NotFound(f"audio {path} not found") from exc

    payload = container.unpack(kind, blob)
    logger.debug(
        "Loaded %s: %d bytes of %d-bit PCM at %d Hz",
        path,
        len(payload.data),
        payload.format.bit_depth,
        payload.format.sample_rate,
    )
    return payload.data, payload.format


def read_samples(location: AudioPath) -> tuple[SampleBuffer, FormatDescriptor]:
    """Load an audio file and decode it into normalized samples."""
    data, fmt = load(location)
    return codec.decode(data, fmt), fmt
