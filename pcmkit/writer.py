"""Save samples to audio container files."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Sequence
from pathlib import Path

import numpy.typing as npt

from pcmkit import codec, container
from pcmkit.exceptions import NotFound
from pcmkit.models import CANONICAL_SAMPLE_RATE

logger = logging.getLogger(__name__)


def _target_mode(target: Path) -> int:
    """Return the mode ``target`` keeps, or the umask default for a new file."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _write_atomic(target: Path, blob: bytes) -> None:
    """Write ``blob`` to a sibling temporary file, then rename it over ``target``."""
    mode = _target_mode(target)
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(blob)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        # mkstemp creates the file 0600
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def save(
    samples: Sequence[float] | npt.ArrayLike,
    path: str | os.PathLike[str],
    *,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
) -> None:
    """
    Save samples as a 16-bit signed mono ``.wav`` or ``.au`` file.

    Samples outside [-1.0, 1.0] are clipped. The file only appears at ``path``
    once it has been written completely; an existing file is replaced.

    Args:
        samples: One-dimensional samples, nominally in [-1.0, 1.0].
        path: Destination; the extension selects the container.
        sample_rate: Sample rate recorded in the header.

    Raises:
        UnsupportedFormat: If the extension is not ``.wav`` or ``.au``.
        NotFound: If the destination directory does not exist.
    """
    target = Path(path)
    kind = container.container_for_path(target)
    fmt = container.storage_format(kind, sample_rate)
    data = codec.encode(samples, fmt)
    blob = container.pack(kind, data, fmt)

    try:
        _write_atomic(target, blob)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotFound(f"Cannot write {target}: {exc}") from exc
    logger.info(
        "Saved %s (%.2f s, %d bytes)", target, fmt.duration_s(len(data)), len(blob)
    )
