"""Blocking audio playback through sounddevice."""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable, Sequence
from typing import Any, Final, Protocol

import numpy.typing as npt

from pcmkit import codec
from pcmkit.exceptions import DeviceBusy, DeviceError, FormatError, PCMKitError
from pcmkit.models import CANONICAL_SAMPLE_RATE, FormatDescriptor, canonical_format

logger = logging.getLogger(__name__)

# One output line per process; every PlaybackSink shares it.
_LINE_LOCK: Final = threading.Lock()

_DEVICE_DTYPES: Final[dict[tuple[int, bool], str]] = {
    (8, True): "int8",
    (8, False): "uint8",
    (16, True): "int16",
}


class OutputLine(Protocol):
    """The subset of ``sounddevice.RawOutputStream`` used for playback."""

    def start(self) -> None: ...

    def write(self, data: bytes) -> Any: ...

    def stop(self) -> None: ...

    def close(self) -> None: ...


StreamFactory = Callable[..., OutputLine]
"""Callable accepting ``sounddevice.RawOutputStream`` keyword arguments."""


def open_sounddevice_stream(**kwargs: Any) -> OutputLine:
    """
    Open a ``sounddevice.RawOutputStream``.

    sounddevice loads the PortAudio shared library when it is imported, so the
    import happens here rather than at module import time.

    Raises:
        DeviceError: If the PortAudio library cannot be loaded.
    """
    try:
        import sounddevice  # noqa: PLC0415
    except OSError as exc:
        raise DeviceError(f"PortAudio library is unavailable: {exc}") from exc

    return sounddevice.RawOutputStream(**kwargs)


class PlaybackSink:
    """
    Plays PCM audio on an output device and blocks until it has been heard.

    Each call to :meth:`play_blocking` opens an output line sized to the audio
    format, writes the whole buffer, waits for the device to drain and closes
    the line again. The call returns only once playback is finished, so its
    duration approximates the duration of the audio. Callers may rely on this
    to pace their own loops.

    Only one line may be open per process. With ``wait_for_device`` set,
    concurrent calls queue up behind the active one; otherwise they fail fast
    with :class:`DeviceBusy`.
    """

    def __init__(
        self,
        *,
        device: int | str | None = None,
        blocksize: int = 0,
        wait_for_device: bool = True,
        stream_factory: StreamFactory | None = None,
    ) -> None:
        """
        Initialize the playback sink.

        Args:
            device: sounddevice output device index or name, None for the default.
            blocksize: Frames per PortAudio buffer, 0 lets the backend choose.
            wait_for_device: Wait for a busy line instead of raising DeviceBusy.
            stream_factory: Replacement for ``sounddevice.RawOutputStream``.
        """
        self._device = device
        self._blocksize = blocksize
        self._wait_for_device = wait_for_device
        self._stream_factory = stream_factory or open_sounddevice_stream

    def play_blocking(
        self,
        audio: Sequence[float] | npt.ArrayLike | bytes,
        fmt: FormatDescriptor | None = None,
        *,
        sample_rate: int = CANONICAL_SAMPLE_RATE,
    ) -> None:
        """
        Play audio and return once it has finished playing.

        Args:
            audio: Normalized samples, or raw PCM bytes described by ``fmt``.
            fmt: Format of raw bytes, or the format samples are encoded to.
                Samples default to the canonical 16-bit format at ``sample_rate``.
            sample_rate: Sample rate of ``audio`` when it holds samples and
                ``fmt`` is omitted.

        Raises:
            FormatError: If raw bytes are given without a format.
            DeviceBusy: If another playback holds the line and
                ``wait_for_device`` is False.
            DeviceError: If the output line cannot be opened or written.
        """
        if isinstance(audio, (bytes, bytearray, memoryview)):
            if fmt is None:
                raise FormatError("A format is required to play raw PCM bytes")
            data = bytes(audio)
        else:
            fmt = fmt or canonical_format(sample_rate)
            data = codec.encode(audio, fmt)
        self._play(data, fmt)

    def _device_payload(self, data: bytes, fmt: FormatDescriptor) -> tuple[str, bytes]:
        """Return the sounddevice dtype and bytes the device can take as-is."""
        dtype = _DEVICE_DTYPES.get((fmt.bit_depth, fmt.signed))
        native = fmt.bit_depth == 8 or fmt.little_endian == (sys.byteorder == "little")
        if dtype is not None and native:
            return dtype, data
        # PortAudio only takes native byte order; re-encode to signed 16-bit
        target = FormatDescriptor(
            sample_rate=fmt.sample_rate,
            bit_depth=16,
            signed=True,
            little_endian=sys.byteorder == "little",
        )
        logger.debug("Converting %s to %s for the output device", fmt, target)
        return "int16", codec.encode(codec.decode(data, fmt), target)

    def _acquire_line(self) -> None:
        if self._wait_for_device:
            _LINE_LOCK.acquire()
            return
        if not _LINE_LOCK.acquire(blocking=False):
            raise DeviceBusy("Another playback is holding the audio output line")

    def _open_stream(self, fmt: FormatDescriptor, dtype: str) -> OutputLine:
        try:
            return self._stream_factory(
                samplerate=fmt.sample_rate,
                channels=fmt.channels,
                dtype=dtype,
                device=self._device,
                blocksize=self._blocksize,
            )
        except PCMKitError:
            raise
        except Exception as exc:
            raise DeviceError(f"Unable to open audio output line: {exc}") from exc

    def _play(self, data: bytes, fmt: FormatDescriptor) -> None:
        frame_count = len(data) // fmt.frame_size
        if frame_count == 0:
            logger.debug("Nothing to play")
            return
        dtype, payload = self._device_payload(data[: frame_count * fmt.frame_size], fmt)

        self._acquire_line()
        try:
            stream = self._open_stream(fmt, dtype)
            logger.debug(
                "Opened output line: %d Hz, %s, %d frames", fmt.sample_rate, dtype, frame_count
            )
            try:
                stream.start()
                stream.write(payload)
                # stop() returns once all pending buffers have been played
                stream.stop()
            except PCMKitError:
                raise
            except Exception as exc:
                raise DeviceError(f"Audio playback failed: {exc}") from exc
            finally:
                self._close_stream(stream)
        finally:
            _LINE_LOCK.release()
        logger.debug("Played %.2f s of audio", frame_count / fmt.sample_rate)

    def _close_stream(self, stream: OutputLine) -> None:
        """Close the audio output line."""
        try:
            stream.close()
        except Exception:  # pragma: no cover - backend failure
            logger.exception("Failed to close audio output line")


_DEFAULT_SINK = PlaybackSink()


def play_blocking(
    audio: Sequence[float] | npt.ArrayLike | bytes,
    fmt: FormatDescriptor | None = None,
    *,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
) -> None:
    """Play audio on the default output device; see :meth:`PlaybackSink.play_blocking`."""
    _DEFAULT_SINK.play_blocking(audio, fmt, sample_rate=sample_rate)
