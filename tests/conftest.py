"""Shared fixtures for pcmkit tests."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class RecordedStream:
    """Output line double that records what was asked of it."""

    recorder: StreamRecorder
    kwargs: dict[str, Any]
    calls: list[str] = field(default_factory=list)
    written: bytes = b""

    def start(self) -> None:
        self.calls.append("start")

    def write(self, data: bytes) -> bool:
        self.calls.append("write")
        self.written += bytes(data)
        if self.recorder.write_error is not None:
            raise self.recorder.write_error
        if self.recorder.write_delay_s:
            time.sleep(self.recorder.write_delay_s)
        if self.recorder.release_write is not None:
            self.recorder.write_started.set()
            self.recorder.release_write.wait(timeout=5)
        return False

    def stop(self) -> None:
        self.calls.append("stop")

    def close(self) -> None:
        self.calls.append("close")
        self.recorder.on_close()


class StreamRecorder:
    """Stream factory that records open/close pairs across threads."""

    def __init__(self) -> None:
        self.streams: list[RecordedStream] = []
        self.events: list[str] = []
        self.max_open = 0
        self.open_error: Exception | None = None
        self.write_error: Exception | None = None
        self.write_delay_s = 0.0
        self.release_write: threading.Event | None = None
        self.write_started = threading.Event()
        self._open = 0
        self._lock = threading.Lock()

    def __call__(self, **kwargs: Any) -> RecordedStream:
        if self.open_error is not None:
            raise self.open_error
        with self._lock:
            self._open += 1
            self.max_open = max(self.max_open, self._open)
            self.events.append("open")
            stream = RecordedStream(recorder=self, kwargs=kwargs)
            self.streams.append(stream)
        return stream

    def on_close(self) -> None:
        with self._lock:
            self._open -= 1
            self.events.append("close")


@pytest.fixture
def recorder() -> StreamRecorder:
    """Return a fresh recording stream factory."""
    return StreamRecorder()
