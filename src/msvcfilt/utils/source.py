"""
Line sources feeding the filter.

The engine only ever asks has_next() / next(); it never knows whether lines
come from a stream, a list of command-line operands, or a followed log file.
"""
import threading
from collections import deque
from pathlib import Path
from typing import Iterable, Optional, TextIO

from .watcher import FileWatcher


def strip_terminator(raw: str) -> str:
    """Drop one trailing line terminator (\\n or \\r\\n)."""
    if raw.endswith("\n"):
        raw = raw[:-1]
        if raw.endswith("\r"):
            raw = raw[:-1]
    return raw


class LineSource:
    def has_next(self) -> bool:
        raise NotImplementedError

    def next(self) -> str:
        raise NotImplementedError

    def close(self):
        pass

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class StreamLineSource(LineSource):
    """Reads a text stream (stdin by default) one line at a time."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._pending: Optional[str] = None
        self._eof = False

    def has_next(self) -> bool:
        if self._pending is None and not self._eof:
            raw = self.stream.readline()
            if raw == "":
                self._eof = True
            else:
                self._pending = strip_terminator(raw)
        return self._pending is not None

    def next(self) -> str:
        if not self.has_next():
            raise StopIteration
        line, self._pending = self._pending, None
        return line


class ListLineSource(LineSource):
    """Hands out a pre-supplied list of strings front to back."""

    def __init__(self, items: Iterable[str]):
        self.items = deque(items)

    def has_next(self) -> bool:
        return bool(self.items)

    def next(self) -> str:
        if not self.items:
            raise StopIteration
        return self.items.popleft()


class FollowLineSource(LineSource):
    """
    Reads an existing file, then keeps returning lines as they are appended,
    like `tail -f`. A watchdog observer wakes the reader when the file changes;
    `poll_interval` bounds how long a read waits without an event.
    Runs until stop() is called.
    """

    def __init__(self, path: str, poll_interval: float = 1.0, watcher: Optional[FileWatcher] = None):
        self.path = Path(path).resolve()
        if not self.path.exists():
            raise FileNotFoundError(f"Cannot follow non-existent file: {path}")

        self.poll_interval = poll_interval
        self._file = open(self.path, "rb")
        self._partial = b""
        self._changed = threading.Event()
        self._stopped = False

        self.watcher = watcher if watcher is not None else FileWatcher()
        try:
            self.watcher.start_watching(str(self.path), self._on_file_changed)
        except Exception:
            self._file.close()
            raise

    def _on_file_changed(self, path: str):
        self._changed.set()

    def _reopen_if_truncated(self):
        try:
            size = self.path.stat().st_size
        except OSError:
            return
        if size < self._file.tell():
            self._file.close()
            self._file = open(self.path, "rb")
            self._partial = b""

    def has_next(self) -> bool:
        return not self._stopped

    def next(self) -> str:
        while not self._stopped:
            chunk = self._file.readline()
            if chunk:
                self._partial += chunk
                if chunk.endswith(b"\n"):
                    line, self._partial = self._partial, b""
                    return strip_terminator(line.decode("utf-8", errors="surrogateescape"))
                continue

            self._changed.wait(self.poll_interval)
            self._changed.clear()
            self._reopen_if_truncated()

        raise StopIteration

    def stop(self):
        self._stopped = True
        self._changed.set()
        self.watcher.stop_watching()

    def close(self):
        if not self._stopped:
            self.stop()
        self._file.close()
