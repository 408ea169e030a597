import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, TextIO
from .parsing import process_line
from .utils.source import LineSource


@dataclass
class FilterStats:
    lines: int = 0
    candidates: int = 0
    undecorated: int = 0


class _CountingDemangler:
    """Wraps the demangler so the engine can count hits and misses."""
    def __init__(self, demangler, stats: FilterStats):
        self.demangler = demangler
        self.stats = stats

    @property
    def available(self) -> bool:
        return getattr(self.demangler, "available", True)

    def undecorate(self, candidate: str) -> Optional[str]:
        self.stats.candidates += 1
        result = self.demangler.undecorate(candidate)
        if result is not None:
            self.stats.undecorated += 1
        return result


class FilterEngine:
    def __init__(
        self,
        source: LineSource,
        demangler,
        keep_original: bool = False,
        sink: Optional[TextIO] = None,
        log_file: str = "",
    ):
        self.source = source
        self.demangler = demangler
        self.keep_original = keep_original
        self.sink = sink if sink is not None else sys.stdout
        self.log_file = log_file
        self.stats = FilterStats()
        self.on_line: Optional[Callable[[str, str], None]] = None

    def _log(self, msg: str):
        if not self.log_file:
            return
        with open(self.log_file, "a") as f:
            f.write(f"[{time.time()}] {msg}\n")

    def process(self, line: str) -> str:
        """Transform one line; no I/O."""
        counted = _CountingDemangler(self.demangler, self.stats)
        return process_line(line, counted, self.keep_original)

    def run(self) -> int:
        """
        Filter every line of the source into the sink, in order.
        Returns the number of lines written.
        """
        self._log(f"Filtering with keep_original={self.keep_original}")
        while self.source.has_next():
            try:
                line = self.source.next()
            except StopIteration:
                break
            output = self.process(line)

            self.sink.write(output + "\n")
            self.sink.flush()
            self.stats.lines += 1

            if self.on_line:
                self.on_line(line, output)

        self._log(
            f"Done: {self.stats.lines} lines, {self.stats.candidates} candidates, "
            f"{self.stats.undecorated} undecorated"
        )
        return self.stats.lines
