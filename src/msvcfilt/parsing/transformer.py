from typing import Iterable, Optional, Protocol
from .tokenizer import MatchSpan, scan


class Undecorator(Protocol):
    def undecorate(self, candidate: str) -> Optional[str]:
        ...


def format_kept(decorated: str, undecorated: str) -> str:
    """Keep mode output: the original name followed by the readable one in quotes."""
    return f'{decorated} "{undecorated}"'


def transform(
    line: str,
    matches: Iterable[MatchSpan],
    demangler: Undecorator,
    keep_original: bool = False,
) -> str:
    """
    Rebuild one line, swapping every matched span for its undecorated form.

    Text outside the spans is copied verbatim and in order. A span the
    demangler rejects contributes nothing to the output in either mode.
    The returned string carries no line terminator.
    """
    parts = []
    cursor = 0

    for span in matches:
        parts.append(line[cursor:span.start])
        cursor = span.end

        decorated = line[span.start:span.end]
        undecorated = demangler.undecorate(decorated)
        if undecorated is None:
            continue

        if keep_original:
            parts.append(format_kept(decorated, undecorated))
        else:
            parts.append(undecorated)

    if cursor < len(line):
        parts.append(line[cursor:])

    return "".join(parts)


def process_line(line: str, demangler: Undecorator, keep_original: bool = False) -> str:
    """
    Scan and transform a single line in one call.
    A demangler reporting itself unavailable leaves the line untouched.
    """
    if not getattr(demangler, "available", True):
        return line
    return transform(line, scan(line), demangler, keep_original)
