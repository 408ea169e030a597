import re
from typing import Iterator, NamedTuple

# The regex pattern to recognize a decorated symbol. Only a guess:
# a leading '?' followed by the characters MSVC uses in decorated names.
RE_DECORATED_SYMBOL = re.compile(r"\?[a-zA-Z0-9_@?$]+")


class MatchSpan(NamedTuple):
    """Half-open [start, end) offsets of a candidate inside one line."""
    start: int
    end: int

    def slice(self, line: str) -> str:
        return line[self.start:self.end]


def scan(line: str, pattern: re.Pattern = RE_DECORATED_SYMBOL) -> Iterator[MatchSpan]:
    """
    Lazily yield the spans of every candidate symbol in `line`, left to right.
    Matches are greedy and never overlap. The iterator is single use;
    call scan() again for the next line.
    """
    for match in pattern.finditer(line):
        yield MatchSpan(match.start(), match.end())


def candidates(line: str) -> list[str]:
    """Return the candidate substrings of `line` in document order."""
    return [span.slice(line) for span in scan(line)]
