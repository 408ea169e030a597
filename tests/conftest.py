import pytest
from msvcfilt.demangle import DemanglingService


class FakeDemangler:
    """Maps known decorated names to readable ones; everything else fails."""

    def __init__(self, table=None):
        self.table = dict(table or {})
        self.calls = []

    def undecorate(self, candidate):
        self.calls.append(candidate)
        return self.table.get(candidate)


class FakeBackend:
    """Decoder backend double that records its lifecycle."""

    name = "fake"

    def __init__(self, table=None, fail_open=False):
        self.table = dict(table or {})
        self.fail_open = fail_open
        self.opened = 0
        self.closed = 0

    def open(self):
        from msvcfilt.exceptions import DecoderUnavailableError
        if self.fail_open:
            raise DecoderUnavailableError("fake decoder refused to start")
        self.opened += 1

    def undecorate(self, symbol):
        return self.table.get(symbol)

    def close(self):
        self.closed += 1


SYMBOLS = {
    "?foo@@YAXXZ": "void foo(void)",
    "?a@@X": "a",
    "?b@@X": "b",
}


@pytest.fixture
def demangler():
    return FakeDemangler(SYMBOLS)


@pytest.fixture(autouse=True)
def fresh_service():
    DemanglingService.reset_instance()
    yield
    DemanglingService.reset_instance()
