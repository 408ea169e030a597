"""
Runs the real llvm-undname decoder when it is installed.
Exact spellings vary between LLVM releases, so only stable fragments are checked.
"""
import shutil
import pytest

from msvcfilt.demangle import DemanglingService, UndnameBackend
from msvcfilt.parsing import process_line

pytestmark = pytest.mark.skipif(shutil.which("llvm-undname") is None, reason="llvm-undname not installed")


@pytest.fixture
def service():
    with DemanglingService(UndnameBackend()) as svc:
        yield svc


def test_undecorates_function(service):
    assert "foo(void)" in service.undecorate("?foo@@YAXXZ")


def test_rejects_garbage(service):
    assert service.undecorate("?nothing_here") is None


def test_replace_mode(service):
    result = process_line("Found symbol ?foo@@YAXXZ in module", service)
    assert result.startswith("Found symbol ")
    assert result.endswith(" in module")
    assert "?foo@@YAXXZ" not in result
    assert "foo(void)" in result


def test_keep_mode(service):
    result = process_line("Found symbol ?foo@@YAXXZ in module", service, keep_original=True)
    assert result.startswith('Found symbol ?foo@@YAXXZ "')
    assert result.endswith('" in module')
