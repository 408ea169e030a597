"""Tests for the DemanglingService lifecycle and its degrade-on-failure policy."""
import pytest
from unittest.mock import patch, MagicMock
from conftest import FakeBackend, SYMBOLS
from msvcfilt.demangle import DemanglingService, MAX_SYM_NAME


class TestUndecorate:

    def test_success(self):
        svc = DemanglingService(FakeBackend(SYMBOLS))
        assert svc.available is True
        assert svc.undecorate("?foo@@YAXXZ") == "void foo(void)"

    def test_unknown_symbol_is_none(self):
        svc = DemanglingService(FakeBackend(SYMBOLS))
        assert svc.undecorate("?nope") is None

    def test_empty_candidate_is_none(self):
        backend = MagicMock()
        svc = DemanglingService(backend)
        assert svc.undecorate("") is None
        backend.undecorate.assert_not_called()

    def test_over_length_candidate_is_none(self):
        backend = MagicMock()
        svc = DemanglingService(backend)
        assert svc.undecorate("?" + "a" * MAX_SYM_NAME) is None
        backend.undecorate.assert_not_called()

    def test_max_length_candidate_reaches_backend(self):
        backend = MagicMock()
        backend.undecorate.return_value = "ok"
        svc = DemanglingService(backend)
        assert svc.undecorate("?" + "a" * (MAX_SYM_NAME - 1)) == "ok"


class TestDegradedService:
    """Initialization failures leave a service that never decodes."""

    def test_no_backend(self):
        svc = DemanglingService(None)
        assert svc.available is False
        assert svc.backend_name == "none"
        assert svc.undecorate("?foo@@YAXXZ") is None
        assert "no symbol decoder" in svc.error

    def test_backend_open_fails(self):
        backend = FakeBackend(SYMBOLS, fail_open=True)
        svc = DemanglingService(backend)
        assert svc.available is False
        assert "refused" in svc.error
        assert svc.undecorate("?foo@@YAXXZ") is None

    def test_failed_backend_is_never_closed(self):
        backend = FakeBackend(fail_open=True)
        svc = DemanglingService(backend)
        svc.shutdown()
        assert backend.closed == 0


class TestShutdown:

    def test_closes_once(self):
        backend = FakeBackend(SYMBOLS)
        svc = DemanglingService(backend)
        svc.shutdown()
        svc.shutdown()
        assert backend.opened == 1
        assert backend.closed == 1

    def test_no_decoding_after_shutdown(self):
        svc = DemanglingService(FakeBackend(SYMBOLS))
        svc.shutdown()
        assert svc.available is False
        assert svc.undecorate("?foo@@YAXXZ") is None

    def test_context_manager(self):
        backend = FakeBackend(SYMBOLS)
        with DemanglingService(backend) as svc:
            assert svc.undecorate("?a@@X") == "a"
        assert backend.closed == 1

    def test_context_manager_closes_on_error(self):
        backend = FakeBackend(SYMBOLS)
        with pytest.raises(RuntimeError):
            with DemanglingService(backend):
                raise RuntimeError("boom")
        assert backend.closed == 1


class TestSingleton:

    def test_same_instance(self):
        with patch("msvcfilt.demangle.service.select_backend", return_value=FakeBackend(SYMBOLS)):
            first = DemanglingService.get_instance()
            second = DemanglingService.get_instance()
        assert first is second

    def test_backend_selected_once(self):
        with patch("msvcfilt.demangle.service.select_backend", return_value=FakeBackend()) as select:
            DemanglingService.get_instance({"decoder": "undname"})
            DemanglingService.get_instance({"decoder": "dbghelp"})
        select.assert_called_once_with({"decoder": "undname"})

    def test_registers_atexit_shutdown(self):
        with patch("msvcfilt.demangle.service.select_backend", return_value=FakeBackend()):
            with patch("atexit.register") as register:
                svc = DemanglingService.get_instance()
        register.assert_called_once_with(svc.shutdown)

    def test_reset_shuts_down(self):
        backend = FakeBackend(SYMBOLS)
        with patch("msvcfilt.demangle.service.select_backend", return_value=backend):
            first = DemanglingService.get_instance()
            DemanglingService.reset_instance()
        assert backend.closed == 1
        with patch("msvcfilt.demangle.service.select_backend", return_value=FakeBackend()):
            assert DemanglingService.get_instance() is not first

    def test_degraded_singleton_still_returned(self):
        with patch("msvcfilt.demangle.service.select_backend", return_value=None):
            svc = DemanglingService.get_instance()
        assert svc is not None
        assert svc.undecorate("?foo@@YAXXZ") is None
