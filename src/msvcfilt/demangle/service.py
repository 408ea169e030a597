"""
Process-wide access to the symbol decoder.

The decoder is set up lazily on the first get_instance() call and torn down
exactly once, at interpreter exit or on an explicit shutdown(). A decoder that
fails to initialize leaves the service in a degraded state where every
undecorate() call returns None, so the filter turns into a plain passthrough.
"""
import atexit
import threading
from typing import Optional

from ..exceptions import DecoderUnavailableError
from .backends import MAX_SYM_NAME, select_backend


class DemanglingService:
    _instance: Optional["DemanglingService"] = None
    _instance_lock = threading.Lock()

    def __init__(self, backend=None):
        self.backend = backend
        self.error = ""
        self._opened = False
        self._closed = False
        # Serializes access to the backend's output buffer
        self._lock = threading.Lock()

        if backend is None:
            self.error = "no symbol decoder available"
            return

        try:
            backend.open()
            self._opened = True
        except DecoderUnavailableError as e:
            self.error = str(e)

    @property
    def available(self) -> bool:
        return self._opened and not self._closed

    @property
    def backend_name(self) -> str:
        return getattr(self.backend, "name", "none") if self.backend is not None else "none"

    def undecorate(self, candidate: str) -> Optional[str]:
        """
        Return the complete undecorated form of `candidate`, or None if it
        doesn't decode (or the decoder is unavailable).

        The backend writes into one buffer that is overwritten by the next
        call; the string returned here is already a copy and stays valid.
        """
        if not self.available:
            return None
        if not candidate or len(candidate) > MAX_SYM_NAME:
            return None

        with self._lock:
            if not self.available:
                return None
            return self.backend.undecorate(candidate)

    def shutdown(self):
        """Release the decoder. Safe to call more than once."""
        with self._lock:
            if not self._opened or self._closed:
                return
            self._closed = True
            self.backend.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    @classmethod
    def get_instance(cls, config=None) -> "DemanglingService":
        """
        Return the shared service, creating it on first use.
        `config` only matters for that first call.
        """
        with cls._instance_lock:
            if cls._instance is None:
                instance = cls(select_backend(config))
                atexit.register(instance.shutdown)
                cls._instance = instance
            return cls._instance

    @classmethod
    def reset_instance(cls):
        """Shut down and forget the shared service."""
        with cls._instance_lock:
            instance = cls._instance
            cls._instance = None
        if instance is not None:
            instance.shutdown()
            atexit.unregister(instance.shutdown)
