"""
Symbol decoders the DemanglingService can sit on top of.

Each backend has the same small lifecycle: open() acquires whatever the
decoder needs (raising DecoderUnavailableError if it can't), undecorate()
turns one decorated name into its complete readable form or returns None,
and close() releases what open() acquired.
"""
import ctypes
import platform
import shutil
import subprocess
from typing import Optional

from ..exceptions import ConfigError, DecoderUnavailableError

# Symbol name length ceiling used by DbgHelp (MAX_SYM_NAME in DbgHelp.h)
MAX_SYM_NAME = 2000

# UnDecorateSymbolName flag: produce the complete undecoration
UNDNAME_COMPLETE = 0x0000

DEFAULT_UNDNAME = "llvm-undname"

DECODER_CHOICES = ("auto", "dbghelp", "undname")


class DbgHelpBackend:
    """Windows DbgHelp symbol handler, loaded through ctypes."""

    name = "dbghelp"

    def __init__(self):
        self._dbghelp = None
        self._process = None
        # Receives every undecorated name; overwritten on each call
        self._buffer = None

    def open(self):
        if platform.system() != "Windows":
            raise DecoderUnavailableError("DbgHelp is only available on Windows")

        from ctypes import wintypes

        try:
            dbghelp = ctypes.WinDLL("dbghelp", use_last_error=True)
            kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        except OSError as e:
            raise DecoderUnavailableError(f"Failed to load DbgHelp.dll: {e}") from e

        kernel32.GetCurrentProcess.argtypes = []
        kernel32.GetCurrentProcess.restype = wintypes.HANDLE

        dbghelp.SymInitialize.argtypes = [wintypes.HANDLE, wintypes.LPCSTR, wintypes.BOOL]
        dbghelp.SymInitialize.restype = wintypes.BOOL
        dbghelp.SymCleanup.argtypes = [wintypes.HANDLE]
        dbghelp.SymCleanup.restype = wintypes.BOOL
        dbghelp.UnDecorateSymbolName.argtypes = [
            ctypes.c_char_p, ctypes.c_char_p, wintypes.DWORD, wintypes.DWORD
        ]
        dbghelp.UnDecorateSymbolName.restype = wintypes.DWORD

        process = kernel32.GetCurrentProcess()
        if not dbghelp.SymInitialize(process, None, False):
            raise DecoderUnavailableError(
                f"SymInitialize() failed with error {ctypes.get_last_error()}"
            )

        self._dbghelp = dbghelp
        self._process = process
        self._buffer = ctypes.create_string_buffer(MAX_SYM_NAME + 1)

    def undecorate(self, symbol: str) -> Optional[str]:
        try:
            name = symbol.encode("ascii")
        except UnicodeEncodeError:
            return None

        res = self._dbghelp.UnDecorateSymbolName(name, self._buffer, MAX_SYM_NAME, UNDNAME_COMPLETE)
        if res == 0:
            return None
        # .value copies the bytes out of the shared buffer
        return self._buffer.value.decode("ascii", errors="replace")

    def close(self):
        if self._process is not None:
            self._dbghelp.SymCleanup(self._process)
            self._process = None


class UndnameBackend:
    """
    Runs an external MSVC undecorator (llvm-undname by default) once per symbol.
    Any non-zero exit status or an 'error:' line counts as a failed decode.
    """

    name = "undname"

    def __init__(self, executable: str = DEFAULT_UNDNAME):
        self.executable = executable or DEFAULT_UNDNAME
        self.path: Optional[str] = None

    def open(self):
        path = shutil.which(self.executable)
        if not path:
            raise DecoderUnavailableError(f"'{self.executable}' not found on PATH")
        self.path = path

    def undecorate(self, symbol: str) -> Optional[str]:
        try:
            result = subprocess.run(
                [self.path, symbol], capture_output=True, text=True, check=False
            )
        except OSError:
            return None

        if result.returncode != 0:
            return None

        # llvm-undname may echo the input before the result; the result is last
        lines = [l for l in result.stdout.splitlines() if l.strip()]
        if not lines or lines[-1].startswith("error:"):
            return None
        return lines[-1].strip()

    def close(self):
        self.path = None


def has_undname(executable: str = DEFAULT_UNDNAME) -> bool:
    """Check if the external undecorator is installed."""
    return shutil.which(executable) is not None


def select_backend(config=None):
    """
    Pick a decoder backend from a config mapping (anything with .get()).
    Returns None when 'auto' finds nothing usable on this machine.
    """
    config = config if config is not None else {}
    choice = config.get("decoder", "auto") or "auto"
    undname = config.get("undname") or DEFAULT_UNDNAME

    if choice == "dbghelp":
        return DbgHelpBackend()
    if choice == "undname":
        return UndnameBackend(undname)
    if choice != "auto":
        raise ConfigError(f"Unknown decoder '{choice}'. Use one of: {', '.join(DECODER_CHOICES)}")

    if platform.system() == "Windows":
        return DbgHelpBackend()
    if has_undname(undname):
        return UndnameBackend(undname)
    return None
