from .parsing import scan, transform, process_line
from .demangle import DemanglingService

__version__ = "0.1.0"


def undecorate_line(line: str, keep_original: bool = False) -> str:
    """
    Pipeline: Line -> Candidate Spans -> Undecorated -> Rebuilt Line
    Uses the shared DemanglingService.
    """
    return process_line(line, DemanglingService.get_instance(), keep_original)
