"""
Error taxonomy for the workspace backend boundary.
"""

from typing import Optional


class WorkspaceBackendError(Exception):
    """Base class for every failure reported by the workspace backend"""
    pass


class ExpectedAbsence(WorkspaceBackendError):
    """The lookup legitimately found nothing (e.g. file not found)"""
    pass


class BackendUnavailable(WorkspaceBackendError):
    """The backend could not be reached (connection refused, timeout, open circuit)"""
    pass


class BackendError(WorkspaceBackendError):
    """The backend was reached but answered with an application error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# Error text a file-serving backend uses for a missing file, whatever its status code
ABSENCE_MARKERS = ("failed to read file", "no such file")


def is_absence_message(text: str) -> bool:
    """True when an error body says the requested file does not exist"""
    lowered = text.lower()
    return any(marker in lowered for marker in ABSENCE_MARKERS)
