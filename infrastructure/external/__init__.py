"""
External adapters - the workspace backend boundary.
"""

from .errors import (
    WorkspaceBackendError,
    ExpectedAbsence,
    BackendUnavailable,
    BackendError,
    is_absence_message
)
from .workspace_backend import (
    SearchHit,
    WorkspaceBackend,
    HttpWorkspaceBackend,
    OfflineWorkspaceBackend,
    create_workspace_backend
)

__all__ = [
    'WorkspaceBackendError',
    'ExpectedAbsence',
    'BackendUnavailable',
    'BackendError',
    'is_absence_message',
    'SearchHit',
    'WorkspaceBackend',
    'HttpWorkspaceBackend',
    'OfflineWorkspaceBackend',
    'create_workspace_backend'
]
