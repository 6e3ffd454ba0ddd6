"""
Workspace service - resilient file content, search and health access with deterministic fallbacks.
"""

from .models import Provenance, FetchResult, BackendStatus, SearchHit
from .fallback_content import (
    WorkspaceFallbackSystem,
    get_fallback_system
)
from .backend_facade import BackendFacade, get_backend_facade
from .status_monitor import BackendStatusMonitor
from .search_mode import is_search_query, normalize_search_query

__all__ = [
    'Provenance',
    'FetchResult',
    'BackendStatus',
    'SearchHit',
    'WorkspaceFallbackSystem',
    'get_fallback_system',
    'BackendFacade',
    'get_backend_facade',
    'BackendStatusMonitor',
    'is_search_query',
    'normalize_search_query'
]
