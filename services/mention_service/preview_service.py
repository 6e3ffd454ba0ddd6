"""
Mention preview service - resolves mentioned files to preview content and tracks inline expansion.
"""

from typing import Dict, FrozenSet, List, Optional, Set

from infrastructure.monitoring.logging_service import get_logger
from services.mention_service.mention_parser import Mention, extract_mentions
from services.workspace_service.backend_facade import BackendFacade, get_backend_facade
from services.workspace_service.models import FetchResult


class MentionPreviewService:
    """
    Per-message inline preview state plus on-demand preview resolution.

    Expansion is keyed by path: expanding one occurrence of a path expands every
    occurrence of that path in the same message.
    """

    def __init__(self, facade: Optional[BackendFacade] = None):
        self.logger = get_logger(__name__)
        self.facade = facade or get_backend_facade()
        self._expanded: Dict[str, Set[str]] = {}

    def toggle(self, message_id: str, path: str) -> bool:
        """
        Flip inline expansion of a path within a message

        Returns:
            True if the path is now expanded
        """
        expanded = self._expanded.setdefault(message_id, set())
        if path in expanded:
            expanded.remove(path)
            if not expanded:
                del self._expanded[message_id]
            return False

        expanded.add(path)
        return True

    def is_expanded(self, message_id: str, path: str) -> bool:
        return path in self._expanded.get(message_id, ())

    def expanded_paths(self, message_id: str) -> FrozenSet[str]:
        return frozenset(self._expanded.get(message_id, ()))

    def expanded_mentions(self, message_id: str, content: str) -> List[Mention]:
        """Mentions in content whose path is expanded for this message"""
        expanded = self._expanded.get(message_id, set())
        return [mention for mention in extract_mentions(content) if mention.path in expanded]

    async def resolve_preview(self, path: str) -> FetchResult[str]:
        """Fetch preview content for a mentioned path (never cached here)"""
        result = await self.facade.fetch_file_content(path)
        if result.is_fallback:
            self.logger.debug(f"Preview for {path} served from fallback")
        return result
