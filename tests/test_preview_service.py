"""
Tests for mention preview expansion and resolution
"""

from unittest.mock import AsyncMock, Mock

import pytest

from services.mention_service.preview_service import MentionPreviewService
from services.workspace_service.models import FetchResult, Provenance


class TestExpansionTracking:
    """Test per-message expansion state"""

    def setup_method(self):
        self.previews = MentionPreviewService(facade=Mock())

    def test_toggle_flips_membership(self):
        assert self.previews.toggle("m1", "README.md") is True
        assert self.previews.is_expanded("m1", "README.md")

        assert self.previews.toggle("m1", "README.md") is False
        assert not self.previews.is_expanded("m1", "README.md")
        assert self.previews.expanded_paths("m1") == frozenset()

    def test_expansion_is_per_message(self):
        self.previews.toggle("m1", "a.py")

        assert self.previews.is_expanded("m1", "a.py")
        assert not self.previews.is_expanded("m2", "a.py")

    def test_expansion_is_keyed_by_path(self):
        content = "@a.py then @b.py then @a.py again"
        self.previews.toggle("m1", "a.py")

        expanded = self.previews.expanded_mentions("m1", content)

        assert [mention.path for mention in expanded] == ["a.py", "a.py"]
        assert expanded[0].start != expanded[1].start


class TestResolvePreview:

    @pytest.mark.asyncio
    async def test_delegates_to_facade(self):
        facade = Mock()
        facade.fetch_file_content = AsyncMock(return_value=FetchResult.live("content"))
        previews = MentionPreviewService(facade=facade)

        result = await previews.resolve_preview("README.md")

        assert result.payload == "content"
        facade.fetch_file_content.assert_awaited_once_with("README.md")

    @pytest.mark.asyncio
    async def test_does_not_cache(self):
        facade = Mock()
        facade.fetch_file_content = AsyncMock(side_effect=[
            FetchResult.fallback("old", "down"),
            FetchResult.live("new"),
        ])
        previews = MentionPreviewService(facade=facade)

        first = await previews.resolve_preview("a.md")
        second = await previews.resolve_preview("a.md")

        assert first.provenance is Provenance.FALLBACK
        assert second.payload == "new"
        assert facade.fetch_file_content.await_count == 2
