"""
Tests for search mode detection
"""

import pytest
from services.workspace_service import is_search_query, normalize_search_query


class TestSearchMode:

    @pytest.mark.parametrize("text", [
        "search: login flow",
        "Find: README",
        "look for: config loader",
        "show me: tests",
        "files with: TODO",
        "where is the auth component",
        "which files import httpx",
        "the Thread class",
    ])
    def test_triggers(self, text):
        assert is_search_query(text)

    @pytest.mark.parametrize("text", ["hello there", "Check @README.md please", ""])
    def test_plain_messages(self, text):
        assert not is_search_query(text)

    def test_normalize_strips_prefix(self):
        assert normalize_search_query("  Find:   README  ") == "README"
        assert normalize_search_query("look for: config loader") == "config loader"

    def test_normalize_keeps_keyword_queries(self):
        assert normalize_search_query(" which files import httpx ") == "which files import httpx"
