"""
Detection of free-text input that should be run as a semantic file search.
"""

# Prefix triggers are stripped from the query, keyword triggers are kept
SEARCH_PREFIXES = ("search:", "find:", "look for:", "show me:", "files with:")
SEARCH_KEYWORDS = ("function", "component", "import", "export", "class", "interface")


def is_search_query(text: str) -> bool:
    lowered = text.lower()
    return any(trigger in lowered for trigger in SEARCH_PREFIXES + SEARCH_KEYWORDS)


def normalize_search_query(text: str) -> str:
    """Strip a leading prefix trigger such as "find:" and surrounding whitespace"""
    stripped = text.strip()
    lowered = stripped.lower()
    for prefix in SEARCH_PREFIXES:
        if lowered.startswith(prefix):
            return stripped[len(prefix):].strip()
    return stripped
