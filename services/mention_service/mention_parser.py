"""
Parsing of @file mentions in message text.
Mentions are derived from content on every render and never stored.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from services.workspace_service.fallback_content import extension_of, file_name_of

# Matches @README.md, @/docs/plan.txt, @src/components/App.tsx, ...
MENTION_PATTERN = re.compile(r"@([A-Za-z0-9/_.\-]+)")


@dataclass(frozen=True)
class Mention:
    """A file reference found in text"""
    text: str  # Full match including the @ sigil
    path: str
    start: int
    end: int


@dataclass(frozen=True)
class ContentSegment:
    """A run of plain text or a single mention, in source order"""
    text: str
    mention: Optional[Mention] = None

    @property
    def is_mention(self) -> bool:
        return self.mention is not None


def extract_mentions(text: str) -> List[Mention]:
    """
    Find every @file mention in text

    Args:
        text: Message content

    Returns:
        Non-overlapping mentions ordered by start offset; repeated paths yield repeated mentions
    """
    return [
        Mention(text=match.group(0), path=match.group(1), start=match.start(), end=match.end())
        for match in MENTION_PATTERN.finditer(text)
    ]


def split_content(text: str) -> List[ContentSegment]:
    """Split text into plain and mention segments whose concatenation is the original text"""
    segments: List[ContentSegment] = []
    last_index = 0

    for mention in extract_mentions(text):
        if mention.start > last_index:
            segments.append(ContentSegment(text=text[last_index:mention.start]))
        segments.append(ContentSegment(text=mention.text, mention=mention))
        last_index = mention.end

    if last_index < len(text):
        segments.append(ContentSegment(text=text[last_index:]))

    return segments


def file_extension(path: str) -> str:
    """Extension badge for a mentioned file"""
    return extension_of(file_name_of(path)) or "file"


def mentions_for_dropped_files(draft: str, file_names: Iterable[str]) -> str:
    """
    Append @mentions for dropped files to an input draft

    Args:
        draft: Current input text
        file_names: Names of the dropped files

    Returns:
        The draft followed by one @mention per file and a trailing space
    """
    mentions = " ".join(f"@{name}" for name in file_names)
    if not mentions:
        return draft

    separator = " " if draft and not draft.endswith(" ") else ""
    return f"{draft}{separator}{mentions} "
