"""
Mention service - @file mention parsing, inline expansion tracking and preview resolution.
"""

from .mention_parser import (
    Mention,
    ContentSegment,
    MENTION_PATTERN,
    extract_mentions,
    split_content,
    file_extension,
    mentions_for_dropped_files
)
from .preview_service import MentionPreviewService

__all__ = [
    'Mention',
    'ContentSegment',
    'MENTION_PATTERN',
    'extract_mentions',
    'split_content',
    'file_extension',
    'mentions_for_dropped_files',
    'MentionPreviewService'
]
