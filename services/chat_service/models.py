"""
Chat service data models for threads and messages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

from services.render_service.models import ModelId, resolve_model


class Author(Enum):
    """Who wrote a message"""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """Individual message in a thread"""
    message_id: str
    content: str
    author: Author
    created_at: datetime = field(default_factory=datetime.now)
    # emoji -> ids of users who reacted with it; never holds an empty set
    reactions: Dict[str, Set[str]] = field(default_factory=dict)

    @property
    def is_user(self) -> bool:
        return self.author is Author.USER


@dataclass
class Thread:
    """Conversation thread containing messages and metadata"""
    thread_id: str
    title: str
    model: str
    last_message: str = ""
    updated_at: datetime = field(default_factory=datetime.now)
    messages: List[Message] = field(default_factory=list)

    @property
    def resolved_model(self) -> ModelId:
        return resolve_model(self.model)

    @property
    def message_count_label(self) -> str:
        count = len(self.messages)
        if count == 0:
            return "Start a conversation"
        elif count == 1:
            return "1 message"
        return f"{count} messages"


@dataclass
class ThreadSummary:
    """Summary of a thread for sidebar listing"""
    thread_id: str
    title: str
    model: str
    updated_at: datetime
    message_count_label: str
    last_message: Optional[str] = None
    is_active: bool = False

    @property
    def preview_text(self) -> str:
        return self.last_message or "No messages yet"
