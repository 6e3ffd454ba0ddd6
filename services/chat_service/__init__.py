"""
Chat service - threads, messages, reactions and the session controller.
"""

from .models import Author, Message, Thread, ThreadSummary
from .errors import UnknownThreadError, UnknownMessageError
from .thread_store import ThreadStore
from .emoji_picker import QUICK_REACTIONS, PickerTarget, ActivePicker
from .chat_session import ChatSession

__all__ = [
    'Author',
    'Message',
    'Thread',
    'ThreadSummary',
    'UnknownThreadError',
    'UnknownMessageError',
    'ThreadStore',
    'QUICK_REACTIONS',
    'PickerTarget',
    'ActivePicker',
    'ChatSession'
]
