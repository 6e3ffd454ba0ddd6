"""
Thread store - the single owner of threads and messages.
Every mutation of conversation state goes through this class.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional, Set

from config.app_config import ChatConfig, get_config
from infrastructure.monitoring.logging_service import get_logger, log_conversation_event
from services.chat_service.errors import UnknownMessageError, UnknownThreadError
from services.chat_service.models import Author, Message, Thread, ThreadSummary
from services.render_service.models import is_known_model


def _new_id() -> str:
    return uuid.uuid4().hex


class ThreadStore:
    """
    In-memory collection of threads, newest first, plus the active thread pointer.

    Mutating an unknown thread or message raises a LookupError subclass;
    selecting an unknown thread is silently ignored.
    """

    def __init__(self, config: Optional[ChatConfig] = None):
        self.logger = get_logger(__name__)
        self.config = config or get_config().chat
        self._threads: List[Thread] = []
        self._active_thread_id: Optional[str] = None

    @property
    def threads(self) -> List[Thread]:
        return list(self._threads)

    @property
    def active_thread_id(self) -> Optional[str]:
        return self._active_thread_id

    @property
    def active_thread(self) -> Optional[Thread]:
        if self._active_thread_id is None:
            return None
        return self._find_thread(self._active_thread_id)

    def _find_thread(self, thread_id: str) -> Optional[Thread]:
        for thread in self._threads:
            if thread.thread_id == thread_id:
                return thread
        return None

    def has_thread(self, thread_id: str) -> bool:
        return self._find_thread(thread_id) is not None

    def get_thread(self, thread_id: str) -> Thread:
        thread = self._find_thread(thread_id)
        if thread is None:
            raise UnknownThreadError(thread_id)
        return thread

    def get_message(self, thread_id: str, message_id: str) -> Message:
        thread = self.get_thread(thread_id)
        for message in thread.messages:
            if message.message_id == message_id:
                return message
        raise UnknownMessageError(thread_id, message_id)

    def create_thread(self) -> str:
        """
        Create an empty thread at the head of the collection and make it active

        Returns:
            New thread id
        """
        thread = Thread(
            thread_id=_new_id(),
            title=self.config.title_placeholder,
            model=self.config.default_model
        )
        self._threads.insert(0, thread)
        self._active_thread_id = thread.thread_id

        log_conversation_event(self.logger, "created", thread.thread_id, model=thread.model)
        return thread.thread_id

    def select_thread(self, thread_id: str):
        """Point the active thread at `thread_id`; unknown ids are ignored"""
        if not self.has_thread(thread_id):
            self.logger.debug(f"Ignoring selection of unknown thread {thread_id}")
            return
        self._active_thread_id = thread_id

    def set_model(self, thread_id: str, model_id: str):
        thread = self.get_thread(thread_id)
        if not is_known_model(model_id):
            self.logger.warning(f"Unknown model '{model_id}' on thread {thread_id}, default model will be used")
        thread.model = model_id
        log_conversation_event(self.logger, "model_changed", thread_id, model=model_id)

    def derive_title(self, text: str) -> str:
        limit = self.config.title_max_length
        if len(text) > limit:
            return text[:limit] + "..."
        return text

    def append_user_message(self, thread_id: str, text: str) -> str:
        """
        Append a user message; the first one also names the thread

        Returns:
            New message id
        """
        thread = self.get_thread(thread_id)
        message = Message(message_id=_new_id(), content=text, author=Author.USER)

        if not thread.messages:
            thread.title = self.derive_title(text)

        thread.messages.append(message)
        thread.last_message = text
        thread.updated_at = message.created_at

        log_conversation_event(self.logger, "message_added", thread_id,
                               message_id=message.message_id, author=message.author.value)
        return message.message_id

    def begin_assistant_message(self, thread_id: str) -> str:
        """Append an empty assistant message to be filled by streaming updates"""
        thread = self.get_thread(thread_id)
        message = Message(message_id=_new_id(), content="", author=Author.ASSISTANT)
        thread.messages.append(message)
        thread.updated_at = message.created_at

        log_conversation_event(self.logger, "message_added", thread_id,
                               message_id=message.message_id, author=message.author.value)
        return message.message_id

    def update_message_content(self, thread_id: str, message_id: str, partial_text: str):
        message = self.get_message(thread_id, message_id)
        message.content = partial_text

        thread = self.get_thread(thread_id)
        if thread.messages[-1] is message:
            thread.last_message = partial_text
            thread.updated_at = datetime.now()

    def toggle_reaction(self, thread_id: str, message_id: str, emoji: str, user_id: str) -> Dict[str, Set[str]]:
        """
        Flip `user_id` in the reaction set for `emoji`

        Returns:
            Copy of the message's reaction mapping after the toggle
        """
        message = self.get_message(thread_id, message_id)
        reactors = message.reactions.get(emoji, set())

        if user_id in reactors:
            reactors.discard(user_id)
            if not reactors:
                del message.reactions[emoji]
        else:
            message.reactions[emoji] = reactors | {user_id}

        return {key: set(users) for key, users in message.reactions.items()}

    def summaries(self) -> List[ThreadSummary]:
        return [
            ThreadSummary(
                thread_id=thread.thread_id,
                title=thread.title,
                model=thread.model,
                updated_at=thread.updated_at,
                message_count_label=thread.message_count_label,
                last_message=thread.last_message or None,
                is_active=thread.thread_id == self._active_thread_id
            )
            for thread in self._threads
        ]
