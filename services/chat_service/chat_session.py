"""
Chat session - top-level controller tying the thread store, the response simulator,
mention previews, the backend facade and the emoji picker together for one user.
"""

import asyncio
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from config.app_config import AppConfig, get_config
from infrastructure.external.workspace_backend import SearchHit
from infrastructure.monitoring.logging_service import get_logger, log_user_interaction
from services.chat_service.emoji_picker import ActivePicker, PickerTarget
from services.chat_service.thread_store import ThreadStore
from services.mention_service.mention_parser import mentions_for_dropped_files
from services.mention_service.preview_service import MentionPreviewService
from services.render_service.response_simulator import ResponseSimulator
from services.render_service.responses import build_response
from services.workspace_service.backend_facade import BackendFacade, get_backend_facade
from services.workspace_service.models import FetchResult
from services.workspace_service.search_mode import normalize_search_query
from services.workspace_service.status_monitor import BackendStatusMonitor


class ChatSession:
    """
    Session controller for the presentation layer.

    Only one assistant response streams at a time. Switching threads, starting a
    new chat or sending another message cancels the running stream, and any
    update still in flight for the abandoned message is dropped before it reaches
    the store.
    """

    def __init__(
        self,
        store: Optional[ThreadStore] = None,
        simulator: Optional[ResponseSimulator] = None,
        facade: Optional[BackendFacade] = None,
        previews: Optional[MentionPreviewService] = None,
        config: Optional[AppConfig] = None
    ):
        self.logger = get_logger(__name__)
        self.config = config or get_config()
        self.store = store or ThreadStore(self.config.chat)
        self.simulator = simulator or ResponseSimulator(
            time_unit_seconds=self.config.streaming.time_unit_seconds
        )
        self.facade = facade or get_backend_facade()
        self.previews = previews or MentionPreviewService(self.facade)
        self.status_monitor = BackendStatusMonitor(self.facade)

        self.active_picker: Optional[ActivePicker] = None
        self.draft = ""

        self._stream_task: Optional[asyncio.Task] = None
        self._stream_target: Optional[Tuple[str, str]] = None

    @property
    def user_id(self) -> str:
        return self.config.chat.current_user_id

    @property
    def is_streaming(self) -> bool:
        return self._stream_task is not None and not self._stream_task.done()

    @property
    def streaming_message_id(self) -> Optional[str]:
        if self._stream_target is None:
            return None
        return self._stream_target[1]

    def _ensure_thread(self) -> str:
        thread = self.store.active_thread
        if thread is None:
            return self.store.create_thread()
        return thread.thread_id

    # Threads

    def new_chat(self) -> str:
        self.cancel_stream()
        self.close_picker()
        thread_id = self.store.create_thread()
        log_user_interaction(self.logger, "new_chat", thread_id=thread_id)
        return thread_id

    def select_thread(self, thread_id: str):
        """Switch the active thread; unknown ids are ignored"""
        if not self.store.has_thread(thread_id) or thread_id == self.store.active_thread_id:
            return
        self.cancel_stream()
        self.close_picker()
        self.store.select_thread(thread_id)

    def change_model(self, model_id: str):
        thread_id = self._ensure_thread()
        self.store.set_model(thread_id, model_id)

    # Messages and streaming

    async def send_message(self, text: str, on_update: Optional[Callable[[str], None]] = None) -> str:
        """
        Send user input and start streaming the assistant's reply

        Args:
            text: Raw user input
            on_update: Optional observer called with each revealed prefix

        Returns:
            Id of the assistant message being streamed

        Raises:
            ValueError: If the input is blank or longer than the configured limit
        """
        text = text.strip()
        if not text:
            raise ValueError("Message is empty")
        if len(text) > self.config.chat.max_input_length:
            raise ValueError(f"Message exceeds {self.config.chat.max_input_length} characters")

        self.cancel_stream()

        thread_id = self._ensure_thread()
        self.store.append_user_message(thread_id, text)
        message_id = self.store.begin_assistant_message(thread_id)

        thread = self.store.get_thread(thread_id)
        response = build_response(thread.resolved_model, text)
        target = (thread_id, message_id)
        self._stream_target = target

        def handle_update(prefix: str):
            if self._stream_target != target:
                return
            self.store.update_message_content(thread_id, message_id, prefix)
            if on_update is not None:
                on_update(prefix)

        def handle_complete():
            if self._stream_target != target:
                return
            self._stream_target = None
            self.logger.debug(f"Response {message_id} settled")

        self._stream_task = asyncio.get_running_loop().create_task(
            self.simulator.render(response, thread.model, handle_update, handle_complete)
        )

        log_user_interaction(self.logger, "message_sent", thread_id=thread_id,
                             model=thread.resolved_model.value, length=len(text))
        return message_id

    async def wait_for_stream(self):
        """Wait until the current stream settles or is cancelled"""
        if self._stream_task is None:
            return
        await asyncio.wait({self._stream_task})

    def cancel_stream(self):
        self._stream_target = None
        if self._stream_task is not None and not self._stream_task.done():
            self._stream_task.cancel()
            self.logger.debug("Cancelled in-flight response")
        self._stream_task = None

    # Reactions and emoji picker

    def toggle_reaction(self, message_id: str, emoji: str) -> Dict[str, Set[str]]:
        """Toggle the current user's reaction on a message in the active thread"""
        thread_id = self.store.active_thread_id
        if thread_id is None:
            raise LookupError("No active thread")

        reactions = self.store.toggle_reaction(thread_id, message_id, emoji, self.user_id)
        log_user_interaction(self.logger, "reaction_toggled", thread_id=thread_id,
                             message_id=message_id, emoji=emoji)
        return reactions

    def open_picker(self, target: PickerTarget, message_id: Optional[str] = None):
        """Open a picker, replacing whichever one is open"""
        self.active_picker = ActivePicker(target=target, message_id=message_id)

    def close_picker(self):
        self.active_picker = None

    def is_picker_open(self, target: PickerTarget, message_id: Optional[str] = None) -> bool:
        return self.active_picker == ActivePicker(target=target, message_id=message_id)

    def select_emoji(self, emoji: str):
        """Apply an emoji to whatever the open picker targets, then close it"""
        picker = self.active_picker
        if picker is None:
            return

        if picker.target is PickerTarget.MESSAGE:
            self.toggle_reaction(picker.message_id, emoji)
        else:
            self.draft += emoji
        self.close_picker()

    # Composer

    def add_dropped_files(self, file_names: Iterable[str]) -> str:
        self.draft = mentions_for_dropped_files(self.draft, file_names)
        return self.draft

    # Mentions and workspace

    def toggle_preview(self, message_id: str, path: str) -> bool:
        return self.previews.toggle(message_id, path)

    async def resolve_preview(self, path: str) -> FetchResult[str]:
        return await self.previews.resolve_preview(path)

    async def search_files(self, text: str) -> FetchResult[List[SearchHit]]:
        query = normalize_search_query(text)
        log_user_interaction(self.logger, "search", query=query)
        return await self.facade.search(query)
