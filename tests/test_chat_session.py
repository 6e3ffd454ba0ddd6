"""
Tests for the chat session controller
"""

import asyncio
import random

import pytest

from config.app_config import AppConfig, BackendConfig
from infrastructure.external.workspace_backend import OfflineWorkspaceBackend
from infrastructure.resilience.retry_service import RetryService
from services.chat_service import ActivePicker, Author, ChatSession, PickerTarget, QUICK_REACTIONS
from services.render_service import ResponseSimulator, build_response
from services.workspace_service import BackendFacade, Provenance, WorkspaceFallbackSystem


async def yielding_sleep(delay):
    await asyncio.sleep(0)


class CapturingSimulator:
    """Simulator that hands its callbacks to the test instead of calling them"""

    def __init__(self):
        self.renders = []

    async def render(self, text, model_id, on_update, on_complete):
        self.renders.append((text, model_id, on_update, on_complete))


def make_session(simulator=None, **chat_overrides):
    config = AppConfig()
    for key, value in chat_overrides.items():
        setattr(config.chat, key, value)

    facade = BackendFacade(
        backend=OfflineWorkspaceBackend(),
        config=BackendConfig(),
        retry_service=RetryService(),
        fallback_system=WorkspaceFallbackSystem()
    )
    simulator = simulator or ResponseSimulator(time_unit_seconds=0, sleep=yielding_sleep, rng=random.Random(7))
    return ChatSession(simulator=simulator, facade=facade, config=config)


class TestSendMessage:
    """Test sending messages and streaming replies"""

    @pytest.mark.asyncio
    async def test_streams_full_response_into_store(self):
        session = make_session()
        updates = []

        message_id = await session.send_message("  Check @README.md please ", on_update=updates.append)
        assert session.is_streaming
        await session.wait_for_stream()

        thread = session.store.active_thread
        user_message, assistant_message = thread.messages
        expected = build_response("gpt-4", "Check @README.md please")

        assert user_message.author is Author.USER
        assert user_message.content == "Check @README.md please"
        assert thread.title == "Check @README.md please"
        assert assistant_message.message_id == message_id
        assert assistant_message.content == expected
        assert updates[-1] == expected
        assert len(updates) == len(expected)
        assert not session.is_streaming
        assert session.streaming_message_id is None

    @pytest.mark.asyncio
    async def test_creates_thread_when_none_active(self):
        session = make_session()

        await session.send_message("hello")
        await session.wait_for_stream()

        assert len(session.store.threads) == 1

    @pytest.mark.asyncio
    async def test_uses_thread_model(self):
        simulator = CapturingSimulator()
        session = make_session(simulator=simulator)
        session.new_chat()
        session.change_model("perplexity")

        await session.send_message("hi")
        await session.wait_for_stream()

        text, model_id, _, _ = simulator.renders[0]
        assert model_id == "perplexity"
        assert text == build_response("perplexity", "hi")

    @pytest.mark.asyncio
    async def test_rejects_blank_input(self):
        session = make_session()

        with pytest.raises(ValueError):
            await session.send_message("   ")
        assert session.store.threads == []

    @pytest.mark.asyncio
    async def test_rejects_overlong_input(self):
        session = make_session(max_input_length=10)

        with pytest.raises(ValueError, match="10"):
            await session.send_message("x" * 11)


class TestStreamCancellation:
    """Test that abandoned streams never reach the store"""

    async def _stream_partially(self, session, text="hello there"):
        message_id = await session.send_message(text)
        thread_id = session.store.active_thread_id
        while len(session.store.get_message(thread_id, message_id).content) < 3:
            await asyncio.sleep(0)
        return thread_id, message_id

    @pytest.mark.asyncio
    async def test_new_chat_cancels_stream(self):
        session = make_session()
        thread_id, message_id = await self._stream_partially(session)

        session.new_chat()
        frozen = session.store.get_message(thread_id, message_id).content
        for _ in range(20):
            await asyncio.sleep(0)

        assert session.store.get_message(thread_id, message_id).content == frozen
        assert not session.is_streaming

    @pytest.mark.asyncio
    async def test_select_thread_cancels_stream(self):
        session = make_session()
        other = session.new_chat()
        session.new_chat()
        thread_id, message_id = await self._stream_partially(session)

        session.select_thread(other)
        frozen = session.store.get_message(thread_id, message_id).content
        for _ in range(20):
            await asyncio.sleep(0)

        assert session.store.get_message(thread_id, message_id).content == frozen
        assert session.store.active_thread_id == other

    @pytest.mark.asyncio
    async def test_selecting_active_thread_keeps_stream(self):
        session = make_session()
        thread_id, _ = await self._stream_partially(session)

        session.select_thread(thread_id)
        session.select_thread("unknown")

        assert session.is_streaming
        await session.wait_for_stream()

    @pytest.mark.asyncio
    async def test_new_message_abandons_previous_stream(self):
        session = make_session()
        thread_id, first_id = await self._stream_partially(session)

        await session.send_message("second question")
        frozen = session.store.get_message(thread_id, first_id).content
        await session.wait_for_stream()

        assert session.store.get_message(thread_id, first_id).content == frozen
        assert len(session.store.get_thread(thread_id).messages) == 4

    @pytest.mark.asyncio
    async def test_late_callbacks_are_dropped(self):
        simulator = CapturingSimulator()
        session = make_session(simulator=simulator)
        message_id = await session.send_message("hi")
        thread_id = session.store.active_thread_id
        await session.wait_for_stream()
        _, _, on_update, on_complete = simulator.renders[0]

        on_update("H")
        session.new_chat()
        on_update("Hello, late")
        on_complete()

        assert session.store.get_message(thread_id, message_id).content == "H"


class TestReactionsAndPicker:
    """Test reactions and the emoji picker"""

    def setup_method(self):
        self.session = make_session()
        self.thread_id = self.session.new_chat()
        self.message_id = self.session.store.append_user_message(self.thread_id, "hi")

    def test_toggle_reaction_for_current_user(self):
        reactions = self.session.toggle_reaction(self.message_id, "👍")

        assert reactions == {"👍": {"user-1"}}
        assert self.session.toggle_reaction(self.message_id, "👍") == {}

    def test_message_picker_reacts_and_closes(self):
        self.session.open_picker(PickerTarget.MESSAGE, self.message_id)
        assert self.session.is_picker_open(PickerTarget.MESSAGE, self.message_id)

        self.session.select_emoji("🚀")

        assert self.session.active_picker is None
        assert self.session.store.get_message(self.thread_id, self.message_id).reactions == {"🚀": {"user-1"}}

    def test_composer_picker_appends_to_draft(self):
        self.session.draft = "nice "
        self.session.open_picker(PickerTarget.COMPOSER)

        self.session.select_emoji("✨")

        assert self.session.draft == "nice ✨"
        assert self.session.active_picker is None

    def test_only_one_picker_open(self):
        other_id = self.session.store.append_user_message(self.thread_id, "there")
        self.session.open_picker(PickerTarget.MESSAGE, self.message_id)
        self.session.open_picker(PickerTarget.MESSAGE, other_id)

        assert self.session.active_picker == ActivePicker(PickerTarget.MESSAGE, other_id)
        assert not self.session.is_picker_open(PickerTarget.MESSAGE, self.message_id)

    def test_select_without_picker_is_noop(self):
        self.session.select_emoji("👍")

        assert self.session.store.get_message(self.thread_id, self.message_id).reactions == {}
        assert self.session.draft == ""

    def test_new_chat_closes_picker(self):
        self.session.open_picker(PickerTarget.COMPOSER)

        self.session.new_chat()

        assert self.session.active_picker is None

    def test_message_picker_requires_message(self):
        with pytest.raises(ValueError):
            self.session.open_picker(PickerTarget.MESSAGE)

    def test_quick_reactions(self):
        assert len(QUICK_REACTIONS) == 12
        assert len(set(QUICK_REACTIONS)) == 12


class TestComposerAndWorkspace:

    def setup_method(self):
        self.session = make_session()

    def test_add_dropped_files(self):
        self.session.draft = "compare"

        draft = self.session.add_dropped_files(["a.py", "b.py"])

        assert draft == "compare @a.py @b.py "
        assert self.session.draft == draft

    def test_change_model_creates_thread(self):
        self.session.change_model("claude")

        assert self.session.store.active_thread.model == "claude"

    def test_toggle_preview(self):
        assert self.session.toggle_preview("m1", "README.md") is True
        assert self.session.previews.is_expanded("m1", "README.md")

    @pytest.mark.asyncio
    async def test_search_strips_prefix(self):
        result = await self.session.search_files("find: chatfs")

        assert result.provenance is Provenance.FALLBACK
        assert [hit.path for hit in result.payload] == ["chatfs_app.py", "README.md"]

    @pytest.mark.asyncio
    async def test_resolve_preview_falls_back(self):
        result = await self.session.resolve_preview("README.md")

        assert result.is_fallback
        assert result.payload.startswith("# ChatFS")
