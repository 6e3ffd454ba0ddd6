import asyncio

import streamlit as st

from config.app_config import get_config
from infrastructure.monitoring.logging_service import initialize_logging, get_logger
from services.chat_service import ChatSession, PickerTarget, QUICK_REACTIONS
from services.mention_service import split_content, file_extension
from services.render_service import get_model_profile, list_model_profiles
from services.workspace_service import BackendFacade, is_search_query

# Initialize logging and error tracking
error_tracker = initialize_logging()
logger = get_logger(__name__)

config = get_config()


def get_session() -> ChatSession:
    """One chat session and event loop per browser session"""
    if "chat_session" not in st.session_state:
        st.session_state.event_loop = asyncio.new_event_loop()
        st.session_state.chat_session = ChatSession(facade=BackendFacade(), config=config)
        logger.info("Chat session created")
    return st.session_state.chat_session


def run(coro):
    return st.session_state.event_loop.run_until_complete(coro)


def render_sidebar(session: ChatSession):
    with st.sidebar:
        st.markdown(f"## {config.ui.app_title}")

        if st.button("➕ New Chat", use_container_width=True):
            session.new_chat()
            st.rerun()

        status = run(session.status_monitor.refresh_if_due())
        indicator = "🟢" if status.is_connected else "🟡"
        st.caption(f"{indicator} **{status.label}** · {status.detail}")

        st.markdown("### 💬 Threads")
        for summary in session.store.summaries():
            profile = get_model_profile(summary.model)
            label = f"{profile.icon} {summary.title}"
            if st.button(label, key=f"thread_{summary.thread_id}", use_container_width=True,
                         type="primary" if summary.is_active else "secondary"):
                session.select_thread(summary.thread_id)
                st.rerun()
            st.caption(f"{summary.preview_text[:40]} · {summary.message_count_label}")


def render_model_selector(session: ChatSession):
    profiles = list_model_profiles()
    thread = session.store.active_thread
    current = thread.resolved_model if thread else profiles[0].model_id
    index = next(i for i, profile in enumerate(profiles) if profile.model_id is current)

    selected = st.selectbox(
        "Model",
        profiles,
        index=index,
        format_func=lambda profile: f"{profile.icon} {profile.name} - {profile.description}"
    )
    if thread is not None and selected.model_id is not thread.resolved_model:
        session.change_model(selected.model_id.value)


def render_message(session: ChatSession, message):
    with st.chat_message("user" if message.is_user else "assistant"):
        rendered = "".join(
            f"`{segment.text}`" if segment.is_mention else segment.text
            for segment in split_content(message.content)
        )
        st.markdown(rendered)

        for segment in split_content(message.content):
            if not segment.is_mention:
                continue
            path = segment.mention.path
            key = f"preview_{message.message_id}_{segment.mention.start}"
            expanded = session.previews.is_expanded(message.message_id, path)
            if st.button(f"📄 {path} [{file_extension(path)}]", key=key):
                session.toggle_preview(message.message_id, path)
                st.rerun()
            if expanded:
                preview = run(session.resolve_preview(path))
                if preview.is_fallback:
                    st.caption("Preview from fallback data")
                st.code(preview.payload)

        if message.reactions:
            st.caption("  ".join(f"{emoji} {len(users)}" for emoji, users in message.reactions.items()))

        if not message.is_user and message.content:
            if session.is_picker_open(PickerTarget.MESSAGE, message.message_id):
                columns = st.columns(len(QUICK_REACTIONS))
                for column, emoji in zip(columns, QUICK_REACTIONS):
                    if column.button(emoji, key=f"react_{message.message_id}_{emoji}"):
                        session.select_emoji(emoji)
                        st.rerun()
            elif st.button("😊", key=f"picker_{message.message_id}"):
                session.open_picker(PickerTarget.MESSAGE, message.message_id)
                st.rerun()


def render_search_results(result):
    with st.expander("🔍 File search", expanded=True):
        if result.is_fallback:
            st.caption("Search results from fallback data")
        if not result.payload:
            st.markdown("No matching files.")
        for hit in result.payload:
            st.markdown(f"**@{hit.path}** ({hit.score:.2f})\n\n{hit.snippet}")


def render_composer_picker(session: ChatSession):
    if session.is_picker_open(PickerTarget.COMPOSER):
        columns = st.columns(len(QUICK_REACTIONS))
        for column, emoji in zip(columns, QUICK_REACTIONS):
            if column.button(emoji, key=f"compose_{emoji}"):
                session.select_emoji(emoji)
                st.rerun()
    elif st.button("😊 Add emoji", key="composer_picker"):
        session.open_picker(PickerTarget.COMPOSER)
        st.rerun()


def main_app():
    st.set_page_config(page_title="ChatFS", page_icon="🗂️")
    session = get_session()

    render_sidebar(session)
    render_model_selector(session)

    thread = session.store.active_thread
    if thread is None or not thread.messages:
        st.markdown(f"### {config.ui.welcome_title}")
        st.markdown(config.ui.welcome_message)
        st.info(config.ui.tip_message)
    else:
        for message in thread.messages:
            render_message(session, message)

    if st.session_state.get("last_search") is not None:
        render_search_results(st.session_state.last_search)

    dropped = st.file_uploader("Drop files to mention them", accept_multiple_files=True)
    names = tuple(upload.name for upload in dropped or ())
    if names and names != st.session_state.get("dropped_names"):
        st.session_state.dropped_names = names
        session.add_dropped_files(names)

    render_composer_picker(session)
    if session.draft:
        st.caption(f"Draft: {session.draft}")

    prompt = st.chat_input(config.ui.input_placeholder, max_chars=config.chat.max_input_length)
    if not prompt:
        return

    prompt = f"{session.draft}{prompt}" if session.draft else prompt
    session.draft = ""

    if is_search_query(prompt):
        st.session_state.last_search = run(session.search_files(prompt))

    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        placeholder = st.empty()

        async def turn():
            await session.send_message(prompt, on_update=lambda prefix: placeholder.markdown(prefix + "▌"))
            await session.wait_for_stream()

        try:
            run(turn())
        except ValueError as e:
            st.warning(str(e))
            return
        except Exception as e:
            error_tracker.track_error(e, "send_message")
            st.error("Something went wrong while generating the response. Please try again.")
            return

    st.rerun()


main_app()
