# Role: Streamlit chat UI.
# - ConversationSession (kept in st.session_state) is authoritative for transcript, draft and busy.
# - Mic clips come from st.audio_input; SPEAK plays synthesized audio inline.

from __future__ import annotations

import asyncio
import hashlib
import html
from typing import Any, Coroutine, Optional, TypeVar

import streamlit as st

import grandpa_chat.config
grandpa_chat.config.load_env()

from grandpa_chat.audio.base import AudioPlayer
from grandpa_chat.audio.microphones import ClipMicrophone
from grandpa_chat.core.session import ConversationSession
from grandpa_chat.models.message import Message
from grandpa_chat.tools.speech_client import TranscriptionResult
from grandpa_chat.utils.formatting import PROCESSING_TEXT, format_timestamp

T = TypeVar("T")


class StreamlitPlayer(AudioPlayer):
    def play(self, audio: bytes, mime_type: str) -> None:
        st.audio(audio, format=mime_type, autoplay=True)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    # Each Streamlit rerun is synchronous; drive one session operation to completion.
    return asyncio.run(coro)


# ----------------------------
# Session helpers
# ----------------------------
def _new_session() -> ConversationSession:
    return ConversationSession(player=StreamlitPlayer(), notify=st.toast)


def ensure_session() -> ConversationSession:
    if "session" not in st.session_state:
        st.session_state["session"] = _new_session()
    if "last_audio_digest" not in st.session_state:
        st.session_state["last_audio_digest"] = None
    if "prefill_draft" not in st.session_state:
        st.session_state["prefill_draft"] = None
    return st.session_state["session"]


async def _record_clip(session: ConversationSession, data: bytes) -> Optional[TranscriptionResult]:
    # A finished clip is one start -> stop cycle of the capture state machine.
    if not await session.start_recording(ClipMicrophone(data)):
        return None
    return await session.stop_recording()


# ----------------------------
# UI polish
# ----------------------------
def inject_css() -> None:
    st.markdown(
        """
<style>
@keyframes gg-marquee {
  0% { transform: translateX(100%); }
  100% { transform: translateX(-100%); }
}
.gg-banner {
  background: #115e59;
  color: #fde047;
  font-weight: 700;
  overflow: hidden;
  white-space: nowrap;
  padding: 6px 0;
}
.gg-banner span { display: inline-block; animation: gg-marquee 15s linear infinite; }

.gg-title {
  font-family: 'Comic Sans MS', cursive;
  font-size: 2.2rem;
  color: #6b21a8;
  text-align: center;
}

@keyframes gg-bounce {
  0%, 100% { transform: translateY(0); }
  50% { transform: translateY(-4px); }
}
.gg-floating { animation: gg-bounce 1s infinite; font-weight: 700; }

.gg-footer { font-size: 0.75rem; text-align: center; opacity: 0.7; }
</style>
""",
        unsafe_allow_html=True,
    )


# ----------------------------
# Sidebar
# ----------------------------
def render_sidebar(session: ConversationSession) -> None:
    st.sidebar.title("Grumpy Grandpa")

    if st.sidebar.button("📝 New chat", use_container_width=True, disabled=session.busy):
        if session.reset():
            st.session_state["last_audio_digest"] = None
            st.session_state["prefill_draft"] = ""
            st.rerun()

    st.sidebar.divider()
    st.sidebar.caption(f"{len(session.transcript.visible())} messages")


# ----------------------------
# Chat
# ----------------------------
def render_message(session: ConversationSession, message: Message) -> None:
    with st.chat_message(message.role):
        if session.transcript.is_floating(message):
            st.markdown(f'<div class="gg-floating">{html.escape(message.content)}</div>', unsafe_allow_html=True)
        else:
            st.write(message.content)

        stamp = format_timestamp(message.timestamp)
        if stamp:
            st.caption(stamp)

        if message.role == "assistant":
            if st.button("🔊 SPEAK", key=f"speak-{message.id}"):
                _run(session.speak_text(message.content))


def render_chat(session: ConversationSession) -> None:
    for message in session.transcript.visible():
        render_message(session, message)

    if session.busy:
        with st.chat_message("assistant"):
            st.write(PROCESSING_TEXT)


def render_voice(session: ConversationSession) -> None:
    clip = st.audio_input("🎤 Record", key="voice_input", disabled=not session.can_record())
    if not clip:
        return

    data = clip.getvalue()
    digest = hashlib.sha1(data).hexdigest()
    if digest == st.session_state["last_audio_digest"]:
        return
    st.session_state["last_audio_digest"] = digest

    with st.spinner("Transcribing..."):
        result = _run(_record_clip(session, data))

    if result is not None and result.ok:
        st.session_state["prefill_draft"] = session.input.draft
        st.rerun()


def render_composer(session: ConversationSession) -> None:
    # Key line: a transcription (or reset) overwrites the box before the widget is created.
    if st.session_state["prefill_draft"] is not None:
        st.session_state["draft_box"] = st.session_state["prefill_draft"]
        st.session_state["prefill_draft"] = None

    with st.form("composer", clear_on_submit=True):
        draft = st.text_input(
            "Message",
            key="draft_box",
            placeholder="Type your message here...",
            label_visibility="collapsed",
            disabled=session.busy,
        )
        sent = st.form_submit_button("➤ SEND", disabled=session.busy)

    if not sent:
        return

    session.input.set_draft(draft)
    if not session.can_submit():
        return

    with st.spinner(PROCESSING_TEXT):
        _run(session.submit())
    st.rerun()


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="Grumpy Grandpa Chat", page_icon="👴", layout="wide")
    inject_css()

    st.markdown(
        '<div class="gg-banner"><span>***** WELCOME TO GRUMPY GRANDPA CHAT v1.0 *****</span></div>',
        unsafe_allow_html=True,
    )
    st.markdown('<div class="gg-title">Grumpy Grandpa Chat</div>', unsafe_allow_html=True)

    session = ensure_session()
    render_sidebar(session)
    render_chat(session)
    render_voice(session)
    render_composer(session)

    st.markdown('<div class="gg-footer">Retro Chat Systems</div>', unsafe_allow_html=True)


if __name__ == "__main__":
    main()
