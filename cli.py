# Role: Local developer CLI to chat with the backend without the web UI.
# Audio files stand in for the microphone; synthesized speech is saved (and optionally played) by FilePlayer.

from __future__ import annotations

import asyncio
from typing import List, Optional

import grandpa_chat.config
grandpa_chat.config.load_env()

from grandpa_chat.audio.microphones import FileMicrophone
from grandpa_chat.audio.players import FilePlayer
from grandpa_chat.core.session import ConversationSession
from grandpa_chat.models.message import Message
from grandpa_chat.utils.formatting import PROCESSING_TEXT, format_line

HELP = (
    "Commands: /record <audio file>, /stop, /speak [n], /history, /new, /exit\n"
    "Press Enter on an empty line to send a transcribed draft."
)


def _print_notice(message: str) -> None:
    print(f"\n[!] {message}")


def _assistant_messages(session: ConversationSession) -> List[Message]:
    return [m for m in session.transcript.visible() if m.role == "assistant"]


def _pick_assistant_message(session: ConversationSession, arg: str) -> Optional[Message]:
    # /speak -> latest reply; /speak n -> n-th reply (1-based)
    replies = _assistant_messages(session)
    if not replies:
        return None
    if not arg:
        return replies[-1]
    try:
        index = int(arg)
    except ValueError:
        return None
    if 1 <= index <= len(replies):
        return replies[index - 1]
    return None


async def _send(session: ConversationSession) -> None:
    print(PROCESSING_TEXT)
    reply = await session.submit()
    if reply is not None:
        print(f"\n{format_line(reply)}")


async def _handle_command(session: ConversationSession, cmd: str, arg: str) -> bool:
    # Returns False when the loop should exit.
    if cmd in {"/exit", "/quit"}:
        return False

    if cmd == "/new":
        if session.reset():
            print("New conversation started.")
        else:
            print("Busy; try again in a moment.")
        return True

    if cmd == "/history":
        for message in session.transcript.visible():
            print(format_line(message))
        return True

    if cmd == "/record":
        if not arg:
            print("Usage: /record <audio file>")
        elif await session.start_recording(FileMicrophone(arg)):
            print("Recording... type /stop to transcribe.")
        elif session.is_recording:
            print("Already recording.")
        return True

    if cmd == "/stop":
        result = await session.stop_recording()
        if result is not None and result.ok:
            print(f"Draft: {session.input.draft}")
        return True

    if cmd == "/speak":
        message = _pick_assistant_message(session, arg)
        if message is None:
            print("No such assistant message.")
        else:
            session.speak(message.content)
        return True

    print(HELP)
    return True


async def run() -> None:
    # 1) Create the session (FilePlayer for speech, notices printed inline)
    # 2) Read lines without blocking the loop, so playback tasks keep running
    # 3) Route commands / submit text
    print("Grumpy Grandpa Chat CLI")
    print(HELP)
    print("-" * 50)

    session = ConversationSession(player=FilePlayer(), notify=_print_notice)
    try:
        while True:
            try:
                line = (await asyncio.to_thread(input, "\nYou: ")).strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            if line.startswith("/"):
                cmd, _, arg = line.partition(" ")
                if not await _handle_command(session, cmd.lower(), arg.strip()):
                    print("Bye!")
                    return
                continue

            if line:
                session.input.set_draft(line)
            if not session.can_submit():
                continue
            await _send(session)
    finally:
        await session.playback.wait_idle(timeout=30)
        session.close()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
