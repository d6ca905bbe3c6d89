# Role: Terminal audio player. Saves each synthesized clip to disk and optionally hands it to an external
# command (e.g. "ffplay -nodisp -autoexit"); never waits for the clip to finish.
# Spawned players are reaped on the next play() and on close().

from __future__ import annotations

import logging
import shlex
import subprocess
import threading
import uuid
from pathlib import Path
from typing import List, Optional, Union

import grandpa_chat.config as config
from grandpa_chat.audio.base import AudioPlayer

logger = logging.getLogger(__name__)

_EXTENSIONS = {"audio/mpeg": ".mp3", "audio/webm": ".webm"}


class FilePlayer(AudioPlayer):
    blocking = True

    def __init__(self, output_dir: Union[str, Path, None] = None, command: Optional[str] = None) -> None:
        self.output_dir = Path(output_dir or config.SPEECH_OUTPUT_DIR)
        self.command = command if command is not None else config.AUDIO_PLAYER_CMD
        self.saved: List[Path] = []
        self._children: List[subprocess.Popen] = []
        # play() runs on worker threads; overlapping clips share the lists above.
        self._lock = threading.Lock()

    @property
    def running(self) -> int:
        with self._lock:
            return len(self._children)

    def play(self, audio: bytes, mime_type: str) -> None:
        # 1) Reap players that already exited
        # 2) Write the clip under a unique name
        # 3) Spawn the player command, if configured (fire-and-forget, handle kept)
        self._reap()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"speech-{uuid.uuid4().hex[:12]}{_EXTENSIONS.get(mime_type, '.bin')}"
        path.write_bytes(audio)
        with self._lock:
            self.saved.append(path)
        logger.info("Saved speech to %s (%d bytes)", path, len(audio))

        if not self.command:
            return
        try:
            child = subprocess.Popen([*shlex.split(self.command), str(path)])
        except OSError as e:
            logger.error("Error playing audio: %s", e)
            return
        with self._lock:
            self._children.append(child)

    def _reap(self) -> None:
        with self._lock:
            self._children = [c for c in self._children if c.poll() is None]

    def close(self) -> None:
        # Key line: stop players still running, then wait so no child is left unreaped.
        with self._lock:
            children, self._children = self._children, []
        for child in children:
            if child.poll() is None:
                child.terminate()
            child.wait()
