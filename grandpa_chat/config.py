# Role: Central configuration module. Loads .env into environment variables and computes runtime settings
# (DEBUG, backend URL, request timeout, playback output). Importers read grandpa_chat.config.<NAME> at call time.

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEBUG: bool = False
BACKEND_URL: str = "http://127.0.0.1:3000"
REQUEST_TIMEOUT: Optional[float] = None
SPEECH_OUTPUT_DIR: str = "speech"
AUDIO_PLAYER_CMD: Optional[str] = None

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    # Unset/blank/non-positive -> no timeout (calls only resolve or fail).
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def load_env() -> None:
    """
    Load .env into os.environ, then recompute settings and configure logging.
    This makes settings correct even if load_env() is called after import.
    """
    global DEBUG, BACKEND_URL, REQUEST_TIMEOUT, SPEECH_OUTPUT_DIR, AUDIO_PLAYER_CMD
    # Key line: look for .env from the working directory (where the CLI / Streamlit app is launched).
    load_dotenv(find_dotenv(usecwd=True))
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}
    BACKEND_URL = os.getenv("CHAT_BACKEND_URL", "http://127.0.0.1:3000").rstrip("/")
    REQUEST_TIMEOUT = _parse_timeout(os.getenv("CHAT_REQUEST_TIMEOUT"))
    SPEECH_OUTPUT_DIR = os.getenv("SPEECH_OUTPUT_DIR", "speech")
    AUDIO_PLAYER_CMD = os.getenv("AUDIO_PLAYER_CMD") or None

    logging.basicConfig(level=logging.DEBUG if DEBUG else logging.INFO, format=LOG_FORMAT)
