# Role: Minimal wrapper around the chat endpoint. Centralizes URL, timeout, and error handling,
# so the session calls a single method: complete(messages) -> assistant text.

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

import grandpa_chat.config as config

logger = logging.getLogger(__name__)


class ChatGatewayError(RuntimeError):
    """Raised when the chat endpoint cannot produce an assistant reply."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatGateway:
    CHAT_PATH = "/api/chat"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        # Key lines:
        # - Stateless: every call carries the whole transcript.
        # - The HTTP session is injectable for testing.
        self.base_url = (base_url or config.BACKEND_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._http = http or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.CHAT_PATH}"

    def complete(self, messages: List[Dict[str, str]]) -> str:
        # 1) Validate input
        # 2) POST {messages: [...]} once
        # 3) Require a success status and a {content: str} body
        if not messages:
            raise ValueError("messages must be non-empty.")

        logger.debug("POST %s with %d messages", self.url, len(messages))
        try:
            r = self._http.post(self.url, json={"messages": messages}, timeout=self.timeout)
        except requests.RequestException as e:
            raise ChatGatewayError(f"Chat request failed: {e}") from e

        if not r.ok:
            raise ChatGatewayError(f"Failed to get response (HTTP {r.status_code})", status_code=r.status_code)

        try:
            payload: Any = r.json()
        except ValueError as e:
            raise ChatGatewayError(f"Malformed chat response: {e}", status_code=r.status_code) from e

        content = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(content, str):
            raise ChatGatewayError("Chat response has no 'content' string", status_code=r.status_code)

        logger.debug("Chat reply (%d chars)", len(content))
        return content

    def close(self) -> None:
        self._http.close()
