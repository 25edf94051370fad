"""
Chat Session Module

Owns the bounded conversation transcript and sends it as multi-turn
context with every chat message. The transcript lives in memory only.
"""

from typing import Any, Dict, List, Optional, Tuple

import httpx

from comment_translate.config import CONFIG_NAMESPACE, DEFAULT_CONFIG, load_config
from comment_translate.logger import get_logger
from comment_translate.ai.providers import call_messages_api
from comment_translate.ai.schema import ChatTurn, TranslationRequest
from comment_translate.ai.service import validate_api_key

logger = get_logger(__name__)

DEFAULT_MAX_HISTORY = 20


class ChatSession:
    """A conversation with the Messages API."""

    def __init__(
        self,
        settings: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if settings is None:
            settings = load_config().get(CONFIG_NAMESPACE, {})
        defaults = DEFAULT_CONFIG[CONFIG_NAMESPACE]
        chat_settings = {**defaults["chat"], **settings.get("chat", {})}

        self.api_url = settings.get("api_url", defaults["api_url"])
        self.anthropic_version = settings.get("anthropic_version", defaults["anthropic_version"])
        self.model = chat_settings["model"]
        self.max_tokens = chat_settings["max_tokens"]
        self.max_history = int(chat_settings.get("max_history", DEFAULT_MAX_HISTORY))
        self.timeout = chat_settings.get("timeout", 120)
        self.transport = transport
        self._turns: List[ChatTurn] = []

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def history(self) -> Tuple[ChatTurn, ...]:
        """Snapshot of the transcript, oldest first."""
        return tuple(self._turns)

    def append(self, turn: ChatTurn) -> None:
        """Add a turn, dropping the oldest ones beyond max_history."""
        self._turns.append(turn)
        self._trim()

    def set_max_history(self, max_history: int) -> None:
        """Change the cap, trimming the transcript right away."""
        self.max_history = int(max_history)
        self._trim()

    def _trim(self) -> None:
        overflow = len(self._turns) - self.max_history
        if overflow > 0:
            del self._turns[:overflow]
            logger.debug(f"Transcript trimmed by {overflow} turns")

    def clear(self) -> None:
        self._turns.clear()

    def _request_messages(self) -> List[ChatTurn]:
        # Trimming can leave an assistant turn first; the API wants a user turn there
        messages = list(self._turns)
        while messages and messages[0].role != "user":
            messages.pop(0)
        return messages

    def send(self, text: str, api_key: str) -> str:
        """
        Send a user message with the transcript as context.

        The user turn is recorded before the request and stays in the
        transcript when the request fails.

        Args:
            text: User message
            api_key: Anthropic API key

        Returns:
            Assistant reply text

        Raises:
            MissingApiKeyError: No API key, the transcript is untouched.
            TranslationError: The request failed.
        """
        api_key = validate_api_key(api_key)

        self.append(ChatTurn(role="user", content=text))

        request = TranslationRequest(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=self._request_messages(),
        )
        try:
            reply = call_messages_api(
                api_key=api_key,
                request=request,
                api_url=self.api_url,
                anthropic_version=self.anthropic_version,
                timeout=self.timeout,
                transport=self.transport,
            )
        except Exception as e:
            logger.error(f"Chat request failed: {e}")
            raise

        assistant_text = reply.text
        self.append(ChatTurn(role="assistant", content=assistant_text))
        logger.info(f"Chat reply received ({len(assistant_text)} chars, transcript: {len(self._turns)} turns)")
        return assistant_text
