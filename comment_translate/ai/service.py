"""
Hover Translation Service Module

This module provides the translation client used by the hover:
- TranslationClient for single-turn translation requests
- Timeout race between the HTTP call and a timer
- API key validation

For the HTTP call itself, see ai/providers.py
"""

from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional

import httpx

from comment_translate.config import CONFIG_NAMESPACE, DEFAULT_CONFIG, get_prompt, load_config
from comment_translate.logger import get_logger
from comment_translate.ai.exceptions import MissingApiKeyError, TranslationTimeoutError
from comment_translate.ai.providers import call_messages_api
from comment_translate.ai.schema import ChatTurn, TranslationRequest
from comment_translate.translation.processor import post_process_translation

logger = get_logger(__name__)


def validate_api_key(api_key: Optional[str]) -> str:
    """
    Validate that an API key is present.

    Raises:
        MissingApiKeyError: If the key is empty or missing.
    """
    if not api_key or not api_key.strip():
        logger.error("API key is missing")
        raise MissingApiKeyError()
    return api_key.strip()


def transport_timeout(seconds: float) -> Dict[str, float]:
    """Bound every phase of the HTTP call by the hover timeout."""
    return {"connect": seconds, "write": seconds, "read": seconds, "pool": seconds}


class TranslationClient:
    """Translate hover text with a single Messages API request."""

    def __init__(
        self,
        settings: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        max_workers: int = 4,
    ):
        if settings is None:
            settings = load_config().get(CONFIG_NAMESPACE, {})
        defaults = DEFAULT_CONFIG[CONFIG_NAMESPACE]
        translation_settings = {**defaults["translation"], **settings.get("translation", {})}

        self.api_url = settings.get("api_url", defaults["api_url"])
        self.anthropic_version = settings.get("anthropic_version", defaults["anthropic_version"])
        self.model = translation_settings["model"]
        self.max_tokens = translation_settings["max_tokens"]
        self.timeout = float(translation_settings["timeout"])
        self.transport = transport
        self.prompt_template = get_prompt("hover_translation_prompt")["prompt"]
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="translate")
        logger.info(f"Initialized translation client with model: {self.model}, timeout: {self.timeout}s")

    def build_prompt(self, text: str) -> str:
        """Wrap the hover text in the translation instruction."""
        return self.prompt_template.format(text=text)

    def _request_translation(self, text: str, api_key: str, timeout: float) -> str:
        request = TranslationRequest(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[ChatTurn(role="user", content=self.build_prompt(text))],
        )
        reply = call_messages_api(
            api_key=api_key,
            request=request,
            api_url=self.api_url,
            anthropic_version=self.anthropic_version,
            timeout=transport_timeout(timeout),
            transport=self.transport,
        )
        logger.debug(f"Raw translated text from API: {reply.text}")
        return post_process_translation(reply.text)

    def translate(self, text: str, api_key: str, timeout: Optional[float] = None) -> str:
        """
        Translate text, giving up after the timeout.

        When the timer wins, a request still waiting for a worker is
        cancelled and never sent. One already on the wire is bounded by the
        same timeout at the transport level and its result is ignored.

        Args:
            text: Hover text to translate
            api_key: Anthropic API key
            timeout: Seconds to wait, defaults to the configured timeout

        Returns:
            Post-processed translation

        Raises:
            MissingApiKeyError: No API key, nothing is sent.
            TranslationTimeoutError: The timer settled first.
            TranslationError: Any other request failure.
        """
        api_key = validate_api_key(api_key)
        wait_for = self.timeout if timeout is None else timeout

        logger.debug(f"Translating: {text}")
        future = self._executor.submit(self._request_translation, text, api_key, wait_for)
        try:
            return future.result(timeout=wait_for)
        except FutureTimeoutError:
            if future.cancel():
                logger.warning(f"Translation timed out after {wait_for}s before it was sent, dropped")
            else:
                logger.warning(f"Translation timed out after {wait_for}s, discarding the late result")
                future.add_done_callback(_log_abandoned_result)
            raise TranslationTimeoutError(wait_for)

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work; by default in-flight requests are left to finish."""
        self._executor.shutdown(wait=wait)


def _log_abandoned_result(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.debug(f"Abandoned translation failed after timeout: {error}")
    else:
        logger.debug("Abandoned translation finished after timeout")
