"""
Anthropic Messages API call.

One function performs the POST and decodes the reply; both the hover
translation and the chat session go through it. Errors are raised as
TranslationError subclasses, never retried.
"""

import json
from typing import Any, Dict, Optional

import httpx

from comment_translate.logger import get_logger
from comment_translate.ai.exceptions import (
    ApiError,
    InvalidResponseShapeError,
    NetworkError,
)
from comment_translate.ai.schema import ApiReply, TranslationRequest, validate_api_reply
from comment_translate.config import ANTHROPIC_API_URL, ANTHROPIC_VERSION

logger = get_logger(__name__)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (total timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 60.0),
            read=timeout_config.get('read', 120.0),
            pool=timeout_config.get('pool', 10.0),
        )
    else:
        timeout_value = float(timeout_config) if timeout_config else 120.0
        return httpx.Timeout(
            connect=10.0,
            write=60.0,
            read=timeout_value,
            pool=10.0,
        )


def build_headers(api_key: str, anthropic_version: str = ANTHROPIC_VERSION) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": anthropic_version,
    }


def handle_http_error(response: httpx.Response) -> ApiError:
    """Build an ApiError from a non-success response, reading the body best effort."""
    try:
        error_text = response.text
    except Exception as e:
        logger.debug(f"Could not read error body: {e}")
        error_text = ""

    logger.error(f"API request failed with status {response.status_code}: {error_text[:500]}")
    return ApiError(response.status_code, error_text)


def call_messages_api(
    api_key: str,
    request: TranslationRequest,
    api_url: str = ANTHROPIC_API_URL,
    anthropic_version: str = ANTHROPIC_VERSION,
    timeout: Any = 120,
    transport: Optional[httpx.BaseTransport] = None,
) -> ApiReply:
    """
    POST a Messages API request and return the validated reply.

    Args:
        api_key: Anthropic API key
        request: Model, token budget and ordered messages
        api_url: Endpoint URL
        anthropic_version: Value of the anthropic-version header
        timeout: Transport timeout, see get_httpx_timeout()
        transport: Optional httpx transport (tests use httpx.MockTransport)

    Raises:
        ApiError: non-2xx status
        InvalidResponseShapeError: body is not JSON or not a reply
        NetworkError: transport failure
    """
    body = request.to_dict()

    logger.debug(f"Calling Messages API (model: {request.model}, messages: {len(request.messages)})")
    logger.debug(f"  Request body: {json.dumps(body, ensure_ascii=False)}")

    try:
        with httpx.Client(timeout=get_httpx_timeout(timeout), transport=transport) as client:
            response = client.post(api_url, headers=build_headers(api_key, anthropic_version), json=body)
    except httpx.TimeoutException as e:
        logger.error(f"Messages API transport timeout: {e}")
        raise NetworkError(f"Request to Claude API timed out: {e}")
    except httpx.HTTPError as e:
        logger.error(f"Messages API call failed: {e}")
        raise NetworkError(f"Failed to reach Claude API: {e}")

    if not response.is_success:
        raise handle_http_error(response)

    try:
        raw_data = response.json()
    except ValueError as e:
        logger.error(f"Response body is not JSON: {e}")
        raise InvalidResponseShapeError("body_not_json")

    logger.debug(f"  Raw API response: {raw_data}")

    reply, reason = validate_api_reply(raw_data)
    if reply is None:
        logger.error(f"Invalid response data ({reason}): {raw_data}")
        raise InvalidResponseShapeError(reason)

    logger.debug(f"  Token usage: input={reply.usage.input_tokens}, output={reply.usage.output_tokens}")
    return reply
