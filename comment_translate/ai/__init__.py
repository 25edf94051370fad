"""
AI Module

This module provides the Claude translation client, the chat session and
related utilities.
"""

from comment_translate.ai.exceptions import (
    TranslationError,
    MissingApiKeyError,
    TranslationTimeoutError,
    ApiError,
    InvalidResponseShapeError,
    NetworkError,
)
from comment_translate.ai.schema import ApiReply, ChatTurn, TranslationRequest, validate_api_reply
from comment_translate.ai.service import TranslationClient, validate_api_key
from comment_translate.ai.chat import ChatSession

__all__ = [
    'TranslationError',
    'MissingApiKeyError',
    'TranslationTimeoutError',
    'ApiError',
    'InvalidResponseShapeError',
    'NetworkError',
    'ApiReply',
    'ChatTurn',
    'TranslationRequest',
    'validate_api_reply',
    'TranslationClient',
    'validate_api_key',
    'ChatSession',
]
