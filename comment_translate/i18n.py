"""
Internationalization (i18n) module for user-visible messages.

Hover replacements, chat errors and notifications are looked up here so the
UI can be shown in Japanese (the default) or English. It loads JSON language
packs and provides a simple interface for retrieving messages.

Note: Log messages and exception messages are NOT translated - they remain in
English for debugging purposes.
"""

import json
from pathlib import Path
from typing import Any, Dict

from comment_translate.logger import get_logger

logger = get_logger(__name__)

# Language pack directory
LOCALES_DIR = Path(__file__).parent / "web" / "locales"

# Default language
DEFAULT_LANGUAGE = "en"

# Supported languages with their display names
SUPPORTED_LANGUAGES = {
    "en": {"name": "English", "native_name": "English"},
    "ja": {"name": "Japanese", "native_name": "日本語"},
}

# Cache for loaded language packs
_language_cache: Dict[str, Dict[str, Any]] = {}


def normalize_language_code(lang_code: str) -> str:
    """
    Normalize a language code to match our supported languages.

    Args:
        lang_code: Raw language code (e.g., 'ja', 'ja-JP', 'EN_us')

    Returns:
        Normalized language code, DEFAULT_LANGUAGE when unsupported
    """
    if not lang_code:
        return DEFAULT_LANGUAGE

    lang_lower = lang_code.lower().replace('_', '-')
    if lang_lower in SUPPORTED_LANGUAGES:
        return lang_lower

    # Partial match (e.g., 'ja-jp' -> 'ja')
    base = lang_lower.split('-')[0]
    if base in SUPPORTED_LANGUAGES:
        return base

    return DEFAULT_LANGUAGE


def load_language(lang_code: str) -> Dict[str, Any]:
    """
    Load a language pack from JSON file.

    Args:
        lang_code: The language code (e.g., 'en', 'ja')

    Returns:
        Dictionary containing all messages for the language
    """
    lang_code = normalize_language_code(lang_code)

    if lang_code in _language_cache:
        return _language_cache[lang_code]

    lang_file = LOCALES_DIR / f"{lang_code}.json"

    if not lang_file.exists():
        logger.debug(f"Language file not found: {lang_file}, falling back to {DEFAULT_LANGUAGE}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}

    try:
        with open(lang_file, 'r', encoding='utf-8') as f:
            translations = json.load(f)
            _language_cache[lang_code] = translations
            logger.debug(f"Loaded language pack: {lang_code}")
            return translations
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load language file {lang_file}: {e}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}


def _lookup(translations: Dict[str, Any], key: str):
    node: Any = translations
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


def get_translation(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get a message by dotted key.

    Falls back to the default language, then to the key itself.

    Args:
        key: Dotted key such as 'hover.timeout'
        lang: Language code
        **kwargs: Values for {placeholders} in the message

    Returns:
        The formatted message
    """
    message = _lookup(load_language(lang), key)
    if message is None and normalize_language_code(lang) != DEFAULT_LANGUAGE:
        message = _lookup(load_language(DEFAULT_LANGUAGE), key)
    if message is None:
        logger.debug(f"Missing message key: {key}")
        return key

    if kwargs:
        try:
            return message.format(**kwargs)
        except (KeyError, IndexError) as e:
            logger.warning(f"Failed to format message '{key}': {e}")
    return message
