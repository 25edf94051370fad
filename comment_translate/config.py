import copy
import json
import os
from pathlib import Path
from typing import Any, Dict

from comment_translate.logger import get_logger

logger = get_logger(__name__)

# Settings namespace inside the config file
CONFIG_NAMESPACE = "comment_translate"

# Anthropic Messages API constants
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

HOVER_MODES = ["always", "comments"]
LOG_MODES = ["off", "info", "debug"]

DEFAULT_COMMENT_PREFIXES = ["//", "#", "/*", "*", "--", ";", "<!--", '"""', "'''"]


def resolve_config_file() -> Path:
    """Config file: COMMENT_TRANSLATE_CONFIG, else config/config.json under the working directory."""
    return Path(os.environ.get("COMMENT_TRANSLATE_CONFIG", Path.cwd() / "config" / "config.json"))


CONFIG_FILE = resolve_config_file()

# Default prompts
DEFAULT_PROMPTS = {
    "hover_translation_prompt": {
        "version": "1.0",
        "description": "Single-turn prompt used to translate hover text",
        "prompt": """Translate the following VS Code hover text to Japanese. Keep code and technical terms unchanged:

{text}

Japanese translation:"""
    }
}

# Default configuration template
DEFAULT_CONFIG = {
    CONFIG_NAMESPACE: {
        "api_key": "",
        "api_url": ANTHROPIC_API_URL,
        "anthropic_version": ANTHROPIC_VERSION,
        "translation": {
            "model": "claude-3-5-sonnet-20240620",
            "max_tokens": 1000,
            "timeout": 10.0,  # Seconds the hover waits before giving up
        },
        "chat": {
            "model": "claude-3-opus-20240229",
            "max_tokens": 1000,
            "max_history": 20,
            "timeout": 120,
        },
        "hover": {
            "mode": "always",  # always|comments
            "comment_prefixes": DEFAULT_COMMENT_PREFIXES,
        },
        "ui_language": "ja",
    },
    "log_mode": "off"
}


def _merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge overrides on top of defaults without mutating either."""
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def ensure_config_directory():
    """Ensure the config directory exists."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Config directory ensured: {CONFIG_FILE.parent}")


def create_default_config():
    """Create the default config.json file."""
    ensure_config_directory()
    with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
        json.dump(DEFAULT_CONFIG, f, indent=4, ensure_ascii=False)
    logger.info(f"Created default config file: {CONFIG_FILE}")


def load_config() -> Dict[str, Any]:
    """Load the configuration from the config file, merged over the defaults."""
    if not CONFIG_FILE.exists():
        logger.debug(f"No config file at {CONFIG_FILE}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.error(f"Config file {CONFIG_FILE} does not hold a JSON object")
            logger.warning("Using default configuration")
            return copy.deepcopy(DEFAULT_CONFIG)
        logger.debug("Configuration loaded from file")
        return _merge_defaults(DEFAULT_CONFIG, data)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config file {CONFIG_FILE}: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)
    except OSError as e:
        logger.error(f"Failed to read config file {CONFIG_FILE}: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]):
    """Save the configuration to the config file."""
    try:
        ensure_config_directory()
        with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4, ensure_ascii=False)
        logger.info("Configuration saved")
    except OSError as e:
        logger.error(f"Failed to save config to {CONFIG_FILE}: {e}")
        raise


def get_setting(key: str, default: Any = None, config: Dict[str, Any] = None) -> Any:
    """
    Read a namespaced setting by dotted key.

    Args:
        key: Dotted path such as "comment_translate.api_key"
        default: Value returned when any path segment is missing
        config: Optional already-loaded configuration

    Returns:
        The setting value, or default
    """
    node: Any = config if config is not None else load_config()
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def get_api_key() -> str:
    """Return the configured API key, or an empty string when unset."""
    api_key = get_setting(f"{CONFIG_NAMESPACE}.api_key", "")
    return api_key.strip() if isinstance(api_key, str) else ""


def load_prompts() -> Dict[str, Any]:
    """Load the prompts.

    Note: Prompts are hardcoded in the codebase and are not read from the config file.
    """
    return copy.deepcopy(DEFAULT_PROMPTS)


def get_prompt(prompt_name: str = "hover_translation_prompt") -> Dict[str, Any]:
    """Get a specific prompt by name."""
    prompts = load_prompts()
    return prompts.get(prompt_name, DEFAULT_PROMPTS["hover_translation_prompt"])
