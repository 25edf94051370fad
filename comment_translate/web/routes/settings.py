"""Settings management API routes."""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request

import comment_translate.config as config
from comment_translate.config import CONFIG_NAMESPACE, HOVER_MODES, LOG_MODES
from comment_translate.logger import get_logger, refresh_log_mode
from comment_translate import i18n
from comment_translate.web.services import get_services

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)


def mask_api_key(api_key: str) -> str:
    """Keep only the last four characters of a key visible."""
    if not api_key:
        return ""
    if len(api_key) <= 4:
        return "*" * len(api_key)
    return "*" * (len(api_key) - 4) + api_key[-4:]


def validate_settings(settings: Dict[str, Any]) -> Optional[str]:
    """
    Validate a partial settings update.

    Returns:
        Name of the first invalid field, or None when everything is valid
    """
    if "api_key" in settings and not isinstance(settings["api_key"], str):
        return "api_key"

    if "ui_language" in settings and settings["ui_language"] not in i18n.SUPPORTED_LANGUAGES:
        return "ui_language"

    for key in ("api_url", "anthropic_version"):
        if key in settings and (not isinstance(settings[key], str) or not settings[key].strip()):
            return key

    hover = settings.get("hover", {})
    if not isinstance(hover, dict):
        return "hover"
    if "mode" in hover and hover["mode"] not in HOVER_MODES:
        return "hover.mode"
    if "comment_prefixes" in hover:
        prefixes = hover["comment_prefixes"]
        if not isinstance(prefixes, list) or not all(isinstance(p, str) and p for p in prefixes):
            return "hover.comment_prefixes"

    for section in ("translation", "chat"):
        values = settings.get(section, {})
        if not isinstance(values, dict):
            return section
        if "model" in values and (not isinstance(values["model"], str) or not values["model"]):
            return f"{section}.model"
        if "max_tokens" in values:
            max_tokens = values["max_tokens"]
            if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
                return f"{section}.max_tokens"
        if "timeout" in values:
            timeout = values["timeout"]
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                return f"{section}.timeout"

    max_history = settings.get("chat", {}).get("max_history")
    if max_history is not None:
        if isinstance(max_history, bool) or not isinstance(max_history, int) or max_history <= 0:
            return "chat.max_history"

    return None


def _public_settings(current_config: Dict[str, Any]) -> Dict[str, Any]:
    settings = copy.deepcopy(current_config.get(CONFIG_NAMESPACE, {}))
    api_key = settings.get("api_key", "")
    settings["api_key"] = mask_api_key(api_key)
    settings["api_key_set"] = bool(api_key)
    return settings


def _apply_to_services(settings: Dict[str, Any]) -> None:
    """Push changed settings into the live client, session and controllers."""
    services = get_services()

    for key in ("api_url", "anthropic_version"):
        if key in settings:
            setattr(services.client, key, settings[key])
            setattr(services.session, key, settings[key])

    translation = settings.get("translation", {})
    if "model" in translation:
        services.client.model = translation["model"]
    if "max_tokens" in translation:
        services.client.max_tokens = translation["max_tokens"]
    if "timeout" in translation:
        services.client.timeout = float(translation["timeout"])

    chat = settings.get("chat", {})
    if "model" in chat:
        services.session.model = chat["model"]
    if "max_tokens" in chat:
        services.session.max_tokens = chat["max_tokens"]
    if "timeout" in chat:
        services.session.timeout = chat["timeout"]
    if "max_history" in chat:
        services.session.set_max_history(chat["max_history"])

    hover = settings.get("hover", {})
    if "mode" in hover:
        services.hover.mode = hover["mode"]
    if "comment_prefixes" in hover:
        services.hover.comment_prefixes = list(hover["comment_prefixes"])

    if "ui_language" in settings:
        services.set_language(settings["ui_language"])


@settings_bp.get("/")
def get_settings():
    """Return current settings with the API key masked."""
    current_config = config.load_config()
    return jsonify({
        "settings": _public_settings(current_config),
        "log_mode": current_config.get("log_mode", "off"),
        "meta": {
            "hover_modes": HOVER_MODES,
            "log_modes": LOG_MODES,
            "languages": list(i18n.SUPPORTED_LANGUAGES),
        },
    })


@settings_bp.put("/")
def update_settings():
    """Update settings. Body: {"settings": {...}, "log_mode": str}"""
    lang = get_services().lang
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": i18n.get_translation("api.errors.invalid_json", lang)}), 400

    new_settings = data.get("settings", {})
    if not isinstance(new_settings, dict):
        return jsonify({"error": i18n.get_translation("api.errors.invalid_setting", lang, field="settings")}), 400

    invalid_field = validate_settings(new_settings)
    if invalid_field:
        return jsonify({"error": i18n.get_translation("api.errors.invalid_setting", lang, field=invalid_field)}), 400

    log_mode = data.get("log_mode")
    if log_mode is not None and log_mode not in LOG_MODES:
        return jsonify({"error": i18n.get_translation("api.errors.invalid_setting", lang, field="log_mode")}), 400

    current_config = config.load_config()
    namespace = current_config.setdefault(CONFIG_NAMESPACE, {})
    for key, value in new_settings.items():
        if isinstance(value, dict) and isinstance(namespace.get(key), dict):
            namespace[key].update(value)
        else:
            namespace[key] = value
    if log_mode is not None:
        current_config["log_mode"] = log_mode

    try:
        config.save_config(current_config)
    except OSError as e:
        logger.error(f"Failed to save settings: {e}")
        return jsonify({"error": i18n.get_translation("api.errors.failed_to_save_settings", lang)}), 500

    refresh_log_mode()
    _apply_to_services(new_settings)
    logger.info("Settings updated")

    return jsonify({"settings": _public_settings(current_config), "log_mode": current_config.get("log_mode", "off")})
