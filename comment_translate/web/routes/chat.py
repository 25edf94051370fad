"""Chat panel API routes.

The chat page talks to its panel through these endpoints: it posts
``{command, text}`` messages and polls for the messages queued for it.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from comment_translate import i18n
from comment_translate.logger import get_logger
from comment_translate.web.services import get_services

chat_bp = Blueprint("chat", __name__)
logger = get_logger(__name__)


def _panel_state(panel):
    return {
        "panel": panel.id if panel is not None else None,
        "messages": panel.drain_messages() if panel is not None else [],
        "notifications": get_services().drain_notifications(),
    }


@chat_bp.post("/open")
def open_chat():
    """Open or reveal the chat panel. Body: {"context": str} (optional)."""
    data = request.get_json(silent=True) or {}
    context = data.get("context", "") if isinstance(data, dict) else ""
    panel = get_services().chat.open_chat(context or "")
    return jsonify({"panel": panel.id})


@chat_bp.post("/close")
def close_chat():
    panel = get_services().chat.panel
    if panel is not None:
        panel.dispose()
    return jsonify({"status": "ok"})


@chat_bp.get("/messages")
def poll_messages():
    """Drain the messages queued for the page."""
    return jsonify(_panel_state(get_services().chat.panel))


@chat_bp.post("/messages")
def post_message():
    """Deliver a message from the page to the panel. Body: {"command": str, "text": str}"""
    services = get_services()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": i18n.get_translation("api.errors.invalid_json", services.lang)}), 400
    if not data.get("command"):
        return jsonify({"error": i18n.get_translation("api.errors.field_required", services.lang, field="command")}), 400

    panel = services.chat.panel
    if panel is None:
        return jsonify({"error": i18n.get_translation("api.errors.panel_not_open", services.lang)}), 409

    panel.receive({"command": data["command"], "text": data.get("text", "")})
    return jsonify(_panel_state(services.chat.panel))


@chat_bp.get("/history")
def get_history():
    """Return the current transcript."""
    session = get_services().session
    return jsonify({"history": [turn.to_dict() for turn in session.history]})


@chat_bp.delete("/history")
def clear_history():
    get_services().session.clear()
    logger.info("Chat transcript cleared")
    return jsonify({"status": "ok"})
