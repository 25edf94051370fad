"""Command execution API route."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from comment_translate import i18n
from comment_translate.logger import get_logger
from comment_translate.web.services import get_services

commands_bp = Blueprint("commands", __name__)
logger = get_logger(__name__)


@commands_bp.get("/")
def list_commands():
    return jsonify({"commands": get_services().commands.names()})


@commands_bp.post("/<name>")
def execute_command(name: str):
    """Run a registered command. Body: {"arguments": [...]}"""
    services = get_services()
    data = request.get_json(silent=True) or {}
    arguments = data.get("arguments", []) if isinstance(data, dict) else []
    if not isinstance(arguments, list):
        arguments = [arguments]

    if name not in services.commands:
        logger.warning(f"Unknown command requested: {name}")
        return jsonify({"error": i18n.get_translation("api.errors.unknown_command", services.lang, command=name)}), 404

    result = services.commands.execute(name, *arguments)
    panel_id = getattr(result, "id", None)
    return jsonify({"status": "ok", "command": name, "panel": panel_id})
