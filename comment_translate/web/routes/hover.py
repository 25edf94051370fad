"""Hover translation API route."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from comment_translate import i18n
from comment_translate.logger import get_logger
from comment_translate.web.services import get_services

hover_bp = Blueprint("hover", __name__)
logger = get_logger(__name__)


@hover_bp.post("/")
def translate_hover():
    """
    Translate hover content for a position.

    Body: {"contents": [str | {"value": str}, ...], "line_text": str}
    Returns {"hover": {...}} or {"hover": null} when the hover is left alone.
    """
    services = get_services()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": i18n.get_translation("api.errors.invalid_json", services.lang)}), 400

    contents = data.get("contents")
    if contents is None:
        return jsonify({"error": i18n.get_translation("api.errors.field_required", services.lang, field="contents")}), 400
    if isinstance(contents, str):
        contents = [contents]

    result = services.hover.provide_hover(contents, data.get("line_text", ""))
    if result is None:
        logger.debug("Hover left untouched")
        return jsonify({"hover": None})
    return jsonify({"hover": result.to_dict()})
