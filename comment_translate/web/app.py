"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from flask import Flask, jsonify, render_template

from comment_translate import config, i18n
from comment_translate.logger import get_logger

from .services import EXTENSION_KEY, build_services, get_services
from .routes.hover import hover_bp
from .routes.chat import chat_bp
from .routes.commands import commands_bp
from .routes.settings import settings_bp

logger = get_logger(__name__)


def build_app(
    settings: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, template_folder="templates", static_folder=None)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False

    if settings is None:
        settings = config.load_config().get(config.CONFIG_NAMESPACE, {})
    app.extensions[EXTENSION_KEY] = build_services(settings, transport=transport)

    @app.context_processor
    def inject_i18n():
        """Inject the message lookup into Jinja2 templates."""
        lang = get_services().lang

        def t(key, **kwargs):
            """Message lookup for templates."""
            return i18n.get_translation(key, lang, **kwargs)

        return {'t': t, 'current_lang': lang}

    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(hover_bp, url_prefix="/api/hover")
    app.register_blueprint(chat_bp, url_prefix="/api/chat")
    app.register_blueprint(commands_bp, url_prefix="/api/commands")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_default_routes(app: Flask) -> None:
    """Register default health and chat page routes."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.get("/")
    def chat_page():
        return render_template("chat.html")

    @app.errorhandler(500)
    def internal_error(e):
        """Handle 500 errors with a JSON body."""
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "Internal server error"}), 500
