"""Route blueprints for the web application."""

from .hover import hover_bp
from .chat import chat_bp
from .commands import commands_bp
from .settings import settings_bp

__all__ = [
    "hover_bp",
    "chat_bp",
    "commands_bp",
    "settings_bp",
]
