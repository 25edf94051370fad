"""Web host package: serves the hover endpoint and the chat panel."""

from typing import Any, Dict, Optional

import httpx
from flask import Flask


def create_app(
    settings: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> Flask:
    """Application factory for the web interface."""
    from .app import build_app  # Import here to avoid circular imports

    return build_app(settings=settings, transport=transport)


__all__ = ["create_app"]
