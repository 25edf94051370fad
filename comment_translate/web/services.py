"""Shared objects used by the request handlers."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

import httpx
from flask import current_app

from comment_translate import config
from comment_translate.ai.chat import ChatSession
from comment_translate.ai.service import TranslationClient
from comment_translate.editor.commands import ASK_QUESTION_COMMAND, OPEN_CHAT_COMMAND, CommandRegistry
from comment_translate.editor.hover import HoverTranslationController
from comment_translate.editor.panel import ChatPanelController

EXTENSION_KEY = "comment_translate"
MAX_PENDING_NOTIFICATIONS = 50


@dataclass
class Services:
    """Objects shared by the request handlers of one application."""

    client: TranslationClient
    session: ChatSession
    hover: HoverTranslationController
    chat: ChatPanelController
    commands: CommandRegistry
    lang: str = "ja"
    notifications: Deque[str] = field(default_factory=lambda: deque(maxlen=MAX_PENDING_NOTIFICATIONS))

    def drain_notifications(self) -> List[str]:
        messages = list(self.notifications)
        self.notifications.clear()
        return messages

    def set_language(self, lang: str) -> None:
        self.lang = lang
        self.hover.lang = lang
        self.chat.lang = lang


def get_services() -> Services:
    """Services of the application handling the current request."""
    return current_app.extensions[EXTENSION_KEY]


def build_services(
    settings: Dict[str, Any],
    transport: Optional[httpx.BaseTransport] = None,
) -> Services:
    """Wire the translation client, chat session, controllers and commands."""
    lang = settings.get("ui_language", "ja")
    notifications: Deque[str] = deque(maxlen=MAX_PENDING_NOTIFICATIONS)

    client = TranslationClient(settings=settings, transport=transport)
    session = ChatSession(settings=settings, transport=transport)
    hover = HoverTranslationController.from_settings(client, config.get_api_key, settings)
    chat = ChatPanelController(
        session,
        config.get_api_key,
        notifier=notifications.append,
        lang=lang,
    )

    commands = CommandRegistry()
    commands.register(OPEN_CHAT_COMMAND, lambda context="": chat.open_chat(context))
    commands.register(ASK_QUESTION_COMMAND, lambda context="": chat.open_chat(context))

    return Services(
        client=client,
        session=session,
        hover=hover,
        chat=chat,
        commands=commands,
        lang=lang,
        notifications=notifications,
    )
