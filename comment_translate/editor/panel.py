"""
Chat panel controller.

Keeps a single chat panel alive, routes its messages to the ChatSession and
pushes replies back. Messages in both directions use a ``{command, text}``
envelope:

- panel -> controller: ``sendMessage``
- controller -> panel: ``receiveMessage``, ``setContext``
"""

import threading
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from comment_translate import i18n
from comment_translate.logger import get_logger
from comment_translate.ai.chat import ChatSession
from comment_translate.ai.exceptions import TranslationError

logger = get_logger(__name__)

SEND_MESSAGE = "sendMessage"
RECEIVE_MESSAGE = "receiveMessage"
SET_CONTEXT = "setContext"

MessageHandler = Callable[[Dict[str, Any]], None]


class WebviewPanel:
    """
    In-process panel.

    Messages posted to the panel are queued until the page drains them;
    messages from the page are delivered with receive().
    """

    def __init__(self, view_type: str = "claudeChat", title: str = "Claude Chat"):
        self.id = uuid.uuid4().hex
        self.view_type = view_type
        self.title = title
        self.visible = True
        self.disposed = False
        self._outbox: Deque[Dict[str, Any]] = deque()
        self._lock = threading.Lock()
        self._message_handlers: List[MessageHandler] = []
        self._dispose_handlers: List[Callable[[], None]] = []

    def post_message(self, message: Dict[str, Any]) -> bool:
        """Queue a message for the page. Returns False once disposed."""
        if self.disposed:
            logger.debug(f"Dropping message for disposed panel {self.id}")
            return False
        with self._lock:
            self._outbox.append(dict(message))
        return True

    def drain_messages(self) -> List[Dict[str, Any]]:
        with self._lock:
            messages = list(self._outbox)
            self._outbox.clear()
        return messages

    def on_did_receive_message(self, handler: MessageHandler) -> None:
        self._message_handlers.append(handler)

    def on_did_dispose(self, handler: Callable[[], None]) -> None:
        self._dispose_handlers.append(handler)

    def receive(self, message: Dict[str, Any]) -> None:
        """Deliver a message from the page to the registered handlers."""
        if self.disposed:
            logger.debug(f"Ignoring message for disposed panel {self.id}")
            return
        for handler in list(self._message_handlers):
            handler(message)

    def reveal(self) -> None:
        self.visible = True

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.visible = False
        for handler in list(self._dispose_handlers):
            handler()


class ChatPanelController:
    """Owns the single chat panel and its message protocol."""

    def __init__(
        self,
        session: ChatSession,
        api_key_provider: Callable[[], str],
        panel_factory: Callable[[], Any] = WebviewPanel,
        notifier: Optional[Callable[[str], None]] = None,
        lang: str = "ja",
    ):
        self.session = session
        self.api_key_provider = api_key_provider
        self.panel_factory = panel_factory
        self.notifier = notifier or (lambda message: logger.warning(f"Notification: {message}"))
        self.lang = lang
        self.panel = None

    def open_chat(self, context: str = ""):
        """
        Reveal the chat panel, creating it when there is none.

        Args:
            context: Optional text pushed to the panel as a setContext message

        Returns:
            The panel
        """
        if self.panel is not None:
            self.panel.reveal()
        else:
            panel = self.panel_factory()
            panel.on_did_receive_message(self.handle_message)
            panel.on_did_dispose(self._on_panel_disposed)
            self.panel = panel
            logger.info(f"Chat panel {panel.id} created")

        # The page may have disposed the panel from a message handler
        panel = self.panel
        if context and panel is not None:
            panel.post_message({"command": SET_CONTEXT, "text": context})
        return panel

    def _on_panel_disposed(self) -> None:
        logger.info("Chat panel disposed")
        # Transcript is kept; only the panel reference goes away
        self.panel = None

    def _post(self, panel, message: Dict[str, Any]) -> None:
        if panel is not None:
            panel.post_message(message)

    def handle_message(self, message: Dict[str, Any]) -> None:
        """Route a message coming from the panel."""
        command = message.get("command") if isinstance(message, dict) else None
        if command != SEND_MESSAGE:
            logger.warning(f"Ignoring unknown panel command: {command!r}")
            return

        # Replies go to the panel that asked, even if another one is opened meanwhile
        panel = self.panel
        text = message.get("text", "")
        try:
            reply = self.session.send(text, self.api_key_provider())
        except TranslationError as e:
            self._report_failure(panel, e)
            return
        except Exception as e:
            logger.exception(f"Unexpected error while sending chat message: {e}")
            self._report_failure(panel, e)
            return

        self._post(panel, {"command": RECEIVE_MESSAGE, "text": reply})

    def _report_failure(self, panel, error: Exception) -> None:
        logger.error(f"Chat message failed: {error}")
        self.notifier(i18n.get_translation("notifications.error", self.lang, error=str(error)))
        self._post(panel, {
            "command": RECEIVE_MESSAGE,
            "text": i18n.get_translation("chat.error_prefix", self.lang, error=str(error)),
        })

