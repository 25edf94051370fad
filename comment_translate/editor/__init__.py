"""
Editor-facing controllers.

This package provides:
- HoverTranslationController: replaces hovers with their translation
- ChatPanelController: the single chat panel and its message protocol
- CommandRegistry: commands invokable from UI actions
"""

from comment_translate.editor.commands import (
    CommandRegistry,
    OPEN_CHAT_COMMAND,
    ASK_QUESTION_COMMAND,
)
from comment_translate.editor.hover import (
    HoverAction,
    HoverResult,
    HoverTranslationController,
    flatten_hover_contents,
    is_comment_line,
)
from comment_translate.editor.panel import ChatPanelController, WebviewPanel
