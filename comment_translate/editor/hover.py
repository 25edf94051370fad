"""
Hover translation controller.

Takes the hover content the editor already computed for a position,
translates it and shapes the result into a hover replacement. Each call
ends in one of three states: succeeded, timed_out or failed.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional
from urllib.parse import quote

from comment_translate import i18n
from comment_translate.config import DEFAULT_COMMENT_PREFIXES, HOVER_MODES
from comment_translate.logger import get_logger
from comment_translate.ai.exceptions import TranslationError, TranslationTimeoutError
from comment_translate.ai.service import TranslationClient
from comment_translate.editor.commands import ASK_QUESTION_COMMAND

logger = get_logger(__name__)

HOVER_SUCCEEDED = "succeeded"
HOVER_TIMED_OUT = "timed_out"
HOVER_FAILED = "failed"

HOVER_SEPARATOR = "\n\n---\n\n"


@dataclass
class HoverAction:
    """Follow-up affordance attached to a translated hover."""

    command: str
    title: str
    arguments: List[Any] = field(default_factory=list)


@dataclass
class HoverResult:
    """Replacement hover content."""

    markdown: str
    state: str
    action: Optional[HoverAction] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def flatten_hover_contents(contents: Iterable[Any]) -> str:
    """
    Join rendered hover blocks into plain text.

    Blocks may be strings, mappings with a "value" key, or objects with a
    ``value`` attribute (markdown strings).
    """
    parts = []
    for content in contents or []:
        if isinstance(content, str):
            parts.append(content)
        elif isinstance(content, dict):
            parts.append(str(content.get("value", "")))
        elif hasattr(content, "value"):
            parts.append(str(content.value))
        else:
            parts.append(str(content))
    return "\n".join(parts)


def is_comment_line(line_text: str, prefixes: Iterable[str] = DEFAULT_COMMENT_PREFIXES) -> bool:
    """True when the line starts with a comment-introducing token."""
    stripped = (line_text or "").lstrip()
    return any(stripped.startswith(prefix) for prefix in prefixes if prefix)


def build_command_link(title: str, command: str, arguments: List[Any]) -> str:
    """Markdown link that runs an editor command with JSON-encoded arguments."""
    encoded_args = quote(json.dumps(arguments, ensure_ascii=False))
    return f"[{title}](command:{command}?{encoded_args})"


class HoverTranslationController:
    """Replace hovers with their Japanese translation."""

    def __init__(
        self,
        client: TranslationClient,
        api_key_provider: Callable[[], str],
        mode: str = "always",
        comment_prefixes: Optional[Iterable[str]] = None,
        lang: str = "ja",
    ):
        if mode not in HOVER_MODES:
            raise ValueError(f"Unknown hover mode: {mode!r} (expected one of {HOVER_MODES})")
        self.client = client
        self.api_key_provider = api_key_provider
        self.mode = mode
        self.comment_prefixes = list(comment_prefixes) if comment_prefixes is not None else list(DEFAULT_COMMENT_PREFIXES)
        self.lang = lang

    @classmethod
    def from_settings(
        cls,
        client: TranslationClient,
        api_key_provider: Callable[[], str],
        settings: Dict[str, Any],
    ) -> "HoverTranslationController":
        hover_settings = settings.get("hover", {})
        return cls(
            client,
            api_key_provider,
            mode=hover_settings.get("mode", "always"),
            comment_prefixes=hover_settings.get("comment_prefixes"),
            lang=settings.get("ui_language", "ja"),
        )

    def should_translate(self, original_content: str, line_text: str = "") -> bool:
        if not original_content.strip():
            return False
        if self.mode == "comments" and not is_comment_line(line_text, self.comment_prefixes):
            return False
        return True

    def provide_hover(self, contents: Iterable[Any], line_text: str = "") -> Optional[HoverResult]:
        """
        Translate the hover content for a position.

        Args:
            contents: Hover blocks the editor computed for the position
            line_text: Text of the hovered line, used by the "comments" mode

        Returns:
            HoverResult, or None when the hover should be left alone
        """
        original_content = flatten_hover_contents(contents)
        if not self.should_translate(original_content, line_text):
            return None

        logger.debug(f"Original hover content: {original_content}")

        try:
            translated = self.client.translate(original_content, self.api_key_provider())
        except TranslationTimeoutError:
            return HoverResult(markdown=i18n.get_translation("hover.timeout", self.lang), state=HOVER_TIMED_OUT)
        except TranslationError as e:
            logger.error(f"Translation failed: {e}")
            message = i18n.get_translation("hover.failed", self.lang, error=str(e))
            return HoverResult(markdown=message, state=HOVER_FAILED)
        except Exception as e:
            logger.exception(f"Unexpected error while translating hover: {e}")
            message = i18n.get_translation("hover.failed", self.lang, error=str(e))
            return HoverResult(markdown=message, state=HOVER_FAILED)

        logger.debug(f"Translated hover content: {translated}")

        title = i18n.get_translation("hover.ask_question", self.lang)
        arguments = [original_content]
        markdown = translated + HOVER_SEPARATOR + build_command_link(title, ASK_QUESTION_COMMAND, arguments)
        return HoverResult(
            markdown=markdown,
            state=HOVER_SUCCEEDED,
            action=HoverAction(command=ASK_QUESTION_COMMAND, title=title, arguments=arguments),
        )
