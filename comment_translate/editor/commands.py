"""Registry of commands the UI can invoke by name."""

from typing import Any, Callable, Dict, List

from comment_translate.logger import get_logger

logger = get_logger(__name__)

COMMAND_PREFIX = "commentTranslateClaude"
OPEN_CHAT_COMMAND = f"{COMMAND_PREFIX}.openChat"
ASK_QUESTION_COMMAND = f"{COMMAND_PREFIX}.askQuestion"


class CommandRegistry:
    """Maps command names to callbacks."""

    def __init__(self):
        self._commands: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str, callback: Callable[..., Any]) -> None:
        if name in self._commands:
            logger.warning(f"Command {name} re-registered")
        self._commands[name] = callback
        logger.debug(f"Registered command {name}")

    def execute(self, name: str, *args: Any) -> Any:
        """Run a command. Raises KeyError for unknown names."""
        if name not in self._commands:
            raise KeyError(name)
        logger.debug(f"Executing command {name} with {len(args)} arguments")
        return self._commands[name](*args)

    def names(self) -> List[str]:
        return sorted(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands
