"""
Messages API request and reply types.

Declares the expected reply shape once and decodes raw JSON into typed
dataclasses. Validation is structural only: fields must be present with
the right container shape, leaf value types are not checked.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

REQUIRED_FIELDS = ("id", "type", "role", "content", "model", "stop_reason", "stop_sequence", "usage")
REQUIRED_USAGE_FIELDS = ("input_tokens", "output_tokens")
ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ChatTurn:
    """One side of a conversation exchange."""

    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown chat role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class TranslationRequest:
    """Body of a Messages API request."""

    model: str
    max_tokens: int
    messages: Sequence[ChatTurn]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [turn.to_dict() for turn in self.messages],
        }


@dataclass(frozen=True)
class ContentBlock:
    type: str
    text: str


@dataclass(frozen=True)
class Usage:
    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class ApiReply:
    """A decoded Messages API reply."""

    id: str
    type: str
    role: str
    content: List[ContentBlock]
    model: str
    stop_reason: Optional[str]
    stop_sequence: Optional[str]
    usage: Usage

    @property
    def text(self) -> str:
        """Text of the first content block, the payload used downstream."""
        return self.content[0].text


def validate_api_reply(raw: Any) -> Tuple[Optional[ApiReply], Optional[str]]:
    """
    Check a decoded API body against the reply shape.

    Args:
        raw: Value produced by decoding the JSON response body

    Returns:
        Tuple of (reply, error_reason); exactly one of them is None
    """
    if not isinstance(raw, dict):
        return None, "not_an_object"

    for field_name in REQUIRED_FIELDS:
        if field_name not in raw:
            return None, f"missing_field:{field_name}"

    content = raw["content"]
    if not isinstance(content, list):
        return None, "content_not_a_list"
    if not content:
        return None, "content_empty"
    if not isinstance(content[0], dict) or "text" not in content[0]:
        return None, "content_missing_text"

    usage = raw["usage"]
    if not isinstance(usage, dict):
        return None, "usage_not_an_object"
    for field_name in REQUIRED_USAGE_FIELDS:
        if field_name not in usage:
            return None, f"usage_missing_field:{field_name}"

    blocks = [
        ContentBlock(type=block.get("type"), text=block.get("text"))
        for block in content
        if isinstance(block, dict)
    ]

    reply = ApiReply(
        id=raw["id"],
        type=raw["type"],
        role=raw["role"],
        content=blocks,
        model=raw["model"],
        stop_reason=raw["stop_reason"],
        stop_sequence=raw["stop_sequence"],
        usage=Usage(input_tokens=usage["input_tokens"], output_tokens=usage["output_tokens"]),
    )
    return reply, None


def is_valid_api_reply(raw: Any) -> bool:
    """Predicate form of validate_api_reply()."""
    reply, _ = validate_api_reply(raw)
    return reply is not None
