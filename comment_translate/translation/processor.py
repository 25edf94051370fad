"""
Translation Post-Processing Module

Contains the text transform applied to a raw translation before it is shown:
- Code block protection with positional placeholders
- Colon spacing normalization
- Parenthesis width selection (ASCII vs full-width)
"""

import re
from typing import List, Tuple

from comment_translate.logger import get_logger

logger = get_logger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
CODE_BLOCK_PLACEHOLDER_PATTERN = re.compile(r"\[\[CODE_BLOCK_(\d+)]]")
COLON_SPACE_PATTERN = re.compile(r":\s+")
PARENTHESIZED_PATTERN = re.compile(r"\(([^)]+)\)")
ASCII_WORDS_PATTERN = re.compile(r"[a-zA-Z\s]+", re.ASCII)

# Hiragana, katakana, CJK ideographs and the long vowel mark
_JAPANESE_CHARS = "぀-ヿ㐀-䶿一-鿿ｦ-ﾟ"
SPACE_AFTER_PAREN_PATTERN = re.compile(rf"([)）])[ \t]+(?=[{_JAPANESE_CHARS}])")
SPACE_BEFORE_PAREN_PATTERN = re.compile(rf"(?<=[{_JAPANESE_CHARS}])[ \t]+([(（])")


def protect_code_blocks(text: str) -> Tuple[str, List[str]]:
    """
    Replace fenced code blocks with [[CODE_BLOCK_<i>]] placeholders.

    Returns:
        Tuple of (text_with_placeholders, code_blocks) where code_blocks[i]
        is the block replaced by placeholder i
    """
    code_blocks: List[str] = []

    def _stash(match: re.Match) -> str:
        code_blocks.append(match.group(0))
        return f"[[CODE_BLOCK_{len(code_blocks) - 1}]]"

    protected_text = CODE_BLOCK_PATTERN.sub(_stash, text)
    if code_blocks:
        logger.debug(f"Protected {len(code_blocks)} code blocks")
    return protected_text, code_blocks


def restore_code_blocks(text: str, code_blocks: List[str]) -> str:
    """Put the recorded code blocks back in place of their placeholders."""
    if not code_blocks:
        return text

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(code_blocks):
            return code_blocks[index]
        # Not one of ours, leave the text as the model wrote it
        return match.group(0)

    return CODE_BLOCK_PLACEHOLDER_PATTERN.sub(_restore, text)


def _parenthesis_width(match: re.Match) -> str:
    content = match.group(1)
    if ASCII_WORDS_PATTERN.fullmatch(content):
        return f"({content})"
    return f"（{content}）"


def normalize_line(line: str) -> str:
    """Apply the per-line punctuation rules to a single line."""
    line = COLON_SPACE_PATTERN.sub(":", line)
    line = PARENTHESIZED_PATTERN.sub(_parenthesis_width, line)
    line = SPACE_AFTER_PAREN_PATTERN.sub(r"\1", line)
    line = SPACE_BEFORE_PAREN_PATTERN.sub(r"\1", line)
    return line


def post_process_translation(translation: str) -> str:
    """
    Clean up a raw translation for display in a hover.

    Code fences are protected before the text is split into lines so that
    colons and newlines inside them survive untouched.

    Args:
        translation: Raw text returned by the model

    Returns:
        Processed translation
    """
    logger.debug(f"Original translation before processing: {translation}")

    protected_text, code_blocks = protect_code_blocks(translation)
    lines = [normalize_line(line) for line in protected_text.split("\n")]
    processed = restore_code_blocks("\n".join(lines), code_blocks)

    logger.debug(f"Processed translation: {processed}")
    return processed
