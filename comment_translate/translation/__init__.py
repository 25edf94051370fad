"""
Translation module - post-processing of model translations

This module provides:
- post_process_translation: the display clean-up applied to hover translations
- Code block protection helpers
"""

from comment_translate.translation.processor import (
    post_process_translation,
    protect_code_blocks,
    restore_code_blocks,
    normalize_line,
)
