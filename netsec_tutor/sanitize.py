"""Cleanup of free-text user input before it reaches the retrieval pipeline."""

import re

from netsec_tutor.config import MAX_QUESTION_LENGTH

_SCRIPT_BLOCK = re.compile(r"<\s*script.*?>.*?<\s*/\s*script\s*>", re.IGNORECASE | re.DOTALL)
_HTML_TAG = re.compile(r"<[^>]+>")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_input(text, max_length: int = MAX_QUESTION_LENGTH) -> str:
    """
    Strip markup and control characters from a user question.

    Steps: trim, truncate to `max_length`, remove <script> blocks and any
    remaining tags, collapse whitespace, drop control characters.

    Returns an empty string for non-string input.
    """
    if not text or not isinstance(text, str):
        return ""

    clean = text.strip()[:max_length]
    clean = _SCRIPT_BLOCK.sub("", clean)
    clean = _HTML_TAG.sub("", clean)
    # Newlines and tabs count as whitespace, not noise
    clean = _WHITESPACE.sub(" ", clean)
    clean = _CONTROL_CHARS.sub("", clean)
    return clean.strip()
