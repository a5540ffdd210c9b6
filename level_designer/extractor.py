"""Balanced extraction of layout documents from noisy text, and truncation repair."""

import json
from typing import Optional

from .constants import LAYOUT_MARKER_KEYS
from .scanner import find_matching_close, scan_to_end


def looks_like_layout(candidate: str) -> bool:
    """True if candidate decodes to a JSON object carrying a layout marker key."""
    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        return False
    return isinstance(data, dict) and any(key in data for key in LAYOUT_MARKER_KEYS)


def extract_first_layout_like(text: str) -> Optional[str]:
    """
    Return the first brace-balanced object in text that looks like a layout.

    Scanning starts at each top-level '{', so noise before a document
    (stray quotes included) never disturbs string tracking. Later
    duplicates are ignored.
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        end = find_matching_close(text, start)
        if end is None:
            return None
        candidate = text[start:end + 1]
        if looks_like_layout(candidate):
            return candidate
        start = text.find("{", end + 1)
    return None


def repair_truncated(text: str) -> str:
    """
    Close every container left open at the end of a cut-off document.

    Scans from the first '{' and appends the missing closers (and a closing
    quote when the text stops inside a string). Never removes characters.
    """
    start = text.find("{")
    if start == -1:
        return text

    scanner = scan_to_end(text, start)
    suffix = '"' if scanner.in_string else ""
    return text + suffix + scanner.missing_closers()
