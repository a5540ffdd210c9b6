"""Text cleanup applied to raw model output before JSON extraction."""

import re

from .extractor import extract_first_layout_like

FENCE = "```"

_MISSING_COMMA = re.compile(r"\}\s*\{")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")

_UNESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}


def strip_code_fence(text: str) -> str:
    """Drop the opening fence line and the closing fence, keeping the interior."""
    trimmed = text.strip()
    if len(trimmed) < 2 * len(FENCE) or not (trimmed.startswith(FENCE) and trimmed.endswith(FENCE)):
        return text

    newline = trimmed.find("\n")
    if newline == -1:
        # Single line: ```json{...}```
        body = trimmed[len(FENCE):-len(FENCE)]
        brace = body.find("{")
        return body[brace:] if brace > 0 else body
    return trimmed[newline + 1:-len(FENCE)]


def unescape_string(text: str) -> str:
    """Reverse the \\" \\\\ \\n \\r \\t escapes; other sequences are kept as-is."""
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[text[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def unwrap_quoted_json(text: str) -> str:
    """Recover a document that was emitted as a JSON string literal."""
    trimmed = text.strip()
    if len(trimmed) < 2 or not (trimmed.startswith('"') and trimmed.endswith('"')):
        return text

    inner = unescape_string(trimmed[1:-1])
    document = extract_first_layout_like(inner)
    return document if document is not None else inner


def insert_missing_commas(text: str) -> str:
    return _MISSING_COMMA.sub("},{", text)


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def sanitize(raw: str) -> str:
    """
    Clean raw model output. Each step is a no-op when it does not apply:

    1. strip a surrounding code fence
    2. unwrap a quoted (string-encoded) document
    3. insert commas between adjacent objects ``}{``
    4. remove trailing commas before ``]`` / ``}``

    Never raises.
    """
    if not raw:
        return ""

    text = strip_code_fence(raw)
    text = unwrap_quoted_json(text)
    text = insert_missing_commas(text)
    text = remove_trailing_commas(text)
    return text
