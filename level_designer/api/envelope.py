"""Unwrap provider response envelopes down to the generated text."""

import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

_ANCHORS = ('"content":', '"output_text":', '"response":')


def _content_from_payload(payload: Any) -> Optional[str]:
    """Generated text from a decoded provider payload, if it is one."""
    if not isinstance(payload, dict):
        return None

    # Chat completions: {"choices": [{"message": {"content": "..."}}]}
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message") or {}
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(first.get("text"), str):
            return first["text"]

    # Ollama chat: {"message": {"content": "..."}}
    message = payload.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]

    # Responses API convenience field
    if isinstance(payload.get("output_text"), str):
        return payload["output_text"]

    # Responses API: {"output": [{"content": [{"type": "output_text", "text": "..."}]}]}
    output = payload.get("output")
    if isinstance(output, list):
        parts = []
        for item in output:
            for part in (item.get("content") or []) if isinstance(item, dict) else []:
                if isinstance(part, dict) and isinstance(part.get("text"), str):
                    parts.append(part["text"])
        if parts:
            return "".join(parts)

    # Ollama generate: {"model": ..., "response": "..."}
    if isinstance(payload.get("response"), str) and "model" in payload:
        return payload["response"]

    return None


def _content_from_anchor(raw: str) -> Optional[str]:
    """Decode the string literal that follows a known content key."""
    decoder = json.JSONDecoder()
    for anchor in _ANCHORS:
        i = raw.find(anchor)
        if i < 0:
            continue
        i += len(anchor)
        while i < len(raw) and raw[i].isspace():
            i += 1
        if i >= len(raw) or raw[i] != '"':
            continue
        try:
            value, _ = decoder.raw_decode(raw, i)
        except json.JSONDecodeError:
            continue
        if isinstance(value, str):
            return value
    return None


def unwrap_envelope(raw: str) -> str:
    """
    Return the generated text inside a provider payload, or raw unchanged.

    A bare layout document has none of the envelope shapes and passes
    through untouched.
    """
    if not raw:
        return ""

    stripped = raw.strip()
    if not stripped.startswith("{"):
        return raw

    try:
        payload = json.loads(stripped)
    except json.JSONDecodeError:
        payload = None

    if payload is not None:
        content = _content_from_payload(payload)
        return content if content is not None else raw

    # Payload damaged but it may still carry an intact content string
    content = _content_from_anchor(stripped)
    if content is not None:
        logger.warning("Provider payload is not valid JSON; recovered content by anchor scan")
        return content
    return raw
