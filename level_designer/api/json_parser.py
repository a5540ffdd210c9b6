"""JSON parser utility for recovering layouts from LLM responses."""

import logging
from typing import Optional

from ..errors import EmptyLayoutError, MalformedLayoutError
from ..extractor import extract_first_layout_like, repair_truncated
from ..parsers import parse_strict, parse_tolerant
from ..sanitizer import remove_trailing_commas, sanitize
from ..schema import LayoutData
from .envelope import unwrap_envelope

logger = logging.getLogger(__name__)


class LayoutJSONParser:
    """Utility class for recovering a LayoutData from raw response text."""

    @staticmethod
    def parse(response: str) -> LayoutData:
        """
        Recover a layout from a raw response string.

        Pipeline: envelope unwrap → sanitize → balanced extraction (truncation
        repair as fallback) → strict parse; the tolerant scan runs on the
        sanitized text when the strict parse fails or yields no objects.

        Args:
            response: Raw provider payload or bare generated text

        Returns:
            LayoutData with at least one object

        Raises:
            EmptyLayoutError: If no object could be recovered
        """
        if isinstance(response, LayoutData):
            return response

        if not isinstance(response, str):
            raise EmptyLayoutError(f"Expected response text, got {type(response).__name__}")

        text = sanitize(unwrap_envelope(response))

        document = extract_first_layout_like(text)
        if document is None:
            start = max(text.find("{"), 0)
            document = remove_trailing_commas(repair_truncated(text[start:]))
            logger.debug("No balanced layout document found; trying truncation repair")

        try:
            layout = parse_strict(document)
            if layout.objects:
                return layout
            logger.warning("Strict parse produced zero objects; falling back to tolerant scan")
        except MalformedLayoutError as e:
            logger.warning(f"Strict parse failed ({e}); falling back to tolerant scan")

        layout = parse_tolerant(text)
        if not layout.objects:
            raise EmptyLayoutError("No layout objects could be recovered from the response")

        logger.info(f"Tolerant scan recovered {len(layout.objects)} objects")
        return layout

    @staticmethod
    def try_parse(response: str) -> Optional[LayoutData]:
        """Like parse(), but returns None instead of raising."""
        try:
            return LayoutJSONParser.parse(response)
        except EmptyLayoutError as e:
            logger.warning(f"Failed to recover layout: {e}")
            return None


def parse_layout(response: str) -> LayoutData:
    """Module-level shortcut for LayoutJSONParser.parse."""
    return LayoutJSONParser.parse(response)
