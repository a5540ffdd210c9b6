"""Strict and tolerant decoders from layout text to LayoutData."""

import json
import logging
import re
from typing import Any, List, Optional

from .constants import MAX_ID_TO_POSITION_SPAN, SCHEMA_VERSION
from .errors import MalformedLayoutError
from .schema import LayoutData, LayoutObject, Vector3

logger = logging.getLogger(__name__)

NUMBER = r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"

_GAME_TYPE = re.compile(r'"gameType"\s*:\s*"([^"]*)"')
_THEME = re.compile(r'"theme"\s*:\s*"([^"]*)"')
_OBJECT = re.compile(
    r'\{\s*"id"\s*:\s*"(?P<id>(?:[^"\\]|\\.)*)"'
    r'(?P<between>.{0,%d}?)'
    r'"position"\s*:\s*\{(?P<position>[^{}]*)\}' % MAX_ID_TO_POSITION_SPAN,
    re.DOTALL,
)
_AXIS = {axis: re.compile(r'"%s"\s*:\s*(%s)' % (axis, NUMBER)) for axis in "xyz"}
_ROTATION = re.compile(r'"(?:rotation|rotationEuler)"\s*:\s*\{([^{}]*)\}')
_SCALE = re.compile(r'"scale"\s*:\s*\{([^{}]*)\}')


# ---------------------------------------------------------------------------
# Strict
# ---------------------------------------------------------------------------

def _decode_vector(value: Any, field_name: str, index: int) -> Vector3:
    """Decode {"x","y","z"} or [x, y, z]; missing axes default to 0."""
    try:
        if isinstance(value, dict):
            return tuple(float(value.get(axis, 0.0)) for axis in "xyz")
        if isinstance(value, (list, tuple)) and len(value) == 3:
            return tuple(float(v) for v in value)
    except (TypeError, ValueError) as e:
        raise MalformedLayoutError(f"Object {index}: '{field_name}' is not numeric: {e}")
    raise MalformedLayoutError(f"Object {index}: '{field_name}' must be an object or a 3-element list")


def _decode_object(obj_data: Any, index: int) -> Optional[LayoutObject]:
    if not isinstance(obj_data, dict):
        raise MalformedLayoutError(f"Object {index}: expected an object, got {type(obj_data).__name__}")

    object_id = obj_data.get("id")
    if not isinstance(object_id, str) or not object_id.strip():
        logger.warning(f"Object {index}: dropping entry with empty id")
        return None

    position = _decode_vector(obj_data.get("position", (0.0, 0.0, 0.0)), "position", index)
    rotation_data = obj_data.get("rotation", obj_data.get("rotationEuler"))
    scale_data = obj_data.get("scale")

    return LayoutObject(
        id=object_id,
        position=position,
        rotation=_decode_vector(rotation_data, "rotation", index) if rotation_data is not None else None,
        scale=_decode_vector(scale_data, "scale", index) if scale_data is not None else None,
    )


def layout_from_dict(data: Any) -> LayoutData:
    """Build LayoutData from a decoded document. Raises MalformedLayoutError."""
    if not isinstance(data, dict):
        raise MalformedLayoutError("Layout root must be a JSON object")

    if not isinstance(data.get("objects"), list):
        raise MalformedLayoutError("Missing required field 'objects' (list)")

    objects: List[LayoutObject] = []
    for i, obj_data in enumerate(data["objects"]):
        obj = _decode_object(obj_data, i)
        if obj is not None:
            objects.append(obj)

    return LayoutData(
        game_type=str(data.get("gameType") or ""),
        theme=str(data.get("theme") or ""),
        objects=objects,
        schema_version=str(data.get("schemaVersion") or SCHEMA_VERSION),
    )


def parse_strict(text: str) -> LayoutData:
    """
    Decode a well-formed layout document.

    Returns a possibly empty layout; raises MalformedLayoutError on syntax
    errors or when there is no decodable 'objects' array.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedLayoutError(f"Invalid JSON: {e}")
    return layout_from_dict(data)


# ---------------------------------------------------------------------------
# Tolerant
# ---------------------------------------------------------------------------

def _scan_triple(body: str, require_xz: bool = True) -> Optional[Vector3]:
    """Pull x/y/z numbers out of an object body in any key order."""
    values = {}
    for axis, pattern in _AXIS.items():
        match = pattern.search(body)
        if match:
            values[axis] = float(match.group(1))
    if require_xz and not ("x" in values and "z" in values):
        return None
    if not values:
        return None
    return (values.get("x", 0.0), values.get("y", 0.0), values.get("z", 0.0))


def _first_group(pattern: re.Pattern, text: str) -> str:
    match = pattern.search(text)
    return match.group(1) if match else ""


def parse_tolerant(text: str) -> LayoutData:
    """
    Scan-based fallback for text that is not valid JSON. Never raises.

    Picks up every ``{"id": ..., ..., "position": {x, y, z}}`` shape with a
    bounded gap between id and position. Rotation and scale are read from
    the region between this object's id and the next match.
    """
    if not text:
        return LayoutData()

    matches = list(_OBJECT.finditer(text))
    objects: List[LayoutObject] = []

    for n, match in enumerate(matches):
        object_id = match.group("id").strip()
        if not object_id:
            continue

        position = _scan_triple(match.group("position"))
        if position is None:
            continue

        region_end = matches[n + 1].start() if n + 1 < len(matches) else len(text)
        region = text[match.start():region_end]

        rotation_match = _ROTATION.search(region)
        scale_match = _SCALE.search(region)

        objects.append(LayoutObject(
            id=object_id,
            position=position,
            rotation=_scan_triple(rotation_match.group(1), require_xz=False) if rotation_match else None,
            scale=_scan_triple(scale_match.group(1), require_xz=False) if scale_match else None,
        ))

    return LayoutData(
        game_type=_first_group(_GAME_TYPE, text),
        theme=_first_group(_THEME, text),
        objects=objects,
    )
