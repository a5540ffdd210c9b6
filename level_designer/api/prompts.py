"""Prompt construction for layout generation."""

import json
from typing import Any, Dict, Optional

from ..schema import GameTypeProfile

LAYOUT_SCHEMA_HINT = """{
  "type": "object",
  "required": ["schemaVersion", "gameType", "objects"],
  "properties": {
    "schemaVersion": {"type": "string"},
    "gameType": {"type": "string"},
    "theme": {"type": "string"},
    "objects": {
      "type": "array",
      "items": {
        "type": "object",
        "required": ["id", "position"],
        "properties": {
          "id": {"type": "string"},
          "position": {"$ref": "#/definitions/vec3"},
          "rotation": {"$ref": "#/definitions/vec3"},
          "scale": {"$ref": "#/definitions/vec3"}
        }
      }
    }
  },
  "definitions": {
    "vec3": {
      "type": "object",
      "required": ["x", "y", "z"],
      "properties": {"x": {"type": "number"}, "y": {"type": "number"}, "z": {"type": "number"}}
    }
  }
}"""


def build_capabilities(profile: GameTypeProfile) -> Dict[str, Any]:
    """Describe what the model may place for this profile."""
    return {
        "gameType": profile.game_type_id or "",
        "allowedThemes": list(profile.allowed_themes),
        "worldDescription": profile.world_description,
        "coordinateSpace": profile.coordinate_space.value,
        "worldScale": profile.world.world_scale,
        "cellSize": profile.grid.cell_size,
        "gridWidth": profile.grid.width,
        "gridHeight": profile.grid.height,
        "objects": [
            {"id": e.id, "maxPerLevel": e.max_per_level, "tags": list(e.tags)}
            for e in profile.catalog
        ],
    }


def build_system_message(schema_json: Optional[str] = None, hint: str = "") -> str:
    lines = [
        "You generate level layouts for a game level editor.",
        "Output requirements:",
        "- Return ONLY a single JSON object. No prose, no markdown, no code fences.",
        "- The JSON MUST validate against the JSON Schema provided below.",
        "- Use ONLY object IDs present in the provided catalog.",
        "- Do NOT invent new fields or properties.",
        "- Units: meters. Axis: Y is up.",
    ]
    if hint:
        lines.append(hint.strip())
    lines += ["", "JSON Schema:", schema_json if schema_json and schema_json.strip() else "{}"]
    return "\n".join(lines)


def build_user_message(user_prompt: str, profile: GameTypeProfile) -> str:
    capabilities = json.dumps(build_capabilities(profile), indent=2)
    lines = [
        "Catalog and constraints (capabilities):",
        capabilities,
        "",
        "User request:",
        user_prompt or "",
        "",
        "Important:",
        "- gameType must equal capabilities.gameType.",
        '- theme must be one of capabilities.allowedThemes; if none fits, use "default".',
        "- Every object must include:",
        "  - id  (must exist in catalog)",
        "  - position { x, y, z }",
        "- Respect maxPerLevel for each id.",
    ]
    if profile.is_grid:
        lines += [
            f"- Positions are integer grid cells: x in [0, {profile.grid.width - 1}], "
            f"z in [0, {profile.grid.height - 1}], y = 0.",
            "- Place one spawner and one base on the grid edge, path tiles connecting them, "
            "and tower slots next to the path.",
        ]
    lines += ["", "Return only the JSON object; do not wrap it in any extra characters."]
    return "\n".join(lines)
