"""Constants for layout recovery and repair: role vocabulary, caps, wire keys."""

from typing import Dict, Tuple

SCHEMA_VERSION: str = "1.0.0"

# Top-level keys that mark a JSON object as a layout document
LAYOUT_MARKER_KEYS: Tuple[str, ...] = ("objects", "gameType")

# Role vocabulary. Tags are matched exactly (case-insensitive) against catalog
# entry tags; keywords are matched as substrings of the object id.
# Dict order is the classification priority.
ROLE_TAGS: Dict[str, Tuple[str, ...]] = {
    "spawner": ("spawner", "enemyspawner", "spawn"),
    "base": ("base", "core", "goal"),
    "path": ("path", "tile", "pathtile"),
    "slot": ("towerslot", "tower", "slot"),
    "decoration": ("decoration", "decor", "prop"),
}

ROLE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "spawner": ("spawner", "spawn"),
    "base": ("base", "core", "goal"),
    "path": ("path", "tile"),
    "slot": ("tower", "slot"),
    "decoration": ("decor", "prop"),
}

# Default cap for decoration groups whose catalog entry sets none
DEFAULT_DECORATION_CAP: int = 3

# Slot scoring: penalty for a slot that does not touch the path
NOT_ADJACENT_PENALTY: float = 1000.0

# BFS neighbor order (+x, -x, +z, -z)
GRID_NEIGHBORS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))

# Tolerant parser: max characters between an object's id and its position
MAX_ID_TO_POSITION_SPAN: int = 400

# Fake client canned response
FAKE_LAYOUT: Dict = {
    "schemaVersion": SCHEMA_VERSION,
    "gameType": "arena-3d",
    "theme": "desert",
    "objects": [
        {"id": "EnemySpawner.Basic", "position": {"x": 2, "y": 0, "z": 5}},
        {"id": "Pickup.HealthSmall", "position": {"x": 0, "y": 0, "z": -3}},
        {"id": "Cover.CrateSmall", "position": {"x": -4, "y": 0, "z": 2}},
    ],
}
