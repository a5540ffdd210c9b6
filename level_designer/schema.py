"""Data structures for layouts, catalogs, grids and game-type profiles."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Any
import numpy as np

from .constants import SCHEMA_VERSION

Vector3 = Tuple[float, float, float]
Cell = Tuple[int, int]


def vector_to_dict(vec: Vector3) -> Dict[str, float]:
    return {"x": vec[0], "y": vec[1], "z": vec[2]}


@dataclass
class LayoutObject:
    """Placed catalog object. Dedup identity is (id, position)."""
    id: str
    position: Vector3
    rotation: Optional[Vector3] = None  # Euler angles in degrees
    scale: Optional[Vector3] = None

    def to_dict(self) -> dict:
        result = {"id": self.id, "position": vector_to_dict(self.position)}
        if self.rotation is not None:
            result["rotation"] = vector_to_dict(self.rotation)
        if self.scale is not None:
            result["scale"] = vector_to_dict(self.scale)
        return result


@dataclass
class LayoutData:
    """One generated level: metadata plus objects in insertion order."""
    game_type: str = ""
    theme: str = ""
    objects: List[LayoutObject] = field(default_factory=list)
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> dict:
        return {
            "schemaVersion": self.schema_version,
            "gameType": self.game_type,
            "theme": self.theme,
            "objects": [obj.to_dict() for obj in self.objects],
        }


@dataclass
class CatalogEntry:
    """Catalog item. max_per_level of None means unbounded."""
    id: str
    max_per_level: Optional[int] = None
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "maxPerLevel": self.max_per_level, "tags": list(self.tags)}

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogEntry":
        cap = data.get("maxPerLevel")
        if cap is not None:
            cap = int(cap)
            if cap <= 0:
                cap = None
        return cls(id=str(data["id"]), max_per_level=cap, tags=[str(t) for t in data.get("tags") or []])


class Catalog:
    """Case-insensitive registry of catalog entries."""

    def __init__(self, entries: Optional[List[CatalogEntry]] = None):
        self.entries: List[CatalogEntry] = [e for e in (entries or []) if e.id and e.id.strip()]
        self._by_key: Dict[str, CatalogEntry] = {}
        for entry in self.entries:
            self._by_key.setdefault(entry.id.lower(), entry)

    def get(self, object_id: Optional[str]) -> Optional[CatalogEntry]:
        if not object_id:
            return None
        return self._by_key.get(object_id.lower())

    def is_allowed(self, object_id: Optional[str]) -> bool:
        return self.get(object_id) is not None

    def cap_for(self, object_id: Optional[str]) -> Optional[int]:
        entry = self.get(object_id)
        return entry.max_per_level if entry else None

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_list(self) -> List[dict]:
        return [e.to_dict() for e in self.entries]

    @classmethod
    def from_list(cls, items: List[dict]) -> "Catalog":
        return cls([CatalogEntry.from_dict(item) for item in items or []])


class CoordinateSpace(str, Enum):
    WORLD = "world"
    GRID = "grid"


class GridOriginMode(str, Enum):
    BOTTOM_LEFT = "bottomLeft"
    CENTER = "center"


@dataclass
class GridSpec:
    """
    Rectangular grid. Cells are addressed (x, z) with x in [0, width-1] and
    z in [0, height-1]; layout positions on a grid are in cell units.
    """
    width: int = 12
    height: int = 8
    cell_size: float = 2.0
    origin: Vector3 = (0.0, 0.0, 0.0)
    origin_mode: GridOriginMode = GridOriginMode.BOTTOM_LEFT

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Grid size must be positive, got {self.width}x{self.height}")
        if self.cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {self.cell_size}")
        self.origin_mode = GridOriginMode(self.origin_mode)

    def clamp_cell(self, x: int, z: int) -> Cell:
        return (int(np.clip(x, 0, self.width - 1)), int(np.clip(z, 0, self.height - 1)))

    def cell_of(self, position: Vector3) -> Cell:
        """Round a cell-unit position to the nearest cell, clamped into the grid."""
        return self.clamp_cell(int(np.floor(position[0] + 0.5)), int(np.floor(position[2] + 0.5)))

    def contains(self, cell: Cell) -> bool:
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height

    def is_edge(self, cell: Cell) -> bool:
        x, z = cell
        return x == 0 or z == 0 or x == self.width - 1 or z == self.height - 1

    def _corner(self) -> np.ndarray:
        origin = np.asarray(self.origin, dtype=float)
        if self.origin_mode == GridOriginMode.CENTER:
            origin = origin - np.array([self.width * self.cell_size / 2, 0.0, self.height * self.cell_size / 2])
        return origin

    def cell_to_world(self, cell: Cell, y: float = 0.0) -> Vector3:
        """World-space center of a cell."""
        corner = self._corner()
        return (
            float(corner[0] + (cell[0] + 0.5) * self.cell_size),
            float(corner[1] + y),
            float(corner[2] + (cell[1] + 0.5) * self.cell_size),
        )

    def world_to_cell(self, point: Vector3) -> Cell:
        """Inverse of cell_to_world, for scene builders mapping world points back onto the grid."""
        corner = self._corner()
        x = int(np.floor((point[0] - corner[0]) / self.cell_size))
        z = int(np.floor((point[2] - corner[2]) / self.cell_size))
        return self.clamp_cell(x, z)

    def to_dict(self) -> dict:
        return {
            "gridWidth": self.width,
            "gridHeight": self.height,
            "cellSize": self.cell_size,
            "gridOrigin": list(self.origin),
            "gridOriginMode": self.origin_mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GridSpec":
        return cls(
            width=int(data.get("gridWidth", 12)),
            height=int(data.get("gridHeight", 8)),
            cell_size=float(data.get("cellSize", 2.0)),
            origin=tuple(float(v) for v in data.get("gridOrigin", (0.0, 0.0, 0.0))),
            origin_mode=data.get("gridOriginMode", GridOriginMode.BOTTOM_LEFT.value),
        )


@dataclass
class WorldSettings:
    """Placement rules for free-form (world coordinate) layouts."""
    world_scale: float = 1.0
    arena_size: Tuple[float, float] = (40.0, 40.0)
    auto_fit_to_arena: bool = True
    fit_margin: float = 0.9
    clamp_to_arena: bool = True
    clamp_padding: float = 0.5
    snap_to_step: bool = True
    step: float = 2.0

    def to_dict(self) -> dict:
        return {
            "worldScale": self.world_scale,
            "arenaSize": list(self.arena_size),
            "autoFitToArena": self.auto_fit_to_arena,
            "fitMargin": self.fit_margin,
            "clampToArena": self.clamp_to_arena,
            "clampPadding": self.clamp_padding,
            "snapToStep": self.snap_to_step,
            "step": self.step,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorldSettings":
        defaults = cls()
        return cls(
            world_scale=float(data.get("worldScale", defaults.world_scale)),
            arena_size=tuple(float(v) for v in data.get("arenaSize", defaults.arena_size)),
            auto_fit_to_arena=bool(data.get("autoFitToArena", defaults.auto_fit_to_arena)),
            fit_margin=float(data.get("fitMargin", defaults.fit_margin)),
            clamp_to_arena=bool(data.get("clampToArena", defaults.clamp_to_arena)),
            clamp_padding=float(data.get("clampPadding", defaults.clamp_padding)),
            snap_to_step=bool(data.get("snapToStep", defaults.snap_to_step)),
            step=float(data.get("step", defaults.step)),
        )


@dataclass
class GameTypeProfile:
    """Everything the pipeline knows about one game type."""
    game_type_id: str = "arena-3d"
    coordinate_space: CoordinateSpace = CoordinateSpace.WORLD
    catalog: Catalog = field(default_factory=Catalog)
    world_description: str = ""
    allowed_themes: List[str] = field(default_factory=list)
    grid: GridSpec = field(default_factory=GridSpec)
    world: WorldSettings = field(default_factory=WorldSettings)

    def __post_init__(self):
        self.coordinate_space = CoordinateSpace(self.coordinate_space)

    @property
    def is_grid(self) -> bool:
        return self.coordinate_space == CoordinateSpace.GRID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameTypeId": self.game_type_id,
            "coordinateSpace": self.coordinate_space.value,
            "worldDescription": self.world_description,
            "allowedThemes": list(self.allowed_themes),
            "catalog": self.catalog.to_list(),
            "grid": self.grid.to_dict(),
            "world": self.world.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameTypeProfile":
        return cls(
            game_type_id=str(data.get("gameTypeId", "arena-3d")),
            coordinate_space=data.get("coordinateSpace", CoordinateSpace.WORLD.value),
            catalog=Catalog.from_list(data.get("catalog") or []),
            world_description=data.get("worldDescription") or "",
            allowed_themes=list(data.get("allowedThemes") or []),
            grid=GridSpec.from_dict(data.get("grid") or {}),
            world=WorldSettings.from_dict(data.get("world") or {}),
        )
