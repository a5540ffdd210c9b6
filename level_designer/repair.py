"""
Grid layout repair: turn an arbitrary object set into a valid path layout.

Core algorithm:
1. Snap every object into the grid; spawner and goal onto the nearest edge
2. BFS a path between them; bend it through two waypoints if it is straight
3. Re-emit path objects along the path
4. Move slots next to the path, off occupied cells
5. Dedup, then cap slots and decorations by relevance and resettle slots
"""

import logging
from collections import deque
from dataclasses import replace
from typing import Dict, FrozenSet, List, Optional, Set

import numpy as np

from .constants import DEFAULT_DECORATION_CAP, GRID_NEIGHBORS, NOT_ADJACENT_PENALTY
from .pruner import distance_to_nearest, prune_objects
from .roles import Role, classify_role, find_role_id
from .schema import Catalog, Cell, GridSpec, LayoutData, LayoutObject

logger = logging.getLogger(__name__)


class GridPathRepairer:
    """
    Rewrites a grid layout so that:
    - spawner and goal sit on the grid boundary
    - path objects form one orthogonally connected chain between them
    - every slot occupies its own free cell, next to the path when possible
    - no (id, cell) pair appears twice and slot/decoration caps hold
    - every object sits on a cell inside the grid

    Never raises; every search has a fallback. Running it on its own output
    changes nothing.
    """

    def __init__(
        self,
        grid: GridSpec,
        catalog: Optional[Catalog] = None,
        decoration_cap: int = DEFAULT_DECORATION_CAP
    ):
        self.grid = grid
        self.catalog = catalog if catalog is not None else Catalog()
        self.decoration_cap = decoration_cap
        self.path: List[Cell] = []
        self._roles: Dict[str, Role] = {}

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def repair(self, layout: LayoutData) -> LayoutData:
        """Repair layout in place (its object list is replaced) and return it."""
        self.path = []
        if layout is None or not layout.objects:
            return layout

        # Every object lands on a grid cell; dedup keys on the same cell
        objects = [self._moved(o, self.grid.cell_of(o.position)) for o in layout.objects]
        endpoints: Set[Cell] = set()

        spawner = next((o for o in objects if self._role(o) == Role.SPAWNER), None)
        goal = next((o for o in objects if self._role(o) == Role.BASE), None)

        if spawner is not None and goal is not None:
            start = self.clamp_to_edge(self.grid.cell_of(spawner.position))
            end = self.clamp_to_edge(self.grid.cell_of(goal.position))
            objects = [self._moved(o, start) if o is spawner else self._moved(o, end) if o is goal else o
                       for o in objects]
            endpoints = {start, end}

            path = self.find_path(start, end)
            if self.is_straight(path):
                path = self.curved_path(start, end)
            self.path = path
            path_cells = [c for c in path if c not in endpoints]

            path_id = find_role_id(Role.PATH, [o.id for o in layout.objects], self.catalog)
            objects = [o for o in objects if self._role(o) != Role.PATH]
            if path_id is not None:
                objects.extend(LayoutObject(id=path_id, position=(float(x), 0.0, float(z))) for x, z in path_cells)
            else:
                logger.warning("No path id in layout or catalog; path cells are not emitted")
        else:
            logger.warning("Layout has no spawner/goal pair; skipping path construction")
            path_cells = [self.grid.cell_of(o.position) for o in objects if self._role(o) == Role.PATH]

        path_set = set(path_cells)
        objects = self._relocate_slots(objects, path_set | endpoints, path_set)
        objects = self._dedupe(objects)
        objects = self._prune_slots_and_decorations(objects, path_set)
        # Pruned slots free path-adjacent cells; settle the survivors again.
        # Relocation is a no-op on its own output, so this is a fixed point.
        objects = self._relocate_slots(objects, path_set | endpoints, path_set)
        objects = self._dedupe(objects)

        layout.objects = objects
        return layout

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def clamp_to_edge(self, cell: Cell) -> Cell:
        """Snap to the nearest edge; ties resolve left, right, bottom, top."""
        x, z = self.grid.clamp_cell(*cell)
        right, top = self.grid.width - 1, self.grid.height - 1
        candidates = [
            (x, (0, z)),
            (right - x, (right, z)),
            (z, (x, 0)),
            (top - z, (x, top)),
        ]
        # min() keeps the first of equal distances
        return min(candidates, key=lambda c: c[0])[1]

    def find_path(self, start: Cell, goal: Cell, blocked: FrozenSet[Cell] = frozenset()) -> List[Cell]:
        """
        Shortest 4-connected path via BFS (neighbor order +x, -x, +z, -z).

        Falls back to [start, goal] when goal is unreachable.
        """
        if start == goal:
            return [start]

        previous: Dict[Cell, Optional[Cell]] = {start: None}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            if cell == goal:
                break
            for dx, dz in GRID_NEIGHBORS:
                nxt = (cell[0] + dx, cell[1] + dz)
                if nxt in previous or nxt in blocked or not self.grid.contains(nxt):
                    continue
                previous[nxt] = cell
                queue.append(nxt)

        if goal not in previous:
            logger.warning(f"No path from {start} to {goal}; using two-point fallback")
            return [start, goal]

        path = []
        cell = goal
        while cell is not None:
            path.append(cell)
            cell = previous[cell]
        return path[::-1]

    @staticmethod
    def is_straight(path: List[Cell]) -> bool:
        if len(path) < 2:
            return False
        return len({c[0] for c in path}) == 1 or len({c[1] for c in path}) == 1

    def curved_path(self, start: Cell, goal: Cell) -> List[Cell]:
        """
        Two-turn path through waypoints at x = w/3 and x = 2w/3.

        Waypoint rows are h/3 then 2h/3 when heading towards +z (or level),
        2h/3 then h/3 otherwise. Waypoint columns follow the x direction of
        travel.
        """
        w, h = self.grid.width, self.grid.height
        columns = [w // 3, (2 * w) // 3]
        rows = [h // 3, (2 * h) // 3]
        if goal[0] < start[0]:
            columns.reverse()
        if goal[1] < start[1]:
            rows.reverse()

        waypoints = [start]
        waypoints += [self.grid.clamp_cell(x, z) for x, z in zip(columns, rows)]
        waypoints.append(goal)

        path: List[Cell] = []
        for a, b in zip(waypoints, waypoints[1:]):
            segment = self.find_path(a, b)
            if path and segment and path[-1] == segment[0]:
                segment = segment[1:]
            path.extend(segment)
        return self._erase_loops(path)

    @staticmethod
    def _erase_loops(path: List[Cell]) -> List[Cell]:
        """Cut out any cycle so each cell appears once; adjacency is preserved."""
        result: List[Cell] = []
        index: Dict[Cell, int] = {}
        for cell in path:
            if cell in index:
                cut = index[cell]
                for dropped in result[cut + 1:]:
                    del index[dropped]
                result = result[:cut + 1]
                continue
            index[cell] = len(result)
            result.append(cell)
        return result

    def _adjacent_to(self, cell: Cell, cells: Set[Cell]) -> bool:
        return any((cell[0] + dx, cell[1] + dz) in cells for dx, dz in GRID_NEIGHBORS)

    def _nearest(self, origin: Cell, accept) -> Optional[Cell]:
        """First cell in BFS order from origin (inclusive) satisfying accept."""
        seen = {origin}
        queue = deque([origin])
        while queue:
            cell = queue.popleft()
            if accept(cell):
                return cell
            for dx, dz in GRID_NEIGHBORS:
                nxt = (cell[0] + dx, cell[1] + dz)
                if nxt not in seen and self.grid.contains(nxt):
                    seen.add(nxt)
                    queue.append(nxt)
        return None

    # ------------------------------------------------------------------
    # Object passes
    # ------------------------------------------------------------------

    def _relocate_slots(self, objects: List[LayoutObject], occupied: Set[Cell], path_set: Set[Cell]) -> List[LayoutObject]:
        occupied = set(occupied)
        result = []
        for obj in objects:
            if self._role(obj) != Role.SLOT:
                result.append(obj)
                continue

            cell = self.grid.cell_of(obj.position)
            if cell in occupied or not self._adjacent_to(cell, path_set):
                target = self._nearest(cell, lambda c: c not in occupied and self._adjacent_to(c, path_set))
                if target is None:
                    target = self._nearest(cell, lambda c: c not in occupied)
                    logger.debug(f"No free path-adjacent cell for '{obj.id}' near {cell}; using {target}")
                cell = target if target is not None else cell

            occupied.add(cell)
            result.append(self._moved(obj, cell))
        return result

    def _dedupe(self, objects: List[LayoutObject]) -> List[LayoutObject]:
        seen = set()
        result = []
        for obj in objects:
            key = (obj.id.lower(), self.grid.cell_of(obj.position))
            if key in seen:
                continue
            seen.add(key)
            result.append(obj)
        return result

    def _prune_slots_and_decorations(self, objects: List[LayoutObject], path_set: Set[Cell]) -> List[LayoutObject]:
        path_array = np.array(sorted(path_set), dtype=float).reshape(-1, 2)

        def distance(obj: LayoutObject) -> float:
            return distance_to_nearest(self.grid.cell_of(obj.position), path_array)

        def slot_score(obj: LayoutObject) -> float:
            cell = self.grid.cell_of(obj.position)
            penalty = 0.0 if self._adjacent_to(cell, path_set) else NOT_ADJACENT_PENALTY
            return penalty + distance(obj)

        def decoration_cap(object_id: str) -> int:
            cap = self.catalog.cap_for(object_id)
            return cap if cap is not None else self.decoration_cap

        slots = [o for o in objects if self._role(o) == Role.SLOT]
        decorations = [o for o in objects if self._role(o) == Role.DECORATION]

        kept = {id(o) for o in prune_objects(slots, self.catalog.cap_for, slot_score)}
        kept.update(id(o) for o in prune_objects(decorations, decoration_cap, lambda o: -distance(o)))

        return [o for o in objects if self._role(o) not in (Role.SLOT, Role.DECORATION) or id(o) in kept]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _role(self, obj: LayoutObject) -> Role:
        key = (obj.id or "").lower()
        if key not in self._roles:
            self._roles[key] = classify_role(obj.id, self.catalog)
        return self._roles[key]

    @staticmethod
    def _moved(obj: LayoutObject, cell: Cell) -> LayoutObject:
        return replace(obj, position=(float(cell[0]), obj.position[1], float(cell[1])))


def repair_grid_layout(layout: LayoutData, grid: GridSpec, catalog: Optional[Catalog] = None) -> LayoutData:
    """Repair a grid layout with default settings."""
    return GridPathRepairer(grid, catalog).repair(layout)
