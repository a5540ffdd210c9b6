"""
Capacity pruning: group objects by id, rank each group, keep the best `cap`.

Used inside grid repair and by the standalone catalog-cap sanitation pass.
"""

import logging
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import numpy as np

from .roles import Role, classify_role
from .schema import Cell, GameTypeProfile, LayoutData, LayoutObject

logger = logging.getLogger(__name__)

T = TypeVar("T")


def group_by_id(objects: Sequence[LayoutObject]) -> Dict[str, List[LayoutObject]]:
    """Case-insensitive grouping; the group key is the first spelling seen."""
    groups: Dict[str, List[LayoutObject]] = OrderedDict()
    keys: Dict[str, str] = {}
    for obj in objects:
        key = keys.setdefault((obj.id or "").lower(), obj.id or "")
        groups.setdefault(key, []).append(obj)
    return groups


def prune(
    grouped: Dict[str, List[T]],
    cap_fn: Callable[[str], Optional[int]],
    score_fn: Callable[[T], float],
) -> List[T]:
    """
    Keep at most cap_fn(id) lowest-scoring items per group.

    A cap of None leaves the group untouched. Sorting is stable, so equal
    scores keep input order.
    """
    kept: List[T] = []
    for group_id, items in grouped.items():
        cap = cap_fn(group_id)
        if cap is None or len(items) <= cap:
            kept.extend(items)
            continue
        ranked = sorted(items, key=score_fn)
        kept.extend(ranked[:cap])
        logger.debug(f"Pruned '{group_id}' from {len(items)} to {cap}")
    return kept


def prune_objects(
    objects: Sequence[LayoutObject],
    cap_fn: Callable[[str], Optional[int]],
    score_fn: Callable[[LayoutObject], float],
) -> List[LayoutObject]:
    """prune() over a flat list, returning survivors in their original order."""
    kept = {id(obj) for obj in prune(group_by_id(objects), cap_fn, score_fn)}
    return [obj for obj in objects if id(obj) in kept]


def distance_to_nearest(cell: Cell, targets: np.ndarray) -> float:
    """Manhattan distance from cell to the nearest row of targets (N x 2)."""
    if len(targets) == 0:
        return 0.0
    return float(np.abs(targets - np.asarray(cell)).sum(axis=1).min())


def prune_to_catalog_caps(layout: LayoutData, profile: GameTypeProfile) -> LayoutData:
    """
    Cap every id group to its catalog maxPerLevel.

    Ranking: slots and decorations closest to the path first when path
    cells exist, otherwise row-major order (z, then x) for grid layouts,
    otherwise input order. Ids without a finite cap are left alone, and so
    are path tiles on grid layouts: the repaired path must stay connected.
    """
    if layout is None or not layout.objects or profile is None:
        return layout

    catalog = profile.catalog
    path_cells = np.array(
        [(o.position[0], o.position[2]) for o in layout.objects
         if classify_role(o.id, catalog) == Role.PATH],
        dtype=float,
    ).reshape(-1, 2)
    order = {id(obj): i for i, obj in enumerate(layout.objects)}

    def score_for(group_role: Role) -> Callable[[LayoutObject], float]:
        if len(path_cells) > 0 and group_role in (Role.SLOT, Role.DECORATION):
            return lambda o: distance_to_nearest((o.position[0], o.position[2]), path_cells)
        if profile.is_grid:
            return lambda o: (o.position[2], o.position[0])
        return lambda o: order[id(o)]

    kept: List[LayoutObject] = []
    for group_id, items in group_by_id(layout.objects).items():
        role = classify_role(group_id, catalog)
        cap = catalog.cap_for(group_id)
        if role == Role.PATH and profile.is_grid and cap is not None and len(items) > cap:
            # Path stays connected; validation reports the overflow
            logger.warning(f"Path id '{group_id}' has {len(items)} tiles over maxPerLevel {cap}; not pruned")
            kept.extend(items)
            continue
        kept.extend(prune({group_id: items}, catalog.cap_for, score_for(role)))

    kept_ids = {id(obj) for obj in kept}
    layout.objects = [obj for obj in layout.objects if id(obj) in kept_ids]
    return layout
