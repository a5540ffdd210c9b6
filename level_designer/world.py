"""Fit free-form (world coordinate) layouts into the arena."""

import logging
from dataclasses import replace

import numpy as np

from .schema import LayoutData, WorldSettings

logger = logging.getLogger(__name__)


def fit_to_arena(layout: LayoutData, settings: WorldSettings) -> LayoutData:
    """
    Apply world placement rules to XZ positions, in order:
    scale by world_scale, shrink to fit arena * fit_margin, snap to step,
    clamp inside the arena minus padding. Y is only scaled.
    """
    if layout is None or not layout.objects:
        return layout

    positions = np.array([o.position for o in layout.objects], dtype=float) * settings.world_scale
    half_arena = np.array(settings.arena_size, dtype=float) / 2.0
    xz = positions[:, [0, 2]]

    if settings.auto_fit_to_arena:
        extent = np.abs(xz).max(axis=0)
        limit = half_arena * settings.fit_margin
        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = np.where(extent > 0, limit / extent, np.inf)
        factor = float(min(1.0, ratios.min()))
        if factor < 1.0:
            logger.info(f"Scaling layout by {factor:.3f} to fit the arena")
            xz = xz * factor

    if settings.snap_to_step and settings.step > 0:
        xz = np.round(xz / settings.step) * settings.step

    if settings.clamp_to_arena:
        bound = np.maximum(half_arena - settings.clamp_padding, 0.0)
        xz = np.clip(xz, -bound, bound)

    positions[:, 0] = xz[:, 0]
    positions[:, 2] = xz[:, 1]

    layout.objects = [
        replace(obj, position=tuple(float(v) for v in pos))
        for obj, pos in zip(layout.objects, positions)
    ]
    return layout
