"""Placement validation — may a given kind appear on a given tile?

Rules are checked in order and the first failure rejects:

  1. The tile lies inside the active area.
  2. No static object sits on it and no impassable terrain feature grows on it.
  3. Kind-specific surface rules:
       - burrowing kinds need a surface tile flagged diggable, or the
         bare-ground index 0; anything else (including no tile) rejects;
       - heavy kinds reject liquid tile indices.

Placement requests routinely probe off-map points, so bad coordinates
return False rather than raising.
"""

from __future__ import annotations

import math

from .kinds import KindRecipe, Tag
from .world import Tile, WorldHost

BARE_GROUND_INDEX = 0
LIQUID_TILE_INDICES = range(76, 80)


def to_tile(location: tuple[float, float]) -> Tile | None:
    """Floor a location to its containing tile, or None if it is not a point."""
    try:
        x, y = float(location[0]), float(location[1])
    except (TypeError, ValueError, IndexError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return (math.floor(x), math.floor(y))


def in_bounds(world: WorldHost, tile: Tile) -> bool:
    width, height = world.bounds()
    return 0 <= tile[0] < width and 0 <= tile[1] < height


def is_placeable(world: WorldHost, recipe: KindRecipe, location: tuple[float, float]) -> bool:
    tile = to_tile(location)
    if tile is None or not in_bounds(world, tile):
        return False

    if world.object_at(tile) is not None:
        return False
    feature = world.feature_at(tile)
    if feature is not None and not feature.passable:
        return False

    surface = world.surface_at(tile)
    if recipe.has(Tag.BURROWING):
        if surface is None:
            return False
        return surface.diggable or surface.index == BARE_GROUND_INDEX
    if recipe.has(Tag.HEAVY) and surface is not None:
        if surface.index in LIQUID_TILE_INDICES:
            return False
    return True
