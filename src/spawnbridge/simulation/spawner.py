"""Spawner — creates monsters in the active area and tracks what it made.

Every method here mutates world state and must run inside the tick
context (the tick driver drains the handoff queue before calling anything
else).  The gateway never touches a Spawner directly.

Tracked records are pruned each tick when their creature dies or leaves
the active area, and dropped wholesale at session boundaries.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from .errors import PlacementRejected
from .kinds import MonsterKind, Tag, recipe_for
from .placement import is_placeable, to_tile
from .world import Creature, Tile, WorldHost

if TYPE_CHECKING:
    from spawnbridge.comms.event_bus import EventBus


@dataclass(frozen=True)
class SpawnCommand:
    """A fully validated spawn request, ready to hand to the tick context."""
    kind: MonsterKind
    quantity: int
    display_name: str
    offsets: tuple[tuple[int, int], ...] = ()
    origin: Tile | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")


@dataclass(frozen=True)
class SpawnedRecord:
    creature: Creature
    tile: Tile
    kind: MonsterKind


@dataclass(frozen=True)
class BatchResult:
    requested: int
    spawned: int
    tiles: tuple[Tile, ...] = ()

    @property
    def complete(self) -> bool:
        return self.spawned == self.requested


class Spawner:
    """Owns every creature it has created for the current session."""

    def __init__(self, world: WorldHost, rng: random.Random | None = None,
                 event_bus: EventBus | None = None) -> None:
        self._world = world
        self._rng = rng or random.Random()
        self._event_bus = event_bus
        self._spawned: list[SpawnedRecord] = []

    @property
    def spawned(self) -> list[SpawnedRecord]:
        return list(self._spawned)

    def __len__(self) -> int:
        return len(self._spawned)

    # -- creation -----------------------------------------------------------

    def create_at(self, kind: MonsterKind, location: tuple[float, float]) -> Creature:
        """Place one ``kind`` at ``location``.

        Raises PlacementRejected (no side effects) when the tile is blocked.
        """
        recipe = recipe_for(kind)
        tile = to_tile(location)
        if tile is None or not is_placeable(self._world, recipe, location):
            raise PlacementRejected(tile or (0, 0))

        creature = Creature(
            kind=recipe.display_name,
            name=recipe.display_name,
            position=(float(tile[0]), float(tile[1])),
            health=recipe.health,
            max_health=recipe.health,
            damage=recipe.damage,
            speed=recipe.speed,
            construct_arg=recipe.second_arg,
            tile_locked=recipe.has(Tag.TILE_LOCKED),
        )
        if recipe.tint is not None:
            creature.tint = recipe.tint(self._rng)
        if recipe.customize is not None:
            recipe.customize(creature, self._rng)

        self._world.add_creature(creature)
        self._spawned.append(SpawnedRecord(creature=creature, tile=tile, kind=kind))
        logger.debug(f"Spawned {kind.value} at {tile}")
        return creature

    def create_many(self, kind: MonsterKind, location: tuple[float, float], count: int) -> BatchResult:
        """Place up to ``count`` at the same tile, stopping at the first rejection."""
        tiles: list[Tile] = []
        for _ in range(count):
            try:
                creature = self.create_at(kind, location)
            except PlacementRejected:
                logger.info(f"You may not place {kind.value} at {location}")
                break
            tiles.append(creature.tile)
        logger.info(f"Spawned {len(tiles)}/{count} {kind.value} at {location}")
        return BatchResult(requested=count, spawned=len(tiles), tiles=tuple(tiles))

    def spawn_at_offset(self, kind: MonsterKind, dx: int = 5, dy: int = 5) -> Creature:
        """Quick spawn relative to the actor (the hotkey path)."""
        ax, ay = self._world.actor_tile()
        return self.create_at(kind, (ax + dx, ay + dy))

    # -- bookkeeping --------------------------------------------------------

    def is_present(self, creature: Creature) -> bool:
        return creature.alive and self._world.has_creature(creature)

    def prune(self) -> int:
        """Forget creatures that died or left the active area."""
        before = len(self._spawned)
        self._spawned = [r for r in self._spawned if self.is_present(r.creature)]
        return before - len(self._spawned)

    def forget_all(self) -> None:
        self._spawned.clear()

    def purge_transient(self) -> int:
        """Remove every tracked creature that is unsafe to write into a save."""
        keep: list[SpawnedRecord] = []
        removed = 0
        for record in self._spawned:
            if recipe_for(record.kind).persist_safe:
                keep.append(record)
                continue
            self._world.remove_creature(record.creature)
            logger.trace(f"Removed {record.kind.value} at {record.tile}")
            removed += 1
        self._spawned = keep

        logger.info(f"Removing {removed} monsters")
        if removed and self._event_bus is not None:
            self._event_bus.publish("spawns_purged", {
                "removed": removed,
                "message": f"Removed {removed} Monsters to prevent saving-errors.",
            })
        return removed
