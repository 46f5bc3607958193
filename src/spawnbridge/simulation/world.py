"""World capability interface consumed from the host simulation.

Architecture
------------
The bridge never owns the world.  Actor position and health, active-area
bounds, surface tiles, static objects, terrain features and the live
creature list are all read or written through ``WorldHost``.  All
calls are made from the host's tick thread; implementations are not required
to be thread-safe.

``GridWorld`` is a complete in-memory host used by the headless server and
the tests.  It stores sparse dictionaries keyed by tile so that an empty
world costs nothing regardless of its bounds.

Coordinates are tile units throughout.  A creature's ``tile`` is its
position floored to the containing tile.
"""

from __future__ import annotations

import itertools
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

Tile = tuple[int, int]

_creature_ids = itertools.count(1)


@dataclass(frozen=True)
class SurfaceTile:
    """One cell of the surface ("back") layer."""
    index: int
    diggable: bool = False


@dataclass(frozen=True)
class TerrainFeature:
    """Grass, trees, stumps … anything rooted on a tile."""
    name: str
    passable: bool = True


@dataclass(eq=False)
class Creature:
    """A live monster in the active area.

    Compared and hashed by identity: two slimes with equal stats are still
    two different objects, which is what name bindings key on.
    """

    kind: str
    name: str
    position: tuple[float, float]
    health: int = 1
    max_health: int = 1
    damage: int = 0
    speed: int = 2
    tint: tuple[int, int, int] | None = None
    variant: str | None = None
    construct_arg: object | None = None  # mine level, colour seed, sub-type name …
    tile_locked: bool = False
    loot: list[str] = field(default_factory=list)
    creature_id: int = field(default_factory=lambda: next(_creature_ids))

    @property
    def tile(self) -> Tile:
        return (math.floor(self.position[0]), math.floor(self.position[1]))

    @property
    def alive(self) -> bool:
        return self.health > 0


class WorldHost(ABC):
    """Narrow capability interface onto the host simulation."""

    @abstractmethod
    def is_ready(self) -> bool:
        """True when a save is loaded and the world accepts mutation."""

    @property
    @abstractmethod
    def location_name(self) -> str: ...

    # -- actor ------------------------------------------------------------

    @abstractmethod
    def actor_tile(self) -> Tile: ...

    @abstractmethod
    def actor_health(self) -> tuple[int, int]:
        """Return ``(health, max_health)`` of the controlling actor."""

    @abstractmethod
    def set_actor_health(self, health: int) -> None: ...

    # -- terrain / occupancy ----------------------------------------------

    @abstractmethod
    def bounds(self) -> tuple[int, int]:
        """Return ``(width, height)`` of the active area in tiles."""

    @abstractmethod
    def surface_at(self, tile: Tile) -> SurfaceTile | None: ...

    @abstractmethod
    def object_at(self, tile: Tile) -> str | None:
        """Name of the static object (furniture, rock …) on ``tile``."""

    @abstractmethod
    def feature_at(self, tile: Tile) -> TerrainFeature | None: ...

    # -- live creatures ---------------------------------------------------

    @abstractmethod
    def add_creature(self, creature: Creature) -> None: ...

    @abstractmethod
    def remove_creature(self, creature: Creature) -> bool: ...

    @abstractmethod
    def has_creature(self, creature: Creature) -> bool: ...

    @abstractmethod
    def creatures(self) -> list[Creature]: ...


class GridWorld(WorldHost):
    """In-memory rectangular active area with one actor."""

    def __init__(
        self,
        width: int = 64,
        height: int = 64,
        *,
        location: str = "Farm",
        actor_tile: Tile | None = None,
        actor_max_health: int = 100,
        ready: bool = True,
    ) -> None:
        self.width = width
        self.height = height
        self._location = location
        self._actor_tile: Tile = actor_tile or (width // 2, height // 2)
        self._actor_max_health = actor_max_health
        self._actor_health = actor_max_health
        self.ready = ready
        self._surface: dict[Tile, SurfaceTile | None] = {}
        self._objects: dict[Tile, str] = {}
        self._features: dict[Tile, TerrainFeature] = {}
        self._creatures: list[Creature] = []
        self._default_surface: SurfaceTile | None = SurfaceTile(index=0)

    # -- setup helpers ----------------------------------------------------

    def set_surface(self, tile: Tile, index: int, diggable: bool = False) -> None:
        self._surface[tile] = SurfaceTile(index=index, diggable=diggable)

    def clear_surface(self, tile: Tile) -> None:
        """Mark ``tile`` as having no surface tile at all."""
        self._surface[tile] = None

    def fill_surface(self, index: int, diggable: bool = False) -> None:
        """Change the surface every unset tile reports."""
        self._default_surface = SurfaceTile(index=index, diggable=diggable)

    def place_object(self, tile: Tile, name: str = "Stone") -> None:
        self._objects[tile] = name

    def place_feature(self, tile: Tile, name: str, passable: bool) -> None:
        self._features[tile] = TerrainFeature(name=name, passable=passable)

    def move_actor(self, tile: Tile) -> None:
        self._actor_tile = tile

    def warp(self, location: str) -> None:
        """Switch to a fresh active area; the previous one's creatures stay behind."""
        self._location = location
        self._creatures = []
        self._surface.clear()
        self._objects.clear()
        self._features.clear()

    # -- WorldHost --------------------------------------------------------

    def is_ready(self) -> bool:
        return self.ready

    @property
    def location_name(self) -> str:
        return self._location

    def actor_tile(self) -> Tile:
        return self._actor_tile

    def actor_health(self) -> tuple[int, int]:
        return self._actor_health, self._actor_max_health

    def set_actor_health(self, health: int) -> None:
        self._actor_health = max(0, min(self._actor_max_health, int(health)))

    def bounds(self) -> tuple[int, int]:
        return self.width, self.height

    def surface_at(self, tile: Tile) -> SurfaceTile | None:
        if tile in self._surface:
            return self._surface[tile]
        return self._default_surface

    def object_at(self, tile: Tile) -> str | None:
        return self._objects.get(tile)

    def feature_at(self, tile: Tile) -> TerrainFeature | None:
        return self._features.get(tile)

    def add_creature(self, creature: Creature) -> None:
        self._creatures.append(creature)

    def remove_creature(self, creature: Creature) -> bool:
        try:
            self._creatures.remove(creature)
        except ValueError:
            return False
        return True

    def has_creature(self, creature: Creature) -> bool:
        return creature in self._creatures

    def creatures(self) -> list[Creature]:
        return list(self._creatures)
