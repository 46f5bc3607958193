"""NameRegistry — attach custom display names to asynchronously spawned creatures.

Architecture
------------
A spawn request cannot hand back the creature it caused to exist: creation
happens later, in the tick context.  Instead the request leaves a *pending
entry* keyed by the tile it aimed at, and once per tick ``reconcile()``
looks for unnamed creatures standing within ``match_radius`` of each
pending tile.

Matching rules:

  - Entries are visited in registration order.
  - For each entry the first candidate (in the order given) within the
    radius wins; there is no nearest-distance contest.
  - A creature bound earlier in the same pass is no longer a candidate, so
    two overlapping entries can never double-bind one creature.
  - Entries that find nothing stay pending for the next tick, indefinitely,
    until matched or cleared at a session boundary.

Two spawns landing within the radius of each other in the same window may
swap names.  Only the overlay label reads a binding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable

from loguru import logger

from .world import Creature, Tile

MATCH_RADIUS = 2.0


@dataclass(frozen=True)
class NameBinding:
    creature: Creature
    name: str


class NameRegistry:
    """Pending tile → name entries plus the resulting creature → name bindings."""

    def __init__(self, match_radius: float = MATCH_RADIUS) -> None:
        self.match_radius = match_radius
        self._pending: dict[Tile, str] = {}
        self._bindings: dict[Creature, str] = {}

    # -- writes (tick context only) -----------------------------------------

    def register(self, tile: Tile, name: str) -> None:
        """Upsert a pending name; a later registration at the same tile wins."""
        self._pending[tile] = name
        logger.debug(f"Registered custom name '{name}' for spawn at {tile}")

    def reconcile(self, candidates: Iterable[tuple[Creature, tuple[float, float]]]) -> list[NameBinding]:
        if not self._pending:
            return []
        candidates = list(candidates)
        made: list[NameBinding] = []
        matched: list[Tile] = []

        for tile, name in self._pending.items():
            for creature, position in candidates:
                if creature in self._bindings:
                    continue
                if math.dist(tile, position) <= self.match_radius:
                    self._bindings[creature] = name
                    made.append(NameBinding(creature, name))
                    matched.append(tile)
                    logger.debug(f"Assigned custom name '{name}' to {creature.kind} at {position}")
                    break

        for tile in matched:
            del self._pending[tile]
        return made

    def prune(self, is_present: Callable[[Creature], bool]) -> int:
        """Drop bindings whose creature died or left the active area."""
        gone = [c for c in self._bindings if not is_present(c)]
        for creature in gone:
            del self._bindings[creature]
        return len(gone)

    def clear_all(self) -> None:
        self._pending.clear()
        self._bindings.clear()
        logger.debug("Cleared all custom monster names")

    # -- reads --------------------------------------------------------------

    def pending(self) -> dict[Tile, str]:
        return dict(self._pending)

    def bindings(self) -> list[NameBinding]:
        return [NameBinding(c, n) for c, n in self._bindings.items()]

    def name_for(self, creature: Creature) -> str | None:
        return self._bindings.get(creature)

    @property
    def active_count(self) -> int:
        return len(self._bindings)
