"""BridgeContext + TickDriver — the tick-synchronous half of the bridge.

Architecture
------------
``BridgeContext`` is the single, explicitly constructed owner of all bridge
state: the Spawner's tracked creatures, the NameRegistry and the
EffectManager, plus the HandoffQueue that feeds them.  It is passed to the
FastAPI app, the tick driver and any host hooks; nothing reaches it through
a module global.

Thread model:

  network threads ──submit()──> HandoffQueue ──drain()──> tick thread
                <──Future───────────────────────────────┘

Everything under "tick context" below runs on the host's tick thread (or
the TickDriver thread when running headless).  The only methods safe to
call from other threads are ``submit_*`` and ``accepting``.

Per-tick order (``tick()``):
  1. drain the handoff queue (spawns, effects)
  2. prune tracked creatures and name bindings that died or left
  3. reconcile pending names against live creatures
  4. expire the active effect
  5. publish an ``overlay_frame`` for renderers

Because commands run before reconciliation, a spawn's name usually binds
in the same tick it was created; if the host adds creatures later in its
own frame, the binding lands one tick late, which is acceptable for a
label.

TickDriver is the headless stand-in for a host frame loop: a daemon thread
calling ``tick()`` at ``tick_hz``.  An embedding host skips it and calls
``tick()`` from its own update event instead.
"""

from __future__ import annotations

import random
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from spawnbridge.comms.event_bus import EventBus

from .effects import ActiveEffect, EffectCommand, EffectManager
from .errors import NotReadyError, PlacementRejected
from .handoff import HandoffQueue
from .kinds import MonsterKind
from .names import MATCH_RADIUS, NameRegistry
from .spawner import BatchResult, SpawnCommand, Spawner
from .world import Creature, Tile, WorldHost


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class OverlayFrame:
    """Read-only snapshot for renderers: name labels and the actor aura."""
    labels: list[dict] = field(default_factory=list)
    aura: dict | None = None

    def to_dict(self) -> dict:
        return {"labels": self.labels, "aura": self.aura}


class BridgeContext:
    """Owns the spawner, name registry, effect manager and handoff queue."""

    def __init__(
        self,
        world: WorldHost,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        offset_rng: random.Random | None = None,
        clock: Callable[[], float] = monotonic_ms,
        match_radius: float = MATCH_RADIUS,
        spawn_radius: int = 5,
    ) -> None:
        self.world = world
        self.event_bus = event_bus or EventBus()
        self.rng = rng or random.Random()
        self.offset_rng = offset_rng or random.Random()
        self.clock = clock
        self.spawn_radius = spawn_radius
        self.handoff = HandoffQueue()
        self.spawner = Spawner(world, rng=self.rng, event_bus=self.event_bus)
        self.names = NameRegistry(match_radius=match_radius)
        self.effects = EffectManager(world, event_bus=self.event_bus)
        self.tick_count = 0
        self._driven = False

    # -- any thread -----------------------------------------------------------

    @property
    def accepting(self) -> bool:
        """True when a tick loop is draining commands and the world is loaded."""
        return self._driven and not self.handoff.closed and self.world.is_ready()

    def mark_driven(self, driven: bool) -> None:
        """Tell the context whether something is calling ``tick()`` regularly."""
        self._driven = driven
        if driven:
            self.handoff.reopen()
        else:
            self.handoff.close()

    def random_offsets(self, count: int) -> tuple[tuple[int, int], ...]:
        """One independent offset per unit, uniform in ±spawn_radius tiles."""
        r = self.spawn_radius
        return tuple(
            (self.offset_rng.randint(-r, r), self.offset_rng.randint(-r, r)) for _ in range(count)
        )

    def submit_spawn(self, command: SpawnCommand) -> Future:
        return self.handoff.submit(lambda: self.execute_spawn(command))

    def submit_effect(self, command: EffectCommand) -> Future:
        return self.handoff.submit(lambda: self.execute_effect(command))

    # -- tick context -----------------------------------------------------------

    def _require_ready(self) -> None:
        if not self.world.is_ready():
            raise NotReadyError("Game world is not ready")

    def execute_spawn(self, command: SpawnCommand) -> BatchResult:
        """Place each unit at origin + its own offset; a blocked offset is one failed unit."""
        self._require_ready()
        ox, oy = command.origin or self.world.actor_tile()
        offsets = command.offsets or ((0, 0),) * command.quantity

        placed: list[Tile] = []
        for dx, dy in offsets[:command.quantity]:
            tile = (ox + dx, oy + dy)
            try:
                self.spawner.create_at(command.kind, tile)
            except PlacementRejected:
                continue
            placed.append(tile)
            self.names.register(tile, command.display_name)

        return BatchResult(requested=command.quantity, spawned=len(placed), tiles=tuple(placed))

    def execute_effect(self, command: EffectCommand) -> ActiveEffect:
        self._require_ready()
        return self.effects.apply(
            command.kind, command.source, command.duration_ms, command.magnitude,
            now_ms=self.clock(),
        )

    def tick(self, now_ms: float | None = None) -> None:
        now = self.clock() if now_ms is None else now_ms
        self.tick_count += 1
        self.handoff.drain()
        if not self.world.is_ready():
            return

        self.spawner.prune()
        self.names.prune(self.spawner.is_present)
        self.names.reconcile(
            (c, c.position) for c in self.world.creatures() if c.alive
        )
        self.effects.tick(now)
        self.event_bus.publish("overlay_frame", self.overlay_frame(now).to_dict())

    def overlay_frame(self, now_ms: float | None = None) -> OverlayFrame:
        now = self.clock() if now_ms is None else now_ms
        frame = OverlayFrame(labels=[
            {"creature_id": b.creature.creature_id, "position": list(b.creature.position), "name": b.name}
            for b in self.names.bindings()
            if self.spawner.is_present(b.creature)
        ])
        effect = self.effects.current()
        if effect is not None:
            frame.aura = {
                "kind": effect.kind.value,
                "color": effect.kind.color_name,
                "source": effect.source,
                "remaining": effect.remaining_fraction(now),
            }
        return frame

    # -- session boundaries (host hooks, tick context) --------------------------

    def on_location_changed(self) -> None:
        """Actor warped: names and tracked spawns belong to the old area."""
        self.names.clear_all()
        self.spawner.forget_all()

    def on_saving(self) -> int:
        removed = self.spawner.purge_transient()
        self.names.clear_all()
        return removed

    def on_returned_to_title(self) -> None:
        self.names.clear_all()
        self.spawner.forget_all()
        self.effects.clear()

    def on_hotkey_spawn(self) -> Creature | None:
        """Quick spawn bound to a host key: a Stone Golem at actor +5,+5."""
        try:
            return self.spawner.spawn_at_offset(MonsterKind.STONE_GOLEM, 5, 5)
        except PlacementRejected:
            logger.info("You may not place Stone Golem here")
            return None

    def status(self) -> dict:
        effect = self.effects.current()
        return {
            "accepting": self.accepting,
            "location": self.world.location_name,
            "tracked_spawns": len(self.spawner),
            "pending_names": len(self.names.pending()),
            "active_names": self.names.active_count,
            "effect": effect.kind.value if effect else None,
            "ticks": self.tick_count,
        }


class TickDriver:
    """Headless frame loop: calls ``context.tick()`` at a fixed rate on a daemon thread."""

    def __init__(self, context: BridgeContext, tick_hz: float = 60.0) -> None:
        self._context = context
        self._interval = 1.0 / tick_hz
        self._running = False
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._context.mark_driven(True)
        self._thread = threading.Thread(target=self._tick_loop, name="sim-tick", daemon=True)
        self._thread.start()
        logger.info(f"Tick driver started ({1.0 / self._interval:.0f} Hz)")

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        failed = self._context.handoff.close()
        self._context.mark_driven(False)
        if failed:
            logger.warning(f"Tick driver stopped with {failed} commands still queued")
        logger.info("Tick driver stopped")

    def _tick_loop(self) -> None:
        while self._running:
            started = time.monotonic()
            try:
                self._context.tick()
            except Exception:
                logger.exception("Tick failed")
            elapsed = time.monotonic() - started
            time.sleep(max(0.0, self._interval - elapsed))
