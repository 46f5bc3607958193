"""Unit tests for BridgeContext and TickDriver.

Drives ``tick()`` by hand with a manual clock; the TickDriver tests use a
real daemon thread at a high rate.
"""
from __future__ import annotations

import random

import pytest

from spawnbridge.simulation import (
    BridgeContext,
    Creature,
    EffectCommand,
    EffectKind,
    GridWorld,
    MonsterKind,
    NotReadyError,
    SpawnCommand,
    TickDriver,
)
from tests.spawnbridge.helpers import ScriptedOffsets, wait_for

pytestmark = pytest.mark.unit


def _spawn(kind=MonsterKind.STONE_GOLEM, qty=1, name="Guardian", offsets=(), origin=None):
    return SpawnCommand(kind=kind, quantity=qty, display_name=name, offsets=offsets, origin=origin)


class TestAccepting:

    def test_not_accepting_until_driven(self, context):
        assert not context.accepting
        context.mark_driven(True)
        assert context.accepting

    def test_not_accepting_when_world_not_ready(self, context, world):
        context.mark_driven(True)
        world.ready = False
        assert not context.accepting

    def test_undriven_context_closes_handoff(self, context):
        context.mark_driven(True)
        context.mark_driven(False)
        assert context.handoff.closed
        future = context.submit_spawn(_spawn())
        assert isinstance(future.exception(timeout=0), NotReadyError)


class TestRandomOffsets:

    def test_one_offset_per_unit_within_radius(self, world):
        ctx = BridgeContext(world, offset_rng=random.Random(3), spawn_radius=5)
        offsets = ctx.random_offsets(50)
        assert len(offsets) == 50
        assert all(-5 <= dx <= 5 and -5 <= dy <= 5 for dx, dy in offsets)

    def test_scripted_offsets(self, world):
        ctx = BridgeContext(world, offset_rng=ScriptedOffsets([1, 2, -3, 4]))
        assert ctx.random_offsets(2) == ((1, 2), (-3, 4))


class TestExecuteSpawn:

    def test_places_each_unit_at_its_offset(self, context, world):
        result = context.execute_spawn(_spawn(qty=3, offsets=((-4, 0), (0, 0), (4, 0))))
        assert result.spawned == result.requested == 3
        assert result.tiles == ((28, 32), (32, 32), (36, 32))
        assert sorted(c.tile for c in world.creatures()) == [(28, 32), (32, 32), (36, 32)]
        assert context.names.pending() == {
            (28, 32): "Guardian", (32, 32): "Guardian", (36, 32): "Guardian",
        }

    def test_blocked_offset_is_one_failed_unit(self, context, world):
        world.place_object((33, 32))
        result = context.execute_spawn(_spawn(qty=2, offsets=((1, 0), (2, 0))))
        assert (result.spawned, result.requested) == (1, 2)
        assert not result.complete
        assert context.names.pending() == {(34, 32): "Guardian"}

    def test_all_blocked_is_not_an_error(self, context, world):
        world.place_object((33, 32))
        result = context.execute_spawn(_spawn(qty=2, offsets=((1, 0), (1, 0))))
        assert result.spawned == 0
        assert world.creatures() == []
        assert context.names.pending() == {}

    def test_no_offsets_uses_actor_tile(self, context, world):
        context.execute_spawn(_spawn(qty=2))
        assert [c.tile for c in world.creatures()] == [(32, 32), (32, 32)]

    def test_explicit_origin(self, context, world):
        context.execute_spawn(_spawn(origin=(5, 6), offsets=((1, 1),)))
        assert world.creatures()[0].tile == (6, 7)

    def test_rejects_when_world_not_ready(self, context, world):
        world.ready = False
        with pytest.raises(NotReadyError):
            context.execute_spawn(_spawn())


class TestTick:

    def test_spawn_names_bind_in_the_same_tick(self, context, world):
        future = context.submit_spawn(_spawn(qty=3, offsets=((-4, 0), (0, 0), (4, 0))))
        context.tick()
        assert future.result(timeout=0).spawned == 3
        assert context.names.active_count == 3
        assert {b.name for b in context.names.bindings()} == {"Guardian"}
        assert context.names.pending() == {}

    def test_name_binds_once_creature_appears(self, context, world):
        context.names.register((10, 10), "Late")
        context.tick()
        assert context.names.active_count == 0
        c = Creature(kind="Bat", name="Bat", position=(10.0, 11.0), health=5, max_health=5)
        world.add_creature(c)
        context.tick()
        assert context.names.name_for(c) == "Late"

    def test_dead_creatures_are_pruned(self, context, world):
        context.submit_spawn(_spawn(offsets=((1, 1),)))
        context.tick()
        creature = world.creatures()[0]
        creature.health = 0
        context.tick()
        assert context.names.active_count == 0
        assert len(context.spawner) == 0

    def test_not_ready_tick_fails_queued_work_and_skips_upkeep(self, context, world):
        q = context.event_bus.subscribe()
        world.ready = False
        future = context.submit_spawn(_spawn())
        context.tick()
        assert isinstance(future.exception(timeout=0), NotReadyError)
        assert q.empty()

    def test_effect_expires_on_tick(self, context, clock):
        context.submit_effect(EffectCommand(kind=EffectKind.DAMAGE, duration_ms=1000))
        context.tick()
        assert context.effects.current() is not None
        clock.advance(999)
        context.tick()
        assert context.effects.current() is not None
        clock.advance(1)
        context.tick()
        assert context.effects.current() is None

    def test_overlay_frame_published(self, context, world, clock):
        q = context.event_bus.subscribe()
        context.submit_spawn(_spawn(offsets=((2, 0),)))
        context.submit_effect(EffectCommand(kind=EffectKind.SHIELD, source="Boss", duration_ms=1000))
        context.tick()

        frames = []
        while not q.empty():
            msg = q.get_nowait()
            if msg["type"] == "overlay_frame":
                frames.append(msg["data"])
        assert len(frames) == 1
        frame = frames[0]
        creature = world.creatures()[0]
        assert frame["labels"] == [
            {"creature_id": creature.creature_id, "position": [34.0, 32.0], "name": "Guardian"},
        ]
        assert frame["aura"] == {"kind": "shield", "color": "Blue", "source": "Boss", "remaining": 1.0}

    def test_overlay_without_effect_has_no_aura(self, context):
        assert context.overlay_frame().aura is None


class TestSessionHooks:

    def test_location_change_drops_names_and_tracking(self, context, world):
        context.submit_spawn(_spawn(offsets=((1, 0),)))
        context.tick()
        context.names.register((3, 3), "Pending")
        world.warp("Mine")
        context.on_location_changed()
        assert context.names.pending() == {}
        assert context.names.active_count == 0
        assert len(context.spawner) == 0

    def test_effect_survives_location_change(self, context):
        context.execute_effect(EffectCommand(kind=EffectKind.DAMAGE))
        context.on_location_changed()
        assert context.effects.current() is not None

    def test_saving_purges_transient_spawns(self, context, world):
        context.execute_spawn(_spawn(offsets=((1, 0),)))
        context.execute_spawn(_spawn(kind=MonsterKind.GREEN_SLIME, name="Blob", offsets=((2, 0),)))
        assert context.on_saving() == 1
        assert [c.kind for c in world.creatures()] == ["Green Slime"]
        assert context.names.pending() == {}

    def test_return_to_title_clears_everything(self, context):
        context.execute_spawn(_spawn(offsets=((1, 0),)))
        context.execute_effect(EffectCommand(kind=EffectKind.SHIELD))
        context.on_returned_to_title()
        assert context.effects.current() is None
        assert len(context.spawner) == 0
        assert context.names.pending() == {}

    def test_hotkey_spawns_golem_off_actor(self, context, world):
        golem = context.on_hotkey_spawn()
        assert golem.kind == "Stone Golem"
        assert golem.tile == (37, 37)
        assert len(context.spawner) == 1

    def test_hotkey_on_blocked_tile(self, context, world):
        world.place_object((37, 37))
        assert context.on_hotkey_spawn() is None
        assert world.creatures() == []

    def test_status(self, context):
        context.names.register((1, 1), "X")
        status = context.status()
        assert status["location"] == "Farm"
        assert status["pending_names"] == 1
        assert status["accepting"] is False
        assert status["effect"] is None


class TestTickDriver:

    def _make(self):
        world = GridWorld(32, 32)
        ctx = BridgeContext(world, rng=random.Random(1))
        return TickDriver(ctx, tick_hz=200.0), ctx

    def test_start_and_stop(self):
        driver, ctx = self._make()
        driver.start()
        try:
            assert driver.running
            assert ctx.accepting
            assert wait_for(lambda: ctx.tick_count > 2)
        finally:
            driver.stop()
        assert not driver.running
        assert not ctx.accepting
        assert ctx.handoff.closed

    def test_submitted_command_resolves(self):
        driver, ctx = self._make()
        driver.start()
        try:
            future = ctx.submit_spawn(_spawn(qty=2))
            assert future.result(timeout=2).spawned == 2
        finally:
            driver.stop()

    def test_submit_after_stop_fails(self):
        driver, ctx = self._make()
        driver.start()
        driver.stop()
        future = ctx.submit_effect(EffectCommand(kind=EffectKind.SHIELD))
        assert isinstance(future.exception(timeout=0), NotReadyError)

    def test_start_twice_is_noop(self):
        driver, _ = self._make()
        driver.start()
        try:
            driver.start()
            assert driver.running
        finally:
            driver.stop()
