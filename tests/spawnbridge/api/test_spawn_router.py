"""Unit tests for POST /api/spawn.

Runs the real app with a real BridgeContext; the TestClient lifespan starts
a fast TickDriver so handlers get their futures resolved on the tick thread.
"""
from __future__ import annotations

import random
import threading
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from spawnbridge.simulation import BridgeContext, GridWorld, TickDriver
from tests.spawnbridge.helpers import ScriptedOffsets, wait_for

pytestmark = pytest.mark.unit


def _make_app(offsets=(), world=None, driven=True, cfg=None):
    world = world or GridWorld(80, 65, actor_tile=(40, 32))
    context = BridgeContext(world, rng=random.Random(5), offset_rng=ScriptedOffsets(offsets))
    driver = TickDriver(context, tick_hz=500.0) if driven else None
    app = create_app(context, driver=driver, cfg=cfg or Settings())
    return app, context, world


class TestSpawnSuccess:

    def test_guardian_golems(self):
        app, ctx, world = _make_app(offsets=[-4, 0, 0, 0, 4, 0])
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={
                "Monster Name": "Stone Golem", "Qty": 3, "Custom Name": "Guardian",
            })
            assert resp.status_code == 200
            assert resp.json() == {
                "success": True,
                "message": "Spawned 3 monsters",
                "spawned": 3,
                "requested": 3,
                "monsterType": "Stone Golem",
                "customName": "Guardian",
            }
            tiles = sorted(c.tile for c in world.creatures())
            assert tiles == [(36, 32), (40, 32), (44, 32)]
            assert wait_for(lambda: ctx.names.active_count == 3)
            assert {b.name for b in ctx.names.bindings()} == {"Guardian"}

    def test_defaults_quantity_and_name(self):
        app, _, world = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat"})
        data = resp.json()
        assert resp.status_code == 200
        assert (data["spawned"], data["requested"]) == (1, 1)
        assert data["customName"] == "Bat"
        assert len(world.creatures()) == 1

    @pytest.mark.parametrize("qty", [0, -3])
    def test_non_positive_quantity_means_one(self, qty):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat", "Qty": qty})
        assert resp.json()["requested"] == 1

    def test_monster_type_echoes_request(self):
        app, _, world = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "stone golem"})
        assert resp.json()["monsterType"] == "stone golem"
        assert resp.json()["customName"] == "Stone Golem"
        assert world.creatures()[0].kind == "Stone Golem"


class TestSpawnBlocked:

    def test_all_blocked_still_succeeds(self):
        world = GridWorld(80, 65, actor_tile=(40, 32))
        world.place_object((41, 32))
        app, ctx, _ = _make_app(offsets=[1, 0, 1, 0], world=world)
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={
                "Monster Name": "Stone Golem", "Qty": 2, "Custom Name": "Guardian",
            })
        data = resp.json()
        assert resp.status_code == 200
        assert data["success"] is True
        assert data["spawned"] == 0
        assert data["message"] == "Only spawned 0/2 due to blocked positions"
        assert ctx.names.pending() == {}

    def test_partial_spawn(self):
        world = GridWorld(80, 65, actor_tile=(40, 32))
        world.place_object((41, 32))
        app, _, _ = _make_app(offsets=[1, 0, 2, 0], world=world)
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat", "Qty": 2})
        assert resp.json()["spawned"] == 1
        assert resp.json()["message"] == "Only spawned 1/2 due to blocked positions"


class TestSpawnErrors:

    def test_missing_monster_name(self):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Qty": 2})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Monster Name is required"}

    def test_blank_monster_name(self):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "   "})
        assert resp.json() == {"error": "Monster Name is required"}

    def test_unknown_monster(self):
        app, _, world = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Dragon"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Monster 'Dragon' not found"}
        assert world.creatures() == []

    def test_malformed_json(self):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post(
                "/api/spawn", content=b"{not json",
                headers={"Content-Type": "application/json"},
            )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON format"}

    def test_json_array_body(self):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json=["Stone Golem"])
        assert resp.json() == {"error": "Invalid JSON format"}

    def test_non_numeric_quantity(self):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat", "Qty": "lots"})
        assert resp.status_code == 400
        assert "Qty" in resp.json()["error"]

    def test_quantity_above_cap(self):
        app, _, world = _make_app(cfg=Settings(max_spawn_quantity=10))
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat", "Qty": 11})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Qty must be at most 10"}
        assert world.creatures() == []

    def test_world_not_ready(self):
        world = GridWorld(80, 65, ready=False)
        app, _, _ = _make_app(world=world)
        with TestClient(app) as client:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Game world is not ready"}
        assert world.creatures() == []

    def test_no_tick_loop(self):
        app, _, world = _make_app(driven=False)
        client = TestClient(app)
        resp = client.post("/api/spawn", json={"Monster Name": "Bat"})
        assert resp.json() == {"error": "Game world is not ready"}

    def test_unexpected_failure_is_500(self):
        app, ctx, _ = _make_app(driven=False)
        ctx.mark_driven(True)
        ctx.submit_spawn = MagicMock(side_effect=RuntimeError("boom"))
        client = TestClient(app)
        with patch("app.routers.spawn.logger") as log:
            resp = client.post("/api/spawn", json={"Monster Name": "Bat"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to spawn monsters"}
        log.exception.assert_called_once()

    @pytest.mark.parametrize("body", [b"", b"   ", b"null"])
    def test_empty_body_reads_as_missing_name(self, body):
        app, _, _ = _make_app()
        with TestClient(app) as client:
            resp = client.post(
                "/api/spawn", content=body,
                headers={"Content-Type": "application/json"},
            )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Monster Name is required"}


class TestConcurrentSpawns:

    def test_counts_stay_consistent(self):
        world = GridWorld(80, 65, actor_tile=(40, 32))
        context = BridgeContext(world, rng=random.Random(5), offset_rng=random.Random(9))
        app = create_app(context, driver=TickDriver(context, tick_hz=500.0), cfg=Settings())
        results = []
        errors = []
        lock = threading.Lock()

        with TestClient(app) as client:
            def post():
                try:
                    resp = client.post("/api/spawn", json={"Monster Name": "Bat", "Qty": 3})
                    with lock:
                        results.append(resp)
                except Exception as e:
                    with lock:
                        errors.append(e)

            threads = [threading.Thread(target=post) for _ in range(16)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=10)

            assert errors == []
            assert len(results) == 16
            assert all(r.status_code == 200 for r in results)
            total = sum(r.json()["spawned"] for r in results)
            assert total == 48
            assert len(world.creatures()) == total
            assert len(context.spawner) == total
