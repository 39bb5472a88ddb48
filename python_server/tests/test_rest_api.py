"""Tests for the read-only REST status API.

Uses httpx AsyncClient with an ASGI transport to hit the FastAPI app
end-to-end without starting a real server.
"""

from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from planetserver.engine.command_processor import CommandProcessor
from planetserver.engine.world import World
from planetserver.loaders.game_config_loader import GameConfig
from planetserver.main import Services
from planetserver.network.rest_api import create_app


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_services() -> Services:
    world = World(GameConfig(rng_seed=8))
    world.asteroids.populate()
    world.schedule()
    cp = CommandProcessor(world)
    cp.join("Alice")
    cp.join("Bob")
    return Services(game_config=world.config, world=world, command_processor=cp)


def _client(services: Services) -> AsyncClient:
    app = create_app(services)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ===================================================================
# Health
# ===================================================================


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_counts(self):
        svc = _make_services()
        svc.world.clock.advance(1000)
        async with _client(svc) as client:
            resp = await client.get("/api/health")

        assert resp.status_code == 200
        data: dict[str, Any] = resp.json()
        assert data["status"] == "ok"
        assert data["players"] == 2
        assert data["missions"] == 0
        assert data["asteroids_alive"] == 12
        assert data["connections"] == 0
        assert data["now_ms"] == 1000
        assert data["ticks"]["economy"] == 1
        assert data["ticks"]["missions"] == 20


# ===================================================================
# Players
# ===================================================================


class TestPlayers:
    @pytest.mark.asyncio
    async def test_list_players(self):
        async with _client(_make_services()) as client:
            resp = await client.get("/api/players")
        assert resp.status_code == 200
        assert [p["nick"] for p in resp.json()] == ["Alice", "Bob"]

    @pytest.mark.asyncio
    async def test_single_player_public_view(self):
        svc = _make_services()
        svc.world.players.get("Alice").defense = 2.9
        async with _client(svc) as client:
            resp = await client.get("/api/players/Alice")
        data = resp.json()
        assert resp.status_code == 200
        assert data["nick"] == "Alice"
        assert data["defense"] == 2
        assert "lastSeen" not in data

    @pytest.mark.asyncio
    async def test_unknown_player_404(self):
        async with _client(_make_services()) as client:
            resp = await client.get("/api/players/Nobody")
        assert resp.status_code == 404


# ===================================================================
# Missions and asteroids
# ===================================================================


class TestWorldViews:
    @pytest.mark.asyncio
    async def test_missions_in_flight(self):
        svc = _make_services()
        svc.world.players.get("Alice").fleet = 4
        svc.command_processor.launch_attack("Alice", "Bob")
        async with _client(svc) as client:
            resp = await client.get("/api/missions")
        (mission,) = resp.json()
        assert mission["type"] == "attack"
        assert mission["owner"] == "Alice"
        assert mission["targetNick"] == "Bob"

    @pytest.mark.asyncio
    async def test_only_alive_asteroids(self):
        svc = _make_services()
        first = svc.world.asteroids.all_asteroids[0]
        svc.world.asteroids.harvest(first.id)
        async with _client(svc) as client:
            resp = await client.get("/api/asteroids")
        ids = [a["id"] for a in resp.json()]
        assert len(ids) == 11
        assert first.id not in ids

    @pytest.mark.asyncio
    async def test_commands_not_exposed(self):
        async with _client(_make_services()) as client:
            resp = await client.post("/api/players", json={"nick": "Eve"})
        assert resp.status_code == 405
