"""REST API — read-only FastAPI status endpoints.

Game commands travel over the WebSocket only; this app exposes the
public world state for dashboards and health checks.

Usage::

    from planetserver.network.rest_api import create_app

    app = create_app(services)
    # Start with uvicorn as an asyncio task alongside the WS server
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from planetserver.main import Services

log = logging.getLogger(__name__)


def create_app(services: "Services") -> FastAPI:
    """Factory: create and return a configured FastAPI application.

    The ``services`` reference is captured by closure so every endpoint
    can read the world without global state.
    """
    app = FastAPI(title="Planet Chaos Server", version="0.5.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    world = services.world
    commands = services.command_processor

    @app.get("/api/health")
    async def health() -> dict[str, Any]:
        clock = world.clock
        return {
            "status": "ok",
            "uptime_seconds": clock.uptime_seconds,
            "now_ms": clock.now_ms,
            "tick_count": clock.tick_count,
            "last_tick_duration_ms": clock.last_tick_duration_ms,
            "ticks": {task.name: task.fired for task in clock.tasks},
            "players": len(world.players),
            "missions": len(world.missions),
            "asteroids_alive": world.asteroids.alive_count(),
            "connections": services.server.connection_count if services.server else 0,
        }

    @app.get("/api/players")
    async def players() -> list[dict[str, Any]]:
        return commands.public_state()

    @app.get("/api/players/{nick}")
    async def player(nick: str) -> dict[str, Any]:
        found = world.players.get(nick)
        if found is None:
            raise HTTPException(status_code=404, detail=f"Player {nick!r} not found")
        return found.public_view()

    @app.get("/api/missions")
    async def missions() -> list[dict[str, Any]]:
        return commands.public_missions()

    @app.get("/api/asteroids")
    async def asteroids() -> list[dict[str, Any]]:
        return commands.public_asteroids()

    return app
