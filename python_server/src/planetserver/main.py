"""Game server entry point.

Initializes all components and starts the asyncio event loop:
1. Load configuration (config/game.yaml)
2. Create the world and engine services
3. Create event bus subscribers (outbound broadcaster)
4. Populate the asteroid field and schedule the world ticks
5. Start network servers (WebSocket + REST status API)
6. Start the world clock

Usage:
    python -m planetserver.main [--config config/game.yaml]
    # or via entry point:
    planetserver
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import Any, Optional

from planetserver.engine.command_processor import CommandProcessor
from planetserver.engine.world import World
from planetserver.loaders.game_config_loader import (
    DEFAULT_GAME_CONFIG_PATH,
    GameConfig,
    load_game_config,
)
from planetserver.network.broadcaster import Broadcaster
from planetserver.network.handlers import handle_disconnect, register_all_handlers
from planetserver.network.router import Router
from planetserver.network.server import Server
from planetserver.util.events import EventBus

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Container for all services (makes passing around easier)
# ---------------------------------------------------------------------------


@dataclass
class Services:
    """Holds references to all engine and network services."""

    game_config: Optional[GameConfig] = None
    event_bus: Optional[EventBus] = None
    world: Optional[World] = None
    command_processor: Optional[CommandProcessor] = None
    router: Optional[Router] = None
    server: Optional[Server] = None
    broadcaster: Optional[Broadcaster] = None
    rest_server: Optional[Any] = None


# ===================================================================
# 1. Create services
# ===================================================================


def create_services(gc: GameConfig) -> Services:
    """Instantiate all engine/network services with proper dependency injection.

    Wiring order matters: services that are injected into others are created first.
    """
    log.info("Creating services …")

    event_bus = EventBus()
    world = World(gc, event_bus)
    command_processor = CommandProcessor(world)
    router = Router()
    server = Server(
        router,
        host=gc.ws_host,
        port=gc.ws_port,
        ping_interval=gc.ws_ping_interval,
        ping_timeout=gc.ws_ping_timeout,
        max_size=gc.ws_max_message_size,
        on_disconnect=handle_disconnect,
    )
    broadcaster = Broadcaster(server, world)

    log.info("  all services created")
    return Services(
        game_config=gc,
        event_bus=event_bus,
        world=world,
        command_processor=command_processor,
        router=router,
        server=server,
        broadcaster=broadcaster,
    )


# ===================================================================
# 2. Wire up event handlers
# ===================================================================


def wire_events(services: Services) -> None:
    """Connect the core's events to the outbound broadcaster."""
    log.info("Wiring event handlers …")
    services.broadcaster.subscribe(services.event_bus)
    log.info("  event handlers registered")


# ===================================================================
# 3. Start network servers
# ===================================================================


async def start_network(services: Services) -> list[asyncio.Task]:
    """Start the WebSocket server, the broadcaster and the REST API.

    Returns the background tasks so they can be cancelled on shutdown.
    """
    log.info("Starting network servers …")

    register_all_handlers(services)
    await services.server.start()

    tasks = [asyncio.create_task(services.broadcaster.run(), name="broadcaster")]

    from planetserver.network.rest_api import create_app
    import uvicorn

    rest_app = create_app(services)
    rest_port = services.game_config.rest_port
    config = uvicorn.Config(
        rest_app,
        host=services.game_config.ws_host,
        port=rest_port,
        log_level="info",
        access_log=False,
    )
    services.rest_server = uvicorn.Server(config)
    tasks.append(asyncio.create_task(services.rest_server.serve(), name="rest_api"))
    log.info("  REST API listening on http://%s:%d", services.game_config.ws_host, rest_port)
    return tasks


# ===================================================================
# 4. Start the world clock
# ===================================================================


async def start_game_loop(services: Services, background: list[asyncio.Task]) -> None:
    """Run the world clock until a shutdown signal is received, then clean up."""
    log.info("Starting world clock …")
    loop = asyncio.get_running_loop()
    clock = services.world.clock

    def _request_shutdown() -> None:
        log.info("Shutdown signal received — stopping …")
        clock.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_shutdown)

    await clock.run()

    # --- Cleanup after loop exits ---
    log.info("Shutting down …")
    if services.rest_server is not None:
        services.rest_server.should_exit = True
        log.info("  REST API server stopped")
    await services.broadcaster.flush()
    for task in background:
        if task.get_name() == "broadcaster":
            task.cancel()
    await services.server.stop()
    log.info("  goodbye")


# ===================================================================
# Entry points
# ===================================================================


async def _start(config_path: str = DEFAULT_GAME_CONFIG_PATH) -> None:
    """Initialize and run all server components."""
    log.info("=== Planet Chaos server starting ===")

    gc = load_game_config(config_path)
    services = create_services(gc)
    wire_events(services)

    services.world.asteroids.populate()
    services.world.schedule()

    background = await start_network(services)
    await start_game_loop(services, background)


def main() -> None:
    """Entry point for the game server."""
    parser = argparse.ArgumentParser(description="Planet Chaos game server")
    parser.add_argument("--config", default=DEFAULT_GAME_CONFIG_PATH,
                        help="Path to the game config YAML (default: %(default)s)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    asyncio.run(_start(config_path=args.config))


if __name__ == "__main__":
    main()
