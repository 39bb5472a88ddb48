"""Broadcaster — turns core events into outbound client messages.

Subscribes to the event bus and queues one outbound message per event.
Payloads are captured when the event is emitted, so clients see the
state as it was at that point of the tick.  A single drain task sends
the queue in order, keeping the core free of awaits.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, TYPE_CHECKING

from planetserver.util.events import (
    AsteroidsChanged,
    Chat,
    Explosion,
    MissionsMoved,
    PlayerDefeated,
    StateChanged,
)

if TYPE_CHECKING:
    from planetserver.engine.world import World
    from planetserver.network.server import Server
    from planetserver.util.events import EventBus

log = logging.getLogger(__name__)

# (target session IDs or None for everyone, payload)
Outbound = tuple[Optional[list[int]], dict[str, Any]]


class Broadcaster:
    """Event-bus subscriber feeding an ordered outbound queue.

    Args:
        server: WebSocket server used for delivery and session lookup.
        world: World whose snapshots are broadcast.
    """

    def __init__(self, server: Server, world: World) -> None:
        self._server = server
        self._world = world
        self._queue: asyncio.Queue[Outbound] = asyncio.Queue()

    def subscribe(self, bus: EventBus) -> None:
        """Register the event handlers on ``bus``."""
        bus.on(StateChanged, self._on_state_changed)
        bus.on(MissionsMoved, self._on_missions_moved)
        bus.on(AsteroidsChanged, self._on_asteroids_changed)
        bus.on(Explosion, self._on_explosion)
        bus.on(Chat, self._on_chat)
        bus.on(PlayerDefeated, self._on_player_defeated)

    # -- Queueing ----------------------------------------------------------

    def broadcast(self, payload: dict[str, Any]) -> None:
        self._queue.put_nowait((None, payload))

    def send(self, session_ids: list[int], payload: dict[str, Any]) -> None:
        if session_ids:
            self._queue.put_nowait((list(session_ids), payload))

    def send_snapshot(self, session_id: int) -> None:
        """Queue the full world picture for a freshly joined session."""
        world = self._world
        self.send([session_id], {"type": "state", "players": world.players.public_state()})
        self.send([session_id], {"type": "missions", "missions": world.missions.public_view()})
        self.send([session_id], {"type": "asteroids", "asteroids": world.asteroids.public_view()})

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    # -- Event handlers ----------------------------------------------------

    def _on_state_changed(self, event: StateChanged) -> None:
        self.broadcast({"type": "state", "players": self._world.players.public_state()})

    def _on_missions_moved(self, event: MissionsMoved) -> None:
        self.broadcast({"type": "missions", "missions": list(event.missions)})

    def _on_asteroids_changed(self, event: AsteroidsChanged) -> None:
        self.broadcast({"type": "asteroids", "asteroids": self._world.asteroids.public_view()})

    def _on_explosion(self, event: Explosion) -> None:
        self.broadcast({"type": "explosion", "x": event.x, "y": event.y, "big": event.big})

    def _on_chat(self, event: Chat) -> None:
        self.broadcast({"type": "chat", "from": event.sender, "text": event.text})

    def _on_player_defeated(self, event: PlayerDefeated) -> None:
        """Tell the defeated player's sessions, then detach them."""
        sessions = self._server.sessions_of(event.nick)
        for session_id in sessions:
            self._server.unbind(session_id)
        self.send(sessions, {
            "type": "defeated",
            "killedBy": event.killed_by,
            "lostResources": event.lost_resources,
            "hadLevel": event.had_level,
            "hadFleet": event.had_fleet,
        })
        log.info("Defeat notice queued for %s (%d sessions)", event.nick, len(sessions))

    # -- Delivery ----------------------------------------------------------

    async def _deliver(self, item: Outbound) -> None:
        targets, payload = item
        if targets is None:
            await self._server.broadcast_all(payload)
        else:
            await self._server.broadcast(set(targets), payload)

    async def flush(self) -> int:
        """Send everything queued so far. Returns the number of messages."""
        sent = 0
        while not self._queue.empty():
            await self._deliver(self._queue.get_nowait())
            sent += 1
        return sent

    async def run(self) -> None:
        """Drain the queue forever (cancel the task to stop)."""
        while True:
            item = await self._queue.get()
            await self._deliver(item)
