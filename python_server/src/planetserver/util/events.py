"""Typed event bus — decoupled communication between the core and the gateway.

The simulation core never talks to sockets.  Resolvers and the command
processor emit the events below; the network broadcaster subscribes and
turns them into outbound client messages.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, TypeVar, Type

T = TypeVar("T")


# -- Broadcast events ----------------------------------------------------

@dataclass(frozen=True)
class StateChanged:
    """The public player list changed and should be re-broadcast."""


@dataclass(frozen=True)
class MissionsMoved:
    """Mission positions after a mission tick (public views)."""
    missions: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class AsteroidsChanged:
    """Periodic trigger to re-broadcast the alive asteroids."""


@dataclass(frozen=True)
class Explosion:
    """Visual explosion at a world position."""
    x: float
    y: float
    big: bool


CHAT_SYSTEM = "⚙ system"
CHAT_COMBAT = "⚔ combat"
CHAT_MINING = "⛏ mining"
CHAT_SELF_DESTRUCT = "💥"


@dataclass(frozen=True)
class Chat:
    """System announcement shown in every client's chat log."""
    sender: str
    text: str


# -- Player lifecycle events ---------------------------------------------

@dataclass(frozen=True)
class PlayerDefeated:
    """A player's planet was destroyed in combat."""
    nick: str
    killed_by: str
    lost_resources: int
    had_level: int
    had_fleet: int


# -- Event Bus -----------------------------------------------------------

class EventBus:
    """Simple synchronous event bus with typed events.

    Usage:
        bus = EventBus()
        bus.on(Chat, lambda e: print(e.text))
        bus.emit(Chat(sender="system", text="hello"))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def on(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def off(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Unregister a handler."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: object) -> None:
        """Emit an event to all registered handlers."""
        for handler in self._handlers.get(type(event), []):
            handler(event)

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
