"""Message router — dispatches incoming messages to handlers.

Routes parsed command messages by type to the registered handler.

Handlers are async callables that receive the parsed message and the
sender's session ID. They may return an optional response dict that
should be sent back to the sender.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Awaitable, Optional

from planetserver.models.messages import GameMessage, parse_message

log = logging.getLogger(__name__)

# Handler signature: async (message, session_id) -> optional response dict
Handler = Callable[[GameMessage, int], Awaitable[Optional[dict[str, Any]]]]


class Router:
    """Message dispatcher.

    Register handlers for message types, then call route() with raw dicts.
    Handlers may return a response dict to be sent back to the caller.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, msg_type: str, handler: Handler) -> None:
        """Register a handler for a message type.

        Args:
            msg_type: The message type string (e.g. ``"buyFleet"``).
            handler: Async callable ``(message, session_id) -> dict | None``.
        """
        self._handlers[msg_type] = handler
        log.debug("Handler registered: %s", msg_type)

    @property
    def registered_types(self) -> list[str]:
        """List of all message types that have a handler."""
        return list(self._handlers.keys())

    async def route(self, raw: dict[str, Any], session_id: int) -> Optional[dict[str, Any]]:
        """Parse and dispatch a raw message dict.

        Unknown message types are dropped before validation.

        Args:
            raw: Raw JSON-decoded message dictionary.
            session_id: Session of the sending client.

        Returns:
            Response dict from the handler, or None if no handler /
            handler returned nothing.
        """
        handler = self._handlers.get(raw.get("type", ""))
        if handler is None:
            log.debug("No handler for message type: %s", raw.get("type"))
            return None
        message = parse_message(raw)
        return await handler(message, session_id)
