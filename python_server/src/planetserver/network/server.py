"""WebSocket server — manages client connections and nickname binding.

Accepts WebSocket connections, tracks one session per connection,
binds sessions to player nicknames after a successful ``join`` and
dispatches incoming messages to the router.
Uses the ``websockets`` library with asyncio.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, TYPE_CHECKING

import websockets
from websockets.asyncio.server import ServerConnection, Server as WSServer

from planetserver.network.serialization import decode, encode

if TYPE_CHECKING:
    from planetserver.network.router import Router

log = logging.getLogger(__name__)

DisconnectHook = Callable[[int, Optional[str]], None]


class Server:
    """asyncio WebSocket server with session tracking.

    Each connected client goes through:
    1. WebSocket handshake; a fresh session ID is assigned.
    2. A ``join`` message binds the session to a nickname.
    3. Messages are routed via the Router; responses sent back.
    4. On disconnect the optional hook learns which nick went offline.

    Args:
        router: Message router for dispatching incoming messages.
        host: Bind address.
        port: Bind port.
        on_disconnect: Called with ``(session_id, nick)`` after a session closes.
    """

    def __init__(self, router: Router, host: str = "0.0.0.0", port: int = 8765,
                 ping_interval: int = 30, ping_timeout: int = 10,
                 max_size: int = 65_536,
                 on_disconnect: Optional[DisconnectHook] = None) -> None:
        self._router = router
        self._host = host
        self._port = port
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._max_size = max_size
        self._on_disconnect = on_disconnect
        self._connections: dict[int, Any] = {}  # session_id → ws
        self._ws_to_session: dict[int, int] = {}  # id(ws) → session_id
        self._nicks: dict[int, str] = {}  # session_id → bound nick
        self._server: Optional[WSServer] = None
        self._next_session_id = 1

    # -- Lifecycle -------------------------------------------------------

    async def start(self) -> None:
        """Start the WebSocket server."""
        self._server = await websockets.serve(
            self._on_connect,
            self._host,
            self._port,
            origins=None,
            ping_interval=self._ping_interval,
            ping_timeout=self._ping_timeout,
            max_size=self._max_size,
        )
        log.info("WebSocket server listening on ws://%s:%d", self._host, self._port)

    async def stop(self) -> None:
        """Stop the WebSocket server and close all connections."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            log.info("WebSocket server stopped")

    # -- Session management ----------------------------------------------

    def open_session(self, ws: Any) -> int:
        """Register a new connection and return its session ID."""
        session_id = self._next_session_id
        self._next_session_id += 1
        self._connections[session_id] = ws
        self._ws_to_session[id(ws)] = session_id
        return session_id

    def close_session(self, ws: Any) -> tuple[Optional[int], Optional[str]]:
        """Forget a connection. Returns its session ID and bound nick."""
        session_id = self._ws_to_session.pop(id(ws), None)
        if session_id is None:
            return None, None
        self._connections.pop(session_id, None)
        nick = self._nicks.pop(session_id, None)
        return session_id, nick

    def get_session(self, ws: Any) -> Optional[int]:
        return self._ws_to_session.get(id(ws))

    def bind(self, session_id: int, nick: str) -> None:
        """Bind a session to a player nickname (after ``join``)."""
        self._nicks[session_id] = nick
        log.info("Session bound: session=%d nick=%r", session_id, nick)

    def unbind(self, session_id: int) -> Optional[str]:
        """Detach a session from its nickname. Returns the old nick."""
        return self._nicks.pop(session_id, None)

    def nick_of(self, session_id: int) -> Optional[str]:
        return self._nicks.get(session_id)

    def sessions_of(self, nick: str) -> list[int]:
        """All sessions currently bound to ``nick``."""
        return [sid for sid, bound in self._nicks.items() if bound == nick]

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # -- Sending ---------------------------------------------------------

    async def broadcast(self, session_ids: set[int], data: dict[str, Any]) -> int:
        """Send a message to multiple sessions.

        Returns the number of sessions that received the message.
        """
        raw = encode(data)
        sent = 0
        for session_id in session_ids:
            ws = self._connections.get(session_id)
            if ws is None:
                continue
            try:
                await ws.send(raw)
                sent += 1
            except websockets.ConnectionClosed:
                pass
        return sent

    async def broadcast_all(self, data: dict[str, Any]) -> int:
        """Send a message to ALL connected sessions."""
        return await self.broadcast(set(self._connections.keys()), data)

    # -- Connection handler ----------------------------------------------

    async def _on_connect(self, ws: ServerConnection) -> None:
        """Handle a new WebSocket connection lifecycle."""
        session_id = self.open_session(ws)
        remote = ws.remote_address
        log.info("Client connected: session=%d remote=%s", session_id, remote)

        try:
            async for raw_msg in ws:
                await self._handle_message(ws, raw_msg)
        except websockets.ConnectionClosed as e:
            log.info(
                "Client disconnected: session=%d code=%s reason=%s remote=%s",
                session_id, e.code, e.reason or "(none)", remote,
            )
        else:
            log.info("Client closed cleanly: session=%d remote=%s", session_id, remote)
        finally:
            _, nick = self.close_session(ws)
            if self._on_disconnect is not None:
                self._on_disconnect(session_id, nick)

    async def _handle_message(self, ws: Any, raw_msg: Any) -> None:
        """Parse and route a single incoming message."""
        session_id = self.get_session(ws) or 0

        try:
            data = decode(raw_msg)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            await ws.send(encode({"type": "error", "message": f"Invalid JSON: {e}"}))
            return

        if not isinstance(data, dict):
            await ws.send(encode({
                "type": "error",
                "message": "Message must be a JSON object",
            }))
            return

        msg_type = data.get("type", "")
        log.debug("Received: type=%s session=%d", msg_type, session_id)

        try:
            response = await self._router.route(data, session_id)
        except Exception as exc:
            log.exception("Handler error: type=%s session=%d", msg_type, session_id)
            await ws.send(encode({"type": "error", "message": str(exc)}))
            return

        if response is not None:
            await ws.send(encode(response))
