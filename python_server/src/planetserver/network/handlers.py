"""Message handlers — central registry of all command handlers.

Each handler is an async function that receives a parsed command message
and the sender's session ID, looks up the nick bound to that session and
hands the command to the CommandProcessor.

Returning a dict sends it back to the sender as a JSON response.
Returning None means no response to the sender (fire-and-forget).

The handler signature is::

    async def handle_xyz(message: GameMessage, session_id: int) -> dict | None:
        ...
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from planetserver.main import Services

from planetserver.models.messages import (
    AttackRequest,
    BuyDefenseRequest,
    BuyFleetRequest,
    GameMessage,
    JoinRequest,
    MineRequest,
)

log = logging.getLogger(__name__)

# Module-level reference set by register_all_handlers()
_services: Optional[Services] = None


def _svc() -> Services:
    """Get the Services container. Raises if not initialized."""
    assert _services is not None, "handlers: services not initialized"
    return _services


def _nick(session_id: int) -> Optional[str]:
    return _svc().server.nick_of(session_id)


# ===================================================================
# Session
# ===================================================================

async def handle_join(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    """Handle ``join`` — create or restore a player and bind the session.

    On success the session also receives the current state, mission and
    asteroid snapshots right after the join result.
    """
    assert isinstance(message, JoinRequest)
    svc = _svc()
    response = svc.command_processor.join(message.nick)
    if response["ok"]:
        svc.server.bind(session_id, response["player"]["nick"])
        svc.broadcaster.send_snapshot(session_id)
    return response


def handle_disconnect(session_id: int, nick: Optional[str]) -> None:
    """Server hook: the session closed.

    The player goes offline only once no other session is bound to it.
    """
    svc = _svc()
    if nick is not None and not svc.server.sessions_of(nick):
        svc.command_processor.leave(nick)


# ===================================================================
# Upgrades (silent when unaffordable)
# ===================================================================

async def handle_upgrade_level(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    return _svc().command_processor.upgrade_level(_nick(session_id))


async def handle_upgrade_military(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    return _svc().command_processor.upgrade_military(_nick(session_id))


async def handle_upgrade_fort(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    return _svc().command_processor.upgrade_fort(_nick(session_id))


# ===================================================================
# Purchases
# ===================================================================

async def handle_buy_fleet(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    assert isinstance(message, BuyFleetRequest)
    return _svc().command_processor.buy_fleet(_nick(session_id), message.amount)


async def handle_buy_defense(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    assert isinstance(message, BuyDefenseRequest)
    return _svc().command_processor.buy_defense(_nick(session_id), message.amount)


# ===================================================================
# Missions
# ===================================================================

async def handle_attack(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    """Handle ``attack`` — launch a fleet at another planet."""
    assert isinstance(message, AttackRequest)
    return _svc().command_processor.launch_attack(
        _nick(session_id), message.target, message.count,
    )


async def handle_mine(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    """Handle ``mine`` — send one ship to harvest an asteroid."""
    assert isinstance(message, MineRequest)
    return _svc().command_processor.launch_miner(_nick(session_id), message.asteroid_id)


async def handle_self_destruct(
    message: GameMessage, session_id: int,
) -> Optional[dict[str, Any]]:
    """Handle ``selfDestruct`` — remove the player and free its sessions.

    Every session bound to the nick is released, not only the sender.
    """
    svc = _svc()
    nick = _nick(session_id)
    response = svc.command_processor.self_destruct(nick)
    if response is not None:
        for sid in svc.server.sessions_of(nick):
            svc.server.unbind(sid)
    return response


# ===================================================================
# Registration — THE central place to add all handlers
# ===================================================================

def register_all_handlers(services: Services) -> None:
    """Register all message handlers on the router.

    Called once during startup from ``main.py``.

    Args:
        services: Fully initialized Services container.
    """
    global _services
    _services = services

    router = services.router

    # -- Session -----------------------------------------------------------
    router.register("join", handle_join)

    # -- Upgrades ----------------------------------------------------------
    router.register("upgradeLvl", handle_upgrade_level)
    router.register("upgradeMilitary", handle_upgrade_military)
    router.register("upgradeFort", handle_upgrade_fort)

    # -- Purchases ---------------------------------------------------------
    router.register("buyFleet", handle_buy_fleet)
    router.register("buyDefense", handle_buy_defense)

    # -- Missions ----------------------------------------------------------
    router.register("attack", handle_attack)
    router.register("mine", handle_mine)
    router.register("selfDestruct", handle_self_destruct)

    registered = router.registered_types
    log.info("Registered %d message handlers: %s", len(registered), ", ".join(registered))
