"""Command processor — validates and applies player commands.

Every command arrives with the nick bound to the issuing session (or
None).  Commands from an unbound session, or for a player that no longer
exists, are silently ignored.

Results are plain response dicts for the issuing session; anything every
client must see (state changes, chat, explosions) goes out through the
event bus.  Rejections are values, never exceptions:

- validation rejections come back as ``ok: False`` / ``info`` replies
- unaffordable upgrades and purchases are silently dropped
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Optional

from planetserver.util.events import (
    CHAT_COMBAT,
    CHAT_SELF_DESTRUCT,
    CHAT_SYSTEM,
    Chat,
    Explosion,
    StateChanged,
)
from planetserver.util.geometry import travel_seconds

if TYPE_CHECKING:
    from planetserver.engine.world import World
    from planetserver.loaders.game_config_loader import GameConfig
    from planetserver.models.player import Player

log = logging.getLogger(__name__)

Response = Optional[dict[str, Any]]

UPGRADE_LEVEL = "lvl"
UPGRADE_MILITARY = "military"
UPGRADE_FORT = "fort"


def upgrade_cost(upgrade: str, level: int, gc: GameConfig) -> int:
    """Resource cost to raise an upgrade from ``level`` to ``level + 1``.

    The economy level is 1-based, so its exponent is shifted by one.
    """
    if upgrade == UPGRADE_LEVEL:
        return math.floor(gc.level_cost_base * gc.level_cost_mult ** (level - 1))
    if upgrade == UPGRADE_MILITARY:
        return math.floor(gc.military_cost_base * gc.military_cost_mult ** level)
    if upgrade == UPGRADE_FORT:
        return math.floor(gc.fort_cost_base * gc.fort_cost_mult ** level)
    raise ValueError(f"Unknown upgrade: {upgrade!r}")


def fleet_speed(military_lvl: int, gc: GameConfig) -> float:
    """Attack fleet speed, boosted by military level."""
    return gc.fleet_speed * (1 + military_lvl * gc.military_speed_bonus)


class CommandProcessor:
    """Applies validated player intents to the World.

    Args:
        world: The world aggregate all commands act upon.
    """

    def __init__(self, world: World) -> None:
        self._world = world
        self._config = world.config

    def _player(self, nick: Optional[str]) -> Optional[Player]:
        return self._world.players.get(nick)

    # -- Session ---------------------------------------------------------

    def join(self, nick: Any) -> dict[str, Any]:
        """Create or restore the player for ``nick``."""
        gc = self._config
        if not isinstance(nick, str):
            return {"type": "joinResult", "ok": False, "msg": "Invalid nickname"}
        nick = nick.strip()
        if not gc.nick_min_length <= len(nick) <= gc.nick_max_length:
            return {
                "type": "joinResult",
                "ok": False,
                "msg": f"Nickname must be {gc.nick_min_length}-{gc.nick_max_length} characters",
            }

        world = self._world
        player = world.players.get(nick)
        restored = player is not None
        if player is not None:
            player.online = True
            player.last_seen_ms = world.now_ms
            log.info("Player restored: nick=%r", nick)
        else:
            player = world.players.create(nick, now_ms=world.now_ms)

        world.events.emit(StateChanged())
        world.events.emit(Chat(sender=CHAT_SYSTEM, text=f"{nick} joined"))
        return {
            "type": "joinResult",
            "ok": True,
            "restored": restored,
            "player": player.private_view(),
        }

    def leave(self, nick: Optional[str]) -> None:
        """Mark the player offline after its session dropped."""
        player = self._player(nick)
        if player is None:
            return
        player.online = False
        player.last_seen_ms = self._world.now_ms
        log.info("Player offline: nick=%r", nick)
        self._world.events.emit(StateChanged())

    # -- Upgrades --------------------------------------------------------

    def upgrade_level(self, nick: Optional[str]) -> Response:
        return self._upgrade(nick, UPGRADE_LEVEL, "lvl")

    def upgrade_military(self, nick: Optional[str]) -> Response:
        return self._upgrade(nick, UPGRADE_MILITARY, "military_lvl")

    def upgrade_fort(self, nick: Optional[str]) -> Response:
        return self._upgrade(nick, UPGRADE_FORT, "fort_lvl")

    def _upgrade(self, nick: Optional[str], upgrade: str, attr: str) -> Response:
        """Apply one upgrade step.

        The reply names the upgrade kind under ``upgrade`` because ``type``
        is taken by the message envelope (``"upgraded"``).
        """
        player = self._player(nick)
        if player is None:
            return None
        level = getattr(player, attr)
        cost = upgrade_cost(upgrade, level, self._config)
        if player.res < cost:
            return None
        player.res -= cost
        setattr(player, attr, level + 1)
        log.info("Upgrade: %s %s → %d (cost %d)", player.nick, upgrade, level + 1, cost)
        return {
            "type": "upgraded",
            "upgrade": upgrade,
            "newLevel": level + 1,
            "resources": player.res,
        }

    # -- Purchases -------------------------------------------------------

    def buy_fleet(self, nick: Optional[str], amount: int) -> Response:
        player = self._player(nick)
        if player is None:
            return None
        amount = max(1, int(amount))
        cost = amount * self._config.fleet_cost
        if player.res < cost:
            return None
        player.res -= cost
        player.fleet += amount
        return {"type": "fleetBought", "fleet": player.fleet, "resources": player.res}

    def buy_defense(self, nick: Optional[str], amount: int) -> Response:
        player = self._player(nick)
        if player is None:
            return None
        amount = max(1, int(amount))
        cap = self._config.max_defense(player.fort_lvl)
        can_buy = min(amount, math.floor(cap - player.defense))
        if can_buy <= 0:
            return {"type": "info", "msg": "Defense is at the maximum for your fortification level"}
        cost = can_buy * self._config.defense_cost
        if player.res < cost:
            return None
        player.res -= cost
        player.defense += can_buy
        return {
            "type": "defenseBought",
            "defense": math.floor(player.defense),
            "resources": player.res,
        }

    # -- Missions --------------------------------------------------------

    def launch_attack(self, nick: Optional[str], target_nick: Any, count: int = 0) -> Response:
        """Send fleet towards another planet.

        ``count`` > 0 sends at most that many ships; otherwise the whole
        available fleet goes.
        """
        world = self._world
        gc = self._config
        attacker = self._player(nick)
        if attacker is None:
            return None
        if not isinstance(target_nick, str) or target_nick not in world.players:
            return {"type": "attackResult", "ok": False, "msg": "Target not found"}
        if target_nick == attacker.nick:
            return {"type": "attackResult", "ok": False, "msg": "Cannot attack yourself"}

        now = world.now_ms
        if attacker.last_attack_ms is not None:
            elapsed = now - attacker.last_attack_ms
            if elapsed < gc.attack_cooldown_ms:
                remaining = math.ceil((gc.attack_cooldown_ms - elapsed) / 1000)
                return {
                    "type": "attackResult",
                    "ok": False,
                    "msg": f"Cooldown: {remaining} s",
                    "cooldown": remaining,
                }

        to_send = min(count, attacker.fleet) if count > 0 else attacker.fleet
        if to_send <= 0:
            return {"type": "attackResult", "ok": False, "msg": "No fleet to attack with"}

        target = world.players.get(target_nick)
        attacker.fleet -= to_send
        attacker.last_attack_ms = now

        speed = fleet_speed(attacker.military_lvl, gc)
        world.missions.add_attack(
            attacker.nick, target.nick, to_send,
            attacker.x, attacker.y, target.x, target.y, speed,
        )
        eta = travel_seconds(attacker.x, attacker.y, target.x, target.y, speed)

        world.events.emit(Chat(
            sender=CHAT_COMBAT,
            text=f"{attacker.nick} sent {to_send} ships to {target.nick} (ETA ~{eta} s)",
        ))
        world.events.emit(StateChanged())
        return {"type": "attackResult", "ok": True, "fleetSent": to_send, "eta": eta}

    def launch_miner(self, nick: Optional[str], asteroid_id: Optional[str]) -> Response:
        world = self._world
        player = self._player(nick)
        if player is None:
            return None
        if player.fleet < 1:
            return {"type": "info", "msg": "You need at least 1 fleet to mine"}
        asteroid = world.asteroids.get_alive(asteroid_id)
        if asteroid is None:
            return {"type": "info", "msg": "Asteroid already harvested"}

        player.fleet -= 1
        world.missions.add_mine(player.nick, asteroid.id,
                                player.x, player.y, asteroid.x, asteroid.y)
        world.events.emit(StateChanged())
        return {"type": "minerSent", "fleet": player.fleet}

    def self_destruct(self, nick: Optional[str]) -> Response:
        world = self._world
        player = self._player(nick)
        if player is None:
            return None

        world.events.emit(Explosion(x=player.x, y=player.y, big=True))
        world.events.emit(Chat(sender=CHAT_SELF_DESTRUCT, text=f"{player.nick} self-destructed"))
        world.missions.cancel_owned_by(player.nick)
        world.players.remove(player.nick)
        world.events.emit(StateChanged())
        return {"type": "destroyed"}

    # -- Snapshots -------------------------------------------------------

    def public_state(self) -> list[dict[str, Any]]:
        return self._world.players.public_state()

    def public_missions(self) -> list[dict[str, Any]]:
        return self._world.missions.public_view()

    def public_asteroids(self) -> list[dict[str, Any]]:
        return self._world.asteroids.public_view()
