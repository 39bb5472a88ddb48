"""Mission resolvers — what happens when a mission reaches its target.

Three stateless resolvers, one per mission kind:

- attack → combat against the target planet
- mine   → harvest the asteroid and turn home
- return → unload the cargo at the owner's planet

Resolvers read and write through the World for the duration of one call
and keep no references afterwards.  Players and asteroids may already be
gone when a mission arrives (destroyed or harvested earlier in the same
tick); those cases are benign no-ops.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable

from planetserver.models.mission import Mission, MissionKind
from planetserver.util.events import (
    CHAT_COMBAT,
    CHAT_MINING,
    Chat,
    Explosion,
    PlayerDefeated,
    StateChanged,
)

if TYPE_CHECKING:
    from planetserver.engine.world import World

log = logging.getLogger(__name__)


# -- Combat --------------------------------------------------------------

def attack_power(fleet_count: int, military_lvl: int, military_bonus: float) -> float:
    """Strength of an arriving fleet."""
    return fleet_count * (1 + military_lvl * military_bonus)


def defense_power(fleet: int, defense: float, defense_factor: float) -> float:
    """Strength of a planet's home fleet and defense stock."""
    return (fleet + defense) * defense_factor


def resolve_attack(mission: Mission, world: World) -> None:
    """Resolve combat between an arriving fleet and its target planet."""
    gc = world.config
    attacker = world.players.get(mission.owner)
    target = world.players.get(mission.target_nick)
    if attacker is None or target is None:
        log.debug(
            "Attack %d dropped: %s→%s (player gone)",
            mission.mission_id, mission.owner, mission.target_nick,
        )
        return

    atk = attack_power(mission.fleet_count, attacker.military_lvl, gc.military_damage_bonus)
    dfn = defense_power(target.fleet, target.defense, gc.defense_factor)

    if atk > dfn:
        stolen = math.floor(target.res * gc.loot_share)
        attacker.res += stolen
        attacker.fleet += math.floor(mission.fleet_count * gc.surviving_share)

        world.events.emit(Explosion(x=target.x, y=target.y, big=True))
        world.events.emit(Chat(
            sender=CHAT_COMBAT,
            text=f"{attacker.nick} destroyed planet {target.nick}! Stole {stolen} res",
        ))

        world.missions.cancel_owned_by(target.nick)
        world.players.remove(target.nick)
        world.events.emit(PlayerDefeated(
            nick=target.nick,
            killed_by=attacker.nick,
            lost_resources=target.res,
            had_level=target.lvl,
            had_fleet=target.fleet,
        ))
        log.info(
            "Combat: %s beat %s (%.1f > %.1f), stole %d",
            attacker.nick, target.nick, atk, dfn, stolen,
        )
    else:
        damage = math.floor(mission.fleet_count * gc.defense_damage_share)
        target.defense = max(0.0, target.defense - damage)

        world.events.emit(Explosion(x=mission.x, y=mission.y, big=False))
        world.events.emit(Chat(
            sender=CHAT_COMBAT,
            text=f"{attacker.nick} attacked {target.nick} and lost! Fleet destroyed.",
        ))
        log.info(
            "Combat: %s repelled %s (%.1f <= %.1f), defense -%d",
            target.nick, attacker.nick, atk, dfn, damage,
        )

    world.events.emit(StateChanged())


# -- Mining --------------------------------------------------------------

def resolve_mining(mission: Mission, world: World) -> None:
    """Harvest the target asteroid and send the miner home."""
    owner = world.players.get(mission.owner)

    if world.asteroids.get_alive(mission.asteroid_id) is None:
        # Someone else got there first; fly home empty.
        home_x, home_y = (owner.x, owner.y) if owner else (mission.x, mission.y)
        world.missions.add_return(mission.owner, mission.x, mission.y,
                                  home_x, home_y, cargo=0)
        return

    cargo = world.asteroids.harvest(mission.asteroid_id)
    if owner is not None:
        world.missions.add_return(mission.owner, mission.x, mission.y,
                                  owner.x, owner.y, cargo=cargo)
    world.events.emit(Chat(
        sender=CHAT_MINING,
        text=f"{mission.owner} mined an asteroid (+{cargo} res in transit)",
    ))


# -- Return --------------------------------------------------------------

def resolve_return(mission: Mission, world: World) -> None:
    """Unload a returning miner's cargo at its home planet."""
    owner = world.players.get(mission.owner)
    if owner is None or mission.cargo <= 0:
        return
    owner.res += mission.cargo
    world.events.emit(Chat(
        sender=CHAT_MINING,
        text=f"{mission.owner}'s miner returned with {mission.cargo} res",
    ))


# -- Dispatch ------------------------------------------------------------

RESOLVERS: dict[MissionKind, Callable[[Mission, "World"], None]] = {
    MissionKind.ATTACK: resolve_attack,
    MissionKind.MINE: resolve_mining,
    MissionKind.RETURN: resolve_return,
}


def resolve(mission: Mission, world: World) -> None:
    """Run the resolver matching the mission's kind."""
    RESOLVERS[mission.kind](mission, world)
