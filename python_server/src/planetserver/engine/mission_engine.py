"""Mission engine — moves in-flight missions and detects arrival.

Handles the lifecycle of missions:
  launched → travelling → arrived (resolved) → removed

Each mission tick moves every mission a fixed step along the straight
line to its target.  When the remaining distance drops under one step
plus the arrival epsilon the mission is handed to its resolver and
removed.  Resolvers may insert new missions (a miner turning home) or
cancel other players' missions (a defeated planet), so every tick works
on a snapshot taken before the pass.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

if TYPE_CHECKING:
    from planetserver.loaders.game_config_loader import GameConfig

from planetserver.models.mission import Mission, MissionKind
from planetserver.util.geometry import distance, step_towards

log = logging.getLogger(__name__)

Resolver = Callable[[Mission], None]


class MissionEngine:
    """Owner of the active mission collection.

    Args:
        game_config: Arrival epsilon and miner speed.
        resolver: Called once with each arriving mission before removal.
    """

    def __init__(self, game_config: GameConfig,
                 resolver: Optional[Resolver] = None) -> None:
        self._config = game_config
        self._resolver = resolver
        self._missions: dict[int, Mission] = {}
        self._next_mission_id: int = 1

    # -- Query -----------------------------------------------------------

    def get(self, mission_id: int) -> Optional[Mission]:
        return self._missions.get(mission_id)

    def all_missions(self) -> list[Mission]:
        """Active missions in insertion order."""
        return list(self._missions.values())

    def missions_of(self, owner: str) -> list[Mission]:
        """Active missions launched by ``owner``."""
        return [m for m in self._missions.values() if m.owner == owner]

    def __len__(self) -> int:
        return len(self._missions)

    def public_view(self) -> list[dict[str, Any]]:
        return [m.public_view() for m in self._missions.values()]

    # -- Creation --------------------------------------------------------

    def _insert(self, mission: Mission) -> Mission:
        self._missions[mission.mission_id] = mission
        self._next_mission_id += 1
        return mission

    def add_attack(self, owner: str, target_nick: str, fleet_count: int,
                   x: float, y: float, tx: float, ty: float,
                   speed: float) -> Mission:
        mission = self._insert(Mission(
            mission_id=self._next_mission_id,
            kind=MissionKind.ATTACK,
            owner=owner, x=x, y=y, tx=tx, ty=ty, speed=speed,
            target_nick=target_nick,
            fleet_count=fleet_count,
        ))
        log.info(
            "Attack launched: id=%d %s→%s fleet=%d speed=%.1f",
            mission.mission_id, owner, target_nick, fleet_count, speed,
        )
        return mission

    def add_mine(self, owner: str, asteroid_id: str,
                 x: float, y: float, tx: float, ty: float) -> Mission:
        mission = self._insert(Mission(
            mission_id=self._next_mission_id,
            kind=MissionKind.MINE,
            owner=owner, x=x, y=y, tx=tx, ty=ty,
            speed=self._config.miner_speed,
            asteroid_id=asteroid_id,
        ))
        log.info("Miner launched: id=%d owner=%s asteroid=%s",
                 mission.mission_id, owner, asteroid_id)
        return mission

    def add_return(self, owner: str, x: float, y: float,
                   tx: float, ty: float, cargo: int) -> Mission:
        mission = self._insert(Mission(
            mission_id=self._next_mission_id,
            kind=MissionKind.RETURN,
            owner=owner, x=x, y=y, tx=tx, ty=ty,
            speed=self._config.miner_speed,
            cargo=cargo,
        ))
        log.debug("Miner returning: id=%d owner=%s cargo=%d",
                  mission.mission_id, owner, cargo)
        return mission

    # -- Removal ---------------------------------------------------------

    def remove(self, mission: Mission) -> None:
        mission.active = False
        self._missions.pop(mission.mission_id, None)

    def cancel_owned_by(self, owner: str) -> int:
        """Drop every mission of ``owner`` without resolving it."""
        cancelled = self.missions_of(owner)
        for mission in cancelled:
            self.remove(mission)
        if cancelled:
            log.info("Cancelled %d missions of %s", len(cancelled), owner)
        return len(cancelled)

    # -- Tick ------------------------------------------------------------

    def has_arrived(self, mission: Mission, dt: float) -> bool:
        remaining = distance(mission.x, mission.y, mission.tx, mission.ty)
        return remaining < mission.speed * dt + self._config.arrival_epsilon

    def advance(self, dt: float) -> Optional[Iterator[dict[str, Any]]]:
        """Advance all missions by ``dt`` seconds.

        Missions inserted during the pass wait for the next tick;
        missions cancelled during the pass are skipped.

        Returns a single-use iterator of public mission views, or None
        when no mission is left in flight.
        """
        for mission in list(self._missions.values()):
            if not mission.active:
                continue
            if self.has_arrived(mission, dt):
                if self._resolver is not None:
                    self._resolver(mission)
                self.remove(mission)
            else:
                mission.x, mission.y = step_towards(
                    mission.x, mission.y, mission.tx, mission.ty,
                    mission.speed * dt,
                )

        if not self._missions:
            return None
        return _views(list(self._missions.values()))


def _views(missions: list[Mission]) -> Iterator[dict[str, Any]]:
    for mission in missions:
        yield mission.public_view()
