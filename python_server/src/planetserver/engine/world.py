"""World aggregate — the single owner of all shared game state.

Bundles the player registry, asteroid field and mission engine with the
event bus, the clock and the random source, and exposes the four tick
callbacks the clock drives.  Every component receives the World
explicitly; nothing lives in module globals, so tests build an isolated
World each.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from planetserver.engine.asteroid_field import AsteroidField
from planetserver.engine.game_loop import WorldClock
from planetserver.engine.mission_engine import MissionEngine
from planetserver.engine.player_registry import PlayerRegistry
from planetserver.engine.resolvers import resolve
from planetserver.loaders.game_config_loader import GameConfig
from planetserver.models.mission import Mission
from planetserver.util.events import AsteroidsChanged, EventBus, MissionsMoved, StateChanged

log = logging.getLogger(__name__)


class World:
    """All mutable game state plus the ticks that advance it.

    Args:
        game_config: Balance constants; defaults when omitted.
        event_bus: Bus the core emits on; a private one when omitted.
        clock: Simulated clock; a fresh one starting at 0 when omitted.
        rng: Random source; seeded from ``game_config.rng_seed`` when omitted.
    """

    def __init__(
        self,
        game_config: Optional[GameConfig] = None,
        event_bus: Optional[EventBus] = None,
        clock: Optional[WorldClock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = game_config or GameConfig()
        self.events = event_bus or EventBus()
        self.clock = clock or WorldClock()
        self.rng = rng or random.Random(self.config.rng_seed)

        self.players = PlayerRegistry(self.config, self.rng)
        self.asteroids = AsteroidField(self.config, self.rng)
        self.missions = MissionEngine(self.config, resolver=self._resolve_mission)

    @property
    def now_ms(self) -> float:
        return self.clock.now_ms

    def _resolve_mission(self, mission: Mission) -> None:
        resolve(mission, self)

    # -- Ticks -----------------------------------------------------------

    def economy_tick(self) -> None:
        """Income and defense regen for everyone, then a state broadcast."""
        self.players.step_all()
        self.events.emit(StateChanged())

    def mission_tick(self) -> None:
        """Move and resolve missions; broadcast positions while any fly."""
        views = self.missions.advance(self.config.mission_tick_ms / 1000.0)
        if views is not None:
            self.events.emit(MissionsMoved(missions=tuple(views)))

    def asteroid_tick(self) -> None:
        """Respawn harvested asteroids."""
        self.asteroids.maintain()

    def asteroid_broadcast_tick(self) -> None:
        self.events.emit(AsteroidsChanged())

    def schedule(self) -> None:
        """Register the periodic ticks on the clock."""
        gc = self.config
        self.clock.every(gc.economy_tick_ms, self.economy_tick, "economy")
        self.clock.every(gc.mission_tick_ms, self.mission_tick, "missions")
        self.clock.every(gc.asteroid_respawn_ms, self.asteroid_tick, "asteroid_respawn")
        self.clock.every(gc.asteroid_broadcast_ms, self.asteroid_broadcast_tick,
                         "asteroid_broadcast")
        log.info(
            "World ticks scheduled: economy=%.0fms missions=%.0fms "
            "respawn=%.0fms asteroids=%.0fms",
            gc.economy_tick_ms, gc.mission_tick_ms,
            gc.asteroid_respawn_ms, gc.asteroid_broadcast_ms,
        )
