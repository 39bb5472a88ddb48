"""Asteroid field — owns the asteroid resource nodes and their respawn cycle."""

from __future__ import annotations

import itertools
import logging
import random
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from planetserver.loaders.game_config_loader import GameConfig

from planetserver.models.asteroid import Asteroid

log = logging.getLogger(__name__)


class AsteroidField:
    """The set of asteroids, alive and harvested.

    Harvested asteroids keep their slot until the maintenance cycle
    replaces them, so slot order is stable between respawns.

    Args:
        game_config: Asteroid count, yield range and respawn limits.
        rng: Random source for positions and yields.
    """

    def __init__(self, game_config: GameConfig, rng: random.Random) -> None:
        self._config = game_config
        self._rng = rng
        self._ids = itertools.count(1)
        self._asteroids: list[Asteroid] = []

    def populate(self) -> None:
        """Spawn the initial field."""
        for _ in range(self._config.asteroid_count):
            self._asteroids.append(self._spawn())
        log.info("Asteroid field populated: %d asteroids", len(self._asteroids))

    def _spawn(self) -> Asteroid:
        gc = self._config
        margin = gc.asteroid_margin
        return Asteroid(
            id=f"ast-{next(self._ids)}",
            x=self._rng.randint(margin, gc.map_width - margin),
            y=self._rng.randint(margin, gc.map_height - margin),
            res=self._rng.randint(gc.asteroid_min_res, gc.asteroid_max_res),
        )

    # -- Query -----------------------------------------------------------

    def get(self, asteroid_id: Optional[str]) -> Optional[Asteroid]:
        """Return the asteroid with the given ID, alive or not."""
        for asteroid in self._asteroids:
            if asteroid.id == asteroid_id:
                return asteroid
        return None

    def get_alive(self, asteroid_id: Optional[str]) -> Optional[Asteroid]:
        """Return the asteroid only if it can still be mined."""
        asteroid = self.get(asteroid_id)
        if asteroid is None or not asteroid.alive:
            return None
        return asteroid

    def alive(self) -> list[Asteroid]:
        return [a for a in self._asteroids if a.alive]

    def alive_count(self) -> int:
        return sum(1 for a in self._asteroids if a.alive)

    @property
    def all_asteroids(self) -> list[Asteroid]:
        return self._asteroids

    def __len__(self) -> int:
        return len(self._asteroids)

    # -- Lifecycle -------------------------------------------------------

    def harvest(self, asteroid_id: str) -> int:
        """Mark an asteroid dead and return its yield (0 if already gone)."""
        asteroid = self.get_alive(asteroid_id)
        if asteroid is None:
            return 0
        asteroid.alive = False
        log.debug("Asteroid %s harvested (%d res)", asteroid.id, asteroid.res)
        return asteroid.res

    def maintain(self) -> list[Asteroid]:
        """Respawn asteroids up to the target count, a few per cycle.

        Each respawn replaces the first dead slot, or is appended when
        no dead slot exists.  Returns the newly spawned asteroids.
        """
        missing = self._config.asteroid_count - self.alive_count()
        if missing <= 0:
            return []

        spawned = []
        for _ in range(min(missing, self._config.max_respawn_per_cycle)):
            asteroid = self._spawn()
            dead_idx = next(
                (i for i, a in enumerate(self._asteroids) if not a.alive), None,
            )
            if dead_idx is not None:
                self._asteroids[dead_idx] = asteroid
            else:
                self._asteroids.append(asteroid)
            spawned.append(asteroid)

        log.info(
            "Asteroid respawn: %d spawned, %d alive",
            len(spawned), self.alive_count(),
        )
        return spawned

    # -- Views -----------------------------------------------------------

    def public_view(self) -> list[dict[str, Any]]:
        """Alive asteroids for the ``asteroids`` broadcast."""
        return [a.public_view() for a in self._asteroids if a.alive]
