"""Player registry — owns every Player record and runs the economic tick.

Responsibilities:
- Player creation with seed values and a random spawn position
- Lookup / removal by nickname
- Economic tick: income per level and fortification defense regen
- Public state snapshot for the ``state`` broadcast

All methods operate on Player model objects. No network I/O.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from planetserver.loaders.game_config_loader import GameConfig

from planetserver.models.player import Player

log = logging.getLogger(__name__)


class PlayerRegistry:
    """Registry of all players, keyed by nickname.

    Args:
        game_config: Balance constants (income, defense caps, map size).
        rng: Random source for spawn positions and colors.
    """

    def __init__(self, game_config: GameConfig, rng: random.Random) -> None:
        self._config = game_config
        self._rng = rng
        self._players: dict[str, Player] = {}

    # -- Registry --------------------------------------------------------

    def create(self, nick: str, now_ms: float = 0.0) -> Player:
        """Create and register a fresh player under ``nick``."""
        gc = self._config
        margin = gc.planet_margin
        player = Player(
            nick=nick,
            x=self._rng.randint(margin, gc.map_width - margin),
            y=self._rng.randint(margin, gc.map_height - margin),
            lvl=gc.starting_level,
            res=gc.starting_resources,
            last_seen_ms=now_ms,
            color=f"hsl({self._rng.randint(0, 360)}, 70%, 55%)",
        )
        self._players[nick] = player
        log.info("Player created: nick=%r at (%.0f, %.0f)", nick, player.x, player.y)
        return player

    def get(self, nick: Optional[str]) -> Optional[Player]:
        """Look up a player by nickname."""
        if nick is None:
            return None
        return self._players.get(nick)

    def remove(self, nick: str) -> Optional[Player]:
        """Remove and return a player."""
        player = self._players.pop(nick, None)
        if player is not None:
            log.info("Player removed: nick=%r", nick)
        return player

    def __contains__(self, nick: object) -> bool:
        return nick in self._players

    def __len__(self) -> int:
        return len(self._players)

    @property
    def all_players(self) -> dict[str, Player]:
        """Read-only access to all registered players."""
        return self._players

    # -- Economic tick ---------------------------------------------------

    def step_all(self) -> None:
        """Advance every player by one economic tick."""
        for player in self._players.values():
            self.step(player)

    def step(self, player: Player) -> None:
        """Apply income and fortification regen to a single player."""
        player.res += player.lvl * self._config.income_per_level
        if player.fort_lvl > 0:
            cap = self._config.max_defense(player.fort_lvl)
            if player.defense < cap:
                regen = player.fort_lvl * self._config.defense_regen_per_fort_level
                player.defense = min(cap, player.defense + regen)

    # -- Views -----------------------------------------------------------

    def public_state(self) -> list[dict[str, Any]]:
        """Public view of every player, in registration order."""
        return [p.public_view() for p in self._players.values()]
