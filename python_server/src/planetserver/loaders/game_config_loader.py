"""Game configuration — loads tunable constants from config/game.yaml.

Provides a single ``GameConfig`` dataclass that is loaded once at startup
and then passed (or injected) wherever constants are needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

log = logging.getLogger(__name__)

DEFAULT_GAME_CONFIG_PATH = "config/game.yaml"


@dataclass
class GameConfig:
    """All tunable gameplay constants.

    Loaded from ``config/game.yaml``.  Every field has a sensible default
    so the server can start even without the file.
    """

    # -- Timing ------------------------------------------------------
    economy_tick_ms: float = 1000.0
    mission_tick_ms: float = 50.0
    asteroid_respawn_ms: float = 60_000.0
    asteroid_broadcast_ms: float = 2000.0

    # -- World -------------------------------------------------------
    map_width: int = 4000
    map_height: int = 3000
    planet_margin: int = 200
    asteroid_margin: int = 100

    # -- New player defaults -----------------------------------------
    starting_level: int = 1
    starting_resources: int = 50
    nick_min_length: int = 3
    nick_max_length: int = 16

    # -- Economy -----------------------------------------------------
    income_per_level: int = 8
    level_cost_base: float = 100.0
    level_cost_mult: float = 1.6
    military_cost_base: float = 120.0
    military_cost_mult: float = 1.7
    fort_cost_base: float = 100.0
    fort_cost_mult: float = 1.5
    fleet_cost: int = 10
    defense_cost: int = 15

    # -- Fortification -----------------------------------------------
    base_max_defense: float = 5.0
    max_defense_per_fort_level: float = 10.0
    defense_regen_per_fort_level: float = 0.5

    # -- Combat ------------------------------------------------------
    defense_factor: float = 0.6
    military_damage_bonus: float = 0.05
    military_speed_bonus: float = 0.1
    fleet_speed: float = 120.0
    attack_cooldown_ms: float = 30_000.0
    loot_share: float = 0.5
    surviving_share: float = 0.7
    defense_damage_share: float = 0.3
    arrival_epsilon: float = 5.0

    # -- Asteroids ---------------------------------------------------
    asteroid_count: int = 12
    asteroid_min_res: int = 50
    asteroid_max_res: int = 200
    max_respawn_per_cycle: int = 2
    miner_speed: float = 80.0

    # -- Randomness --------------------------------------------------
    rng_seed: Optional[int] = None

    # -- Network -----------------------------------------------------
    ws_host: str = "0.0.0.0"
    ws_port: int = 8765
    rest_port: int = 8080
    ws_ping_interval: int = 30
    ws_ping_timeout: int = 10
    ws_max_message_size: int = 65_536

    # -- Derived helpers ---------------------------------------------

    def max_defense(self, fort_lvl: int) -> float:
        """Defense cap for a given fortification level."""
        return self.base_max_defense + fort_lvl * self.max_defense_per_fort_level


def load_game_config(path: str = DEFAULT_GAME_CONFIG_PATH) -> GameConfig:
    """Load game configuration from a YAML file.

    Missing keys fall back to dataclass defaults.  If the file does not
    exist, a warning is logged and pure defaults are returned.
    """
    p = Path(path)
    if not p.exists():
        log.warning("Game config not found at %s — using defaults", p)
        return GameConfig()

    with p.open() as f:
        raw = yaml.safe_load(f) or {}

    log.info("Loaded game config from %s (%d keys)", p, len(raw))

    unknown = sorted(k for k in raw if k not in GameConfig.__dataclass_fields__)
    if unknown:
        log.warning("Ignoring unknown game config keys: %s", ", ".join(unknown))

    return GameConfig(**{
        k: v for k, v in raw.items()
        if k in GameConfig.__dataclass_fields__
    })
