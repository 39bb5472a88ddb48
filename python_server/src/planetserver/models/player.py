"""Player model — one planet per nickname.

A Player holds the economic and military state of a single planet:
resources, available fleet, defense stock and the three upgrade levels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Player:
    """Complete state of a player's planet.

    Attributes:
        nick: Unique nickname (registry key).
        x: Planet x position in world units.
        y: Planet y position in world units.
        lvl: Economy level; drives income per economic tick.
        res: Resource stockpile.
        fleet: Ships available at home (not in transit).
        defense: Defense stock; fractional while regenerating.
        military_lvl: Raises attack power and fleet speed.
        fort_lvl: Raises the defense cap and defense regeneration.
        last_attack_ms: Clock time of the last launched attack, None if never.
        last_seen_ms: Clock time of the last join or disconnect.
        online: Whether a session is currently bound to this player.
        color: Display color as a CSS ``hsl()`` string.
    """

    nick: str
    x: float
    y: float
    lvl: int = 1
    res: int = 50
    fleet: int = 0
    defense: float = 0.0
    military_lvl: int = 0
    fort_lvl: int = 0
    last_attack_ms: Optional[float] = None
    last_seen_ms: float = 0.0
    online: bool = True
    color: str = "hsl(0, 70%, 55%)"

    # -- Views -----------------------------------------------------------

    def public_view(self) -> dict[str, Any]:
        """Fields every client may see in the ``state`` broadcast."""
        return {
            "nick": self.nick,
            "x": self.x,
            "y": self.y,
            "lvl": self.lvl,
            "res": self.res,
            "fleet": self.fleet,
            "defense": math.floor(self.defense),
            "militaryLvl": self.military_lvl,
            "fortLvl": self.fort_lvl,
            "lastAttack": self.last_attack_ms or 0,
            "online": self.online,
            "color": self.color,
        }

    def private_view(self) -> dict[str, Any]:
        """Full record sent to the owning session on join."""
        view = self.public_view()
        view["defense"] = self.defense
        view["lastSeen"] = self.last_seen_ms
        return view
