"""Mission model — a fleet or miner in flight.

A Mission moves in a straight line from where it was launched towards a
target position captured at creation time, and is resolved once it
arrives.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class MissionKind(Enum):
    """Kinds of missions."""

    ATTACK = "attack"
    MINE = "mine"
    RETURN = "return"


@dataclass
class Mission:
    """State of an in-flight mission.

    Attributes:
        mission_id: Unique mission ID.
        kind: Which resolver handles the arrival.
        owner: Nick of the launching player.
        x: Current x position.
        y: Current y position.
        tx: Target x position (never re-aimed).
        ty: Target y position (never re-aimed).
        speed: World units per second.
        target_nick: Defender nick (attack only).
        fleet_count: Ships committed (attack only).
        asteroid_id: Target asteroid (mine only).
        cargo: Resources carried home (return only).
        active: False once resolved or cancelled.
    """

    mission_id: int
    kind: MissionKind
    owner: str
    x: float
    y: float
    tx: float
    ty: float
    speed: float
    target_nick: Optional[str] = None
    fleet_count: int = 0
    asteroid_id: Optional[str] = None
    cargo: int = 0
    active: bool = True

    def public_view(self) -> dict[str, Any]:
        """Fields broadcast to every client each mission tick."""
        return {
            "type": self.kind.value,
            "owner": self.owner,
            "x": self.x,
            "y": self.y,
            "tx": self.tx,
            "ty": self.ty,
            "targetNick": self.target_nick,
            "cargo": self.cargo,
        }
