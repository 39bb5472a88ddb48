"""Asteroid model — a one-shot resource node."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Asteroid:
    """A minable asteroid.

    Attributes:
        id: Unique asteroid ID.
        x: World x position.
        y: World y position.
        res: Resource yield, fixed at spawn.
        alive: False once harvested; only the respawn cycle replaces it.
    """

    id: str
    x: float
    y: float
    res: int
    alive: bool = True

    def public_view(self) -> dict[str, Any]:
        return {"id": self.id, "x": self.x, "y": self.y, "res": self.res, "alive": self.alive}
