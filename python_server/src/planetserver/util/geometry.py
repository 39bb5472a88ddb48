"""Plane geometry helpers for straight-line travel."""

from __future__ import annotations

import math


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two world positions."""
    return math.hypot(x2 - x1, y2 - y1)


def step_towards(
    x: float, y: float, tx: float, ty: float, step: float,
) -> tuple[float, float]:
    """Move ``step`` units from (x, y) along the straight line to (tx, ty).

    The caller guarantees the target is farther away than ``step``.
    """
    dx = tx - x
    dy = ty - y
    d = math.hypot(dx, dy)
    if d == 0.0:
        return x, y
    return x + dx / d * step, y + dy / d * step


def travel_seconds(x1: float, y1: float, x2: float, y2: float, speed: float) -> int:
    """Whole seconds needed to cover the distance at ``speed`` (rounded up)."""
    return math.ceil(distance(x1, y1, x2, y2) / speed)
