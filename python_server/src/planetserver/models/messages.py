"""Network message models.

Typed Pydantic models for every client → server command.  Each command
type gets its own model so payloads are validated and coerced at the
gateway boundary, before they reach the command processor.
"""

from __future__ import annotations

import math
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_int(value: Any, default: int) -> int:
    """Lenient integer coercion for client-supplied quantities.

    Numbers and numeric strings are floored; anything else (including
    zero, NaN and infinities) falls back to ``default``.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number == 0:
        return default
    return math.floor(number)


# -- Base ----------------------------------------------------------------

class GameMessage(BaseModel):
    """Base class for all game messages."""

    model_config = ConfigDict(populate_by_name=True)

    type: str


# -- Session -------------------------------------------------------------

class JoinRequest(GameMessage):
    type: Literal["join"] = "join"
    nick: Any = None


# -- Upgrades ------------------------------------------------------------

class UpgradeLevelRequest(GameMessage):
    type: Literal["upgradeLvl"] = "upgradeLvl"


class UpgradeMilitaryRequest(GameMessage):
    type: Literal["upgradeMilitary"] = "upgradeMilitary"


class UpgradeFortRequest(GameMessage):
    type: Literal["upgradeFort"] = "upgradeFort"


# -- Purchases -----------------------------------------------------------

class BuyFleetRequest(GameMessage):
    type: Literal["buyFleet"] = "buyFleet"
    amount: int = 1

    @field_validator("amount", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> int:
        return max(1, coerce_int(value, 1))


class BuyDefenseRequest(GameMessage):
    type: Literal["buyDefense"] = "buyDefense"
    amount: int = 1

    @field_validator("amount", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> int:
        return max(1, coerce_int(value, 1))


# -- Missions ------------------------------------------------------------

class AttackRequest(GameMessage):
    """Launch an attack.  ``count`` of 0 (or missing) sends the whole fleet."""

    type: Literal["attack"] = "attack"
    target: Any = None
    count: int = 0

    @field_validator("count", mode="before")
    @classmethod
    def _whole_ships(cls, value: Any) -> int:
        return coerce_int(value, 0)


class MineRequest(GameMessage):
    type: Literal["mine"] = "mine"
    asteroid_id: Optional[str] = Field(default=None, alias="asteroidId")

    @field_validator("asteroid_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class SelfDestructRequest(GameMessage):
    type: Literal["selfDestruct"] = "selfDestruct"


# -- Registry ------------------------------------------------------------

MESSAGE_TYPES: dict[str, type[GameMessage]] = {
    "join": JoinRequest,
    "upgradeLvl": UpgradeLevelRequest,
    "upgradeMilitary": UpgradeMilitaryRequest,
    "upgradeFort": UpgradeFortRequest,
    "buyFleet": BuyFleetRequest,
    "buyDefense": BuyDefenseRequest,
    "attack": AttackRequest,
    "mine": MineRequest,
    "selfDestruct": SelfDestructRequest,
}


def parse_message(data: dict[str, Any]) -> GameMessage:
    """Parse a raw dict into the appropriate typed message model."""
    msg_type = data.get("type", "")
    model_cls = MESSAGE_TYPES.get(msg_type, GameMessage)
    return model_cls.model_validate(data)
