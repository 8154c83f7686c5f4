"""
attack_catalog.py – Static move table (punch / kick / special).

Every move is split into three timing phases measured in ticks:

    startup → active → recovery

The sum is the full animation length.  ``active_frames`` is the only window
in which a hit can land, and the resolver narrows that further to the first
active tick (see systems/hit_resolver.py).

The table is validated once, when it is built, so a malformed entry fails on
import instead of in the middle of a round.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from settings import ATTACK_TABLE, HITSTUN_FRAME_RATE

MOVE_NAMES: tuple[str, ...] = ("punch", "kick", "special")


class AttackHeight(Enum):
    """Height category. Categorisation only; blocking ignores it."""

    HIGH = "high"
    MID = "mid"
    LOW = "low"


class CatalogError(ValueError):
    """Raised when the move table is malformed."""


class UnknownMoveError(KeyError):
    """Raised when a move name is not in the catalog."""


@dataclass(frozen=True)
class AttackDefinition:
    name: str
    damage: int
    range: float
    startup_frames: int
    active_frames: int
    recovery_frames: int
    hitstun_frames: int
    height: AttackHeight

    @property
    def total_frames(self) -> int:
        return self.startup_frames + self.active_frames + self.recovery_frames

    @property
    def hitstun_seconds(self) -> float:
        return self.hitstun_frames / HITSTUN_FRAME_RATE

    def is_active_frame(self, frame: int) -> bool:
        return self.startup_frames <= frame < self.startup_frames + self.active_frames


def _build_definition(name: str, raw: Mapping) -> AttackDefinition:
    try:
        definition = AttackDefinition(
            name=name,
            damage=int(raw["damage"]),
            range=float(raw["range"]),
            startup_frames=int(raw["startup"]),
            active_frames=int(raw["active"]),
            recovery_frames=int(raw["recovery"]),
            hitstun_frames=int(raw["hitstun"]),
            height=AttackHeight(raw["height"]),
        )
    except KeyError as exc:
        raise CatalogError(f"move '{name}' is missing field {exc}") from exc
    except ValueError as exc:
        raise CatalogError(f"move '{name}': {exc}") from exc

    if definition.damage < 0:
        raise CatalogError(f"move '{name}' has negative damage")
    if definition.range <= 0:
        raise CatalogError(f"move '{name}' has no reach")
    if definition.startup_frames < 0 or definition.recovery_frames < 0:
        raise CatalogError(f"move '{name}' has negative timing")
    if definition.active_frames <= 0:
        raise CatalogError(f"move '{name}' has no active frames")
    if definition.hitstun_frames < 0:
        raise CatalogError(f"move '{name}' has negative hitstun")
    return definition


def build_catalog(table: Mapping[str, Mapping]) -> dict[str, AttackDefinition]:
    """Validate *table* and return name → AttackDefinition.

    Every name in MOVE_NAMES must be present and nothing else is allowed.
    """
    unknown = set(table) - set(MOVE_NAMES)
    if unknown:
        raise CatalogError(f"unknown move names: {sorted(unknown)}")
    missing = [name for name in MOVE_NAMES if name not in table]
    if missing:
        raise CatalogError(f"missing moves: {missing}")
    return {name: _build_definition(name, table[name]) for name in MOVE_NAMES}


ATTACKS: dict[str, AttackDefinition] = build_catalog(ATTACK_TABLE)


def get_attack(name: str) -> AttackDefinition:
    try:
        return ATTACKS[name]
    except KeyError:
        raise UnknownMoveError(name) from None
