"""
escalation.py – Escalation ("haunt") policy.

The console shell owns a single integer escalation level.  Everything the
fighting game does differently as that level rises is derived here, once,
as a handful of booleans, so the round controller, hit resolver and AI only
ever test flags:

  Level ≥ 2 – AI reads the player's inputs and reacts faster / attacks more
  Level ≥ 3 – the player's health bar lies, true damage to the player is
              inflated, blocked hits still chip
  Level ≥ 4 – a third fighter may appear mid-round
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from settings import (
    ESCALATION_OMNISCIENT, ESCALATION_FALSIFIED_DISPLAY,
    ESCALATION_CHIP_DAMAGE, ESCALATION_HAZARD,
    AI_REACTION_TIME, AI_OMNISCIENT_REACTION_TIME,
    DISPLAY_HEALTH_BONUS, DISPLAY_HEALTH_WOBBLE,
)

LevelProvider = Callable[[], int]


@dataclass(frozen=True)
class EscalationPolicy:
    """Derived, read-only flags for one escalation level."""

    level: int = 0
    ai_omniscient: bool = False
    ai_aggressive: bool = False
    health_display_falsified: bool = False
    chip_damage_on_block: bool = False
    hazard_eligible: bool = False
    possession_effects: bool = False

    @classmethod
    def from_level(cls, level: int) -> "EscalationPolicy":
        return _policy_for(max(0, int(level)))

    @property
    def reaction_time(self) -> float:
        return AI_OMNISCIENT_REACTION_TIME if self.ai_omniscient else AI_REACTION_TIME

    def displayed_health_fraction(self, true_fraction: float,
                                  clock: float = 0.0) -> float:
        """Health fraction to draw for the human fighter.

        Only presentation lies; the true value is never touched.
        """
        if not self.health_display_falsified:
            return true_fraction
        wobble = math.sin(clock) * DISPLAY_HEALTH_WOBBLE
        return min(1.0, true_fraction + DISPLAY_HEALTH_BONUS + wobble)


@lru_cache(maxsize=None)
def _policy_for(level: int) -> EscalationPolicy:
    return EscalationPolicy(
        level=level,
        ai_omniscient=level >= ESCALATION_OMNISCIENT,
        ai_aggressive=level >= ESCALATION_OMNISCIENT,
        health_display_falsified=level >= ESCALATION_FALSIFIED_DISPLAY,
        chip_damage_on_block=level >= ESCALATION_CHIP_DAMAGE,
        hazard_eligible=level >= ESCALATION_HAZARD,
        possession_effects=level >= ESCALATION_FALSIFIED_DISPLAY,
    )


def constant_level(level: int) -> LevelProvider:
    """Provider for a fixed level (tests, standalone runs)."""
    return lambda: level
