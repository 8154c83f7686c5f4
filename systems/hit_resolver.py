"""
hit_resolver.py – Attack-vs-hurtbox resolution and body push-apart.

Responsibilities:
- Decide whether an attack connects this tick (single-frame rule)
- Blocked hits: half pushback, optional chip damage, no stun
- Clean hits: damage, hitstun or knockdown, pushback
- Keep the two bodies from interpenetrating

The resolver mutates the two fighters it is given and returns a
``HitResult`` describing what happened; the round controller turns that
into combo, score, cues and sparks.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

from settings import (
    PUSH_BACK, BLOCK_PUSH_MULT, CHIP_DAMAGE_FRACTION, FALSIFIED_DAMAGE_MULT,
    KNOCKDOWN_PUSH_MULT, KNOCKDOWN_LIFT, BODY_OVERLAP_FRACTION, ARENA_LEFT,
)
from entities.fighter import Fighter, CombatState
from systems.escalation import EscalationPolicy


class HitResult:
    """Outcome of one attacker → defender check."""

    __slots__ = (
        "connected", "blocked", "knockdown", "damage", "attempted_damage",
        "attack_name", "spark_x", "spark_y",
    )

    def __init__(self):
        self.connected = False
        self.blocked = False
        self.knockdown = False
        self.damage = 0
        self.attempted_damage = 0   # before the health floor caps it
        self.attack_name: str | None = None
        self.spark_x = 0.0
        self.spark_y = 0.0

    @property
    def landed(self) -> bool:
        """True for a clean (unblocked) hit."""
        return self.connected and not self.blocked

    def __repr__(self):
        return (f"HitResult(connected={self.connected}, blocked={self.blocked}, "
                f"knockdown={self.knockdown}, damage={self.damage}, "
                f"attack={self.attack_name!r})")


class HitResolver:
    """Stateless combat resolver for a pair of fighters."""

    # ══════════════════════════════════════════════════════
    #  Attack → hurtbox
    # ══════════════════════════════════════════════════════

    @staticmethod
    def is_connect_frame(attacker: Fighter) -> bool:
        """An attack can only land on the tick where the frame counter equals
        its startup length – never elsewhere in the active window."""
        attack = attacker.active_attack
        if attacker.state != CombatState.ATTACKING or attack is None:
            return False
        return attack.is_active_frame(attacker.attack_frame) and \
            attacker.attack_frame == attack.startup_frames

    def resolve(self, attacker: Fighter, defender: Fighter,
                policy: EscalationPolicy,
                defender_is_human: bool = False) -> HitResult:
        result = HitResult()
        if not self.is_connect_frame(attacker):
            return result

        attack = attacker.active_attack
        result.attack_name = attack.name
        if not attacker.attack_box().overlaps(defender.body_box):
            return result
        if defender.is_invincible:
            logger.debug("%s %s whiffed on invincible %s",
                         attacker.name, attack.name, defender.name)
            return result

        result.connected = True
        away = self._away_direction(attacker, defender)

        if defender.state == CombatState.BLOCKING:
            result.blocked = True
            chip = 0
            if policy.chip_damage_on_block:
                chip = math.floor(attack.damage * CHIP_DAMAGE_FRACTION)
            result.damage = defender.receive_block(chip, away * PUSH_BACK * BLOCK_PUSH_MULT)
            result.spark_x = defender.x + defender.facing * 10
            result.spark_y = defender.y - defender.height * 0.5
            logger.debug("%s blocked %s (chip %d)", defender.name, attack.name, result.damage)
            return result

        damage = attack.damage
        if policy.health_display_falsified and defender_is_human:
            damage = math.floor(damage * FALSIFIED_DAMAGE_MULT)
        result.attempted_damage = damage

        if attack.name == "special":
            result.knockdown = True
            result.damage = defender.receive_hit(
                damage, 0.0, away * PUSH_BACK * KNOCKDOWN_PUSH_MULT,
                knockdown=True, lift=KNOCKDOWN_LIFT,
            )
        else:
            result.damage = defender.receive_hit(
                damage, attack.hitstun_seconds, away * PUSH_BACK,
            )

        result.spark_x = (attacker.x + defender.x) / 2
        result.spark_y = defender.y - defender.height * 0.5
        logger.debug("%s %s hit %s for %d (health %d)", attacker.name,
                     attack.name, defender.name, result.damage, defender.health)
        return result

    # ══════════════════════════════════════════════════════
    #  Body overlap
    # ══════════════════════════════════════════════════════

    @staticmethod
    def push_apart(a: Fighter, b: Fighter) -> float:
        """Symmetric push so bodies never overlap by more than the allowed
        fraction of their combined width.  Returns the correction applied.

        When a wall swallows one side's share, the other fighter takes the
        rest of the push.
        """
        min_gap = (a.width + b.width) * BODY_OVERLAP_FRACTION
        overlap = min_gap - abs(a.x - b.x)
        if overlap <= 0:
            return 0.0
        left, right = (a, b) if a.x < b.x else (b, a)
        push = overlap * 0.5
        left.x -= push
        right.x += push
        left.clamp_to_arena()
        right.clamp_to_arena()

        if right.x - left.x < min_gap:
            if left.x <= ARENA_LEFT:
                right.x = left.x + min_gap
            else:
                left.x = right.x - min_gap
            left.clamp_to_arena()
            right.clamp_to_arena()
        return overlap

    # ══════════════════════════════════════════════════════
    #  Helpers
    # ══════════════════════════════════════════════════════

    @staticmethod
    def _away_direction(attacker: Fighter, defender: Fighter) -> int:
        if defender.x > attacker.x:
            return 1
        if defender.x < attacker.x:
            return -1
        return -defender.facing
