"""
ai_core.py – Opponent brain.

The brain only decides; it never touches a fighter.  Each tick the round
controller hands it read-only views of both fighters, the escalation
policy and at most one observation of the human's latest action, and gets
back an ``AIDecision`` that Fighter.apply_decision() carries out.

Decision cycle (runs at most once per reaction window):

  1. Input read   – omniscient only: counter the observed action
                    (punch / kick → block, special → jump) and stop there
  2. Spacing      – close in when far, sometimes back off when crowded
  3. Attack roll  – punch 40 %, kick 35 %, otherwise special if charged
  4. Random hop   – flat 2 % when grounded, rolled even mid-attack
  5. Reactive block – the human is swinging within reach

Between windows the brain returns a hold decision and the fighter keeps
whatever it was doing.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

logger = logging.getLogger(__name__)

from settings import (
    AI_APPROACH_DISTANCE, AI_APPROACH_SPEED_MULT,
    AI_RETREAT_DISTANCE, AI_RETREAT_CHANCE, AI_RETREAT_SPEED_MULT,
    AI_ATTACK_DISTANCE, AI_ATTACK_CHANCE, AI_AGGRESSIVE_ATTACK_BONUS,
    AI_PUNCH_WEIGHT, AI_KICK_WEIGHT, AI_JUMP_CHANCE,
    AI_BLOCK_DISTANCE, AI_BLOCK_CHANCE, AI_OMNISCIENT_BLOCK_BONUS,
    AI_COUNTER_BLOCK_DURATION, AI_REACTIVE_BLOCK_DURATION,
    AI_SPECIAL_COOLDOWN,
)
from entities.fighter import CombatState
from systems.escalation import EscalationPolicy

OBSERVABLE_ACTIONS = frozenset({"punch", "kick", "special", "jump"})


@dataclass(frozen=True)
class AIDecision:
    """Intents for one tick.  ``acted`` is False for a hold."""

    acted: bool = False
    move: float = 0.0                  # signed multiple of MOVE_SPEED
    attack: str | None = None
    jump: bool = False
    block_duration: float = 0.0
    consumed_observation: bool = False
    special_cooldown: float = AI_SPECIAL_COOLDOWN
    reason: str = "hold"


HOLD = AIDecision()


class AIBrain:
    """Reaction-delayed opponent controller with an input-reading mode."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self._timer = 0.0

    def reset(self):
        self._timer = 0.0

    # ══════════════════════════════════════════════════════
    #  Main Update
    # ══════════════════════════════════════════════════════

    def update(self, me, opponent, dt: float, policy: EscalationPolicy,
               observation: str | None = None) -> AIDecision:
        """Return this tick's decision for fighter *me* against *opponent*."""
        if not me.can_act:
            return HOLD

        self._timer += dt
        if self._timer < policy.reaction_time:
            return HOLD
        self._timer = 0.0

        consumed = False
        if policy.ai_omniscient and observation in OBSERVABLE_ACTIONS:
            consumed = True
            counter = self._counter(me, observation)
            if counter is not None:
                logger.debug("AI read %s -> %s", observation, counter.reason)
                return counter

        return self._decide(me, opponent, policy, consumed)

    # ══════════════════════════════════════════════════════
    #  Decision steps
    # ══════════════════════════════════════════════════════

    @staticmethod
    def _counter(me, observation: str) -> AIDecision | None:
        if observation in ("punch", "kick"):
            return AIDecision(
                acted=True, consumed_observation=True, reason="read_block",
                block_duration=AI_COUNTER_BLOCK_DURATION if me.on_ground else 0.0,
            )
        if observation == "special":
            return AIDecision(
                acted=True, consumed_observation=True, reason="read_jump",
                jump=me.on_ground,
            )
        return None

    def _decide(self, me, opponent, policy: EscalationPolicy,
                consumed: bool) -> AIDecision:
        rng = self.rng
        dist = abs(me.x - opponent.x)
        move = 0.0
        attack = None
        jump = False
        block = 0.0
        reason = "idle"

        # Spacing
        if dist > AI_APPROACH_DISTANCE:
            move = me.facing * AI_APPROACH_SPEED_MULT
            reason = "approach"
        elif dist < AI_RETREAT_DISTANCE and rng.random() < AI_RETREAT_CHANCE:
            move = -me.facing * AI_RETREAT_SPEED_MULT
            reason = "retreat"

        # Attack roll
        if dist < AI_ATTACK_DISTANCE:
            chance = AI_ATTACK_CHANCE
            if policy.ai_aggressive:
                chance += AI_AGGRESSIVE_ATTACK_BONUS
            if rng.random() < chance:
                attack = self._pick_attack(me)
                if attack:
                    reason = attack

        # Random hop
        if me.on_ground and rng.random() < AI_JUMP_CHANCE:
            jump = True
            if attack is None:
                reason = "jump"

        # Reactive block
        if (attack is None and not jump and me.on_ground
                and opponent.state == CombatState.ATTACKING
                and dist < AI_BLOCK_DISTANCE):
            chance = AI_BLOCK_CHANCE
            if policy.ai_omniscient:
                chance += AI_OMNISCIENT_BLOCK_BONUS
            if rng.random() < chance:
                block = AI_REACTIVE_BLOCK_DURATION
                reason = "block"

        return AIDecision(
            acted=True, move=move, attack=attack, jump=jump,
            block_duration=block, consumed_observation=consumed,
            reason=reason,
        )

    def _pick_attack(self, me) -> str | None:
        roll = self.rng.random()
        if roll < AI_PUNCH_WEIGHT:
            return "punch"
        if roll < AI_KICK_WEIGHT:
            return "kick"
        if me.can_special:
            return "special"
        return None
