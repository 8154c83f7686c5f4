"""
hazard.py – The glitch fighter ("PLAYER 3").

At the top escalation level a third, mostly non-interactive fighter can
appear mid-round.  It flickers, teleports around the arena and now and then
clips the human fighter for a little damage.  It never counts towards the
round result and vanishes after a fixed time.
"""

from __future__ import annotations

import logging
import math
import random

logger = logging.getLogger(__name__)

from settings import (
    GROUND_Y, ARENA_LEFT, ARENA_RIGHT, SCREEN_WIDTH,
    HAZARD_SPAWN_MIN, HAZARD_SPAWN_SPREAD, HAZARD_LIFETIME,
    HAZARD_TELEPORT_CHANCE, HAZARD_CONTACT_RANGE, HAZARD_CONTACT_CHANCE,
    HAZARD_CONTACT_DAMAGE, HAZARD_CONTACT_STUN, HAZARD_CONTACT_PUSH,
    HAZARD_WIDTH, HAZARD_HEIGHT,
)
from entities.fighter import CombatState


class GlitchFighter:
    """The transient third combatant."""

    def __init__(self, x: float = SCREEN_WIDTH / 2, y: float = GROUND_Y):
        self.x = x
        self.y = y
        self.width = HAZARD_WIDTH
        self.height = HAZARD_HEIGHT
        self.timer = 0.0
        self.alpha = 0.3

    @property
    def expired(self) -> bool:
        return self.timer > HAZARD_LIFETIME

    def get_state_snapshot(self) -> dict:
        return {"x": self.x, "y": self.y, "alpha": self.alpha,
                "timer": self.timer}


class HazardEvents:
    """What the hazard did this tick (for cues, sparks and narrative)."""

    __slots__ = ("spawned", "teleported", "contact_damage", "despawned")

    def __init__(self):
        self.spawned = False
        self.teleported = False
        self.contact_damage = 0
        self.despawned = False


class HazardDirector:
    """Arms, spawns, drives and despawns the glitch fighter."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.glitch: GlitchFighter | None = None
        self.spawn_timer: float | None = None

    @property
    def active(self) -> bool:
        return self.glitch is not None

    def arm(self, eligible: bool):
        """Called at round setup.  A live glitch fighter survives the reset."""
        if eligible and self.glitch is None:
            self.spawn_timer = HAZARD_SPAWN_MIN + self.rng.random() * HAZARD_SPAWN_SPREAD
            logger.debug("Hazard armed (%.1fs)", self.spawn_timer)
        elif not eligible:
            self.spawn_timer = None

    def reset(self):
        self.glitch = None
        self.spawn_timer = None

    def update(self, dt: float, player, eligible: bool) -> HazardEvents:
        events = HazardEvents()
        if not eligible:
            return events

        gf = self.glitch
        if gf is None:
            if self.spawn_timer is None:
                return events
            self.spawn_timer -= dt
            if self.spawn_timer <= 0:
                self.glitch = GlitchFighter()
                self.spawn_timer = None
                events.spawned = True
                logger.info("Glitch fighter entered the arena")
            return events

        rng = self.rng
        gf.timer += dt
        gf.alpha = 0.3 + math.sin(gf.timer * 8) * 0.2

        if rng.random() < HAZARD_TELEPORT_CHANCE:
            gf.x = ARENA_LEFT + rng.random() * (ARENA_RIGHT - ARENA_LEFT - 40)
            gf.y = GROUND_Y - rng.random() * 40
            events.teleported = True

        close = abs(gf.x - player.x) < HAZARD_CONTACT_RANGE
        grounded = player.state == CombatState.KNOCKDOWN
        if (close and rng.random() < HAZARD_CONTACT_CHANCE
                and not player.is_invincible and not grounded):
            events.contact_damage = player.receive_hit(
                HAZARD_CONTACT_DAMAGE, HAZARD_CONTACT_STUN,
                -player.facing * HAZARD_CONTACT_PUSH,
            )

        if gf.expired:
            self.glitch = None
            events.despawned = True
            logger.info("Glitch fighter faded out")
        return events
