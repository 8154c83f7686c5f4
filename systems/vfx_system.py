"""
vfx_system.py – Cosmetic combat effects.

Implements:
- Hit sparks (burst of short-lived squares at the impact point)
- Blood (gravity-bound droplets on clean hits once the AI is possessed)
- Possession flashes (a word flashed over a hit at high escalation)
- Screen shake

None of this feeds back into the simulation; the round controller spawns
effects and the presentation layer reads them from the match snapshot.
"""

from __future__ import annotations

import random

import pygame
from settings import (
    HIT_SPARK_COUNT, HIT_SPARK_SPEED,
    SCREEN_SHAKE_DECAY,
    POSSESSION_FLASH_LIFE, POSSESSION_WORDS, FLASH_COLOR,
    BLOOD_PARTICLE_COUNT, BLOOD_SPEED, BLOOD_GRAVITY, BLOOD_COLOR,
)


# ══════════════════════════════════════════════════════════
#  Hit Spark
# ══════════════════════════════════════════════════════════

class HitSpark:
    """Single spark square that drifts and fades."""

    __slots__ = ("x", "y", "vx", "vy", "life", "color", "size")

    def __init__(self, x: float, y: float, vx: float, vy: float,
                 life: float, color: tuple, size: float):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.life = life
        self.color = color
        self.size = size

    @property
    def alive(self) -> bool:
        return self.life > 0

    def update(self, dt: float):
        self.x += self.vx
        self.y += self.vy
        self.life -= dt

    def draw(self, surface: pygame.Surface, offset: tuple[int, int] = (0, 0)):
        if not self.alive:
            return
        alpha = int(255 * max(0.0, min(1.0, self.life * 5)))
        sz = max(1, int(self.size))
        spark = pygame.Surface((sz, sz), pygame.SRCALPHA)
        spark.fill((*self.color[:3], alpha))
        surface.blit(spark, (int(self.x - sz / 2) + offset[0],
                             int(self.y - sz / 2) + offset[1]))


class BloodParticle(HitSpark):
    """Droplet thrown away from the defender; falls under gravity."""

    __slots__ = ()

    def update(self, dt: float):
        super().update(dt)
        self.vy += BLOOD_GRAVITY

    def draw(self, surface: pygame.Surface, offset: tuple[int, int] = (0, 0)):
        if not self.alive:
            return
        alpha = int(255 * max(0.0, min(1.0, self.life)))
        sz = max(1, int(self.size))
        drop = pygame.Surface((sz, sz), pygame.SRCALPHA)
        drop.fill((*self.color[:3], alpha))
        surface.blit(drop, (int(self.x) + offset[0], int(self.y) + offset[1]))


class PossessionFlash:
    """A word that flashes over an impact."""

    __slots__ = ("x", "y", "text", "life")

    def __init__(self, x: float, y: float, text: str,
                 life: float = POSSESSION_FLASH_LIFE):
        self.x = x
        self.y = y
        self.text = text
        self.life = life

    @property
    def alive(self) -> bool:
        return self.life > 0

    def update(self, dt: float):
        self.life -= dt


# ══════════════════════════════════════════════════════════
#  Effects Manager
# ══════════════════════════════════════════════════════════

class CombatEffects:
    """Owns sparks, blood, flashes and shake for one round.

    Call ``update(dt)`` once per fighting tick.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self._jitter = random.Random()  # presentation only
        self.sparks: list[HitSpark] = []
        self.blood: list[BloodParticle] = []
        self.flashes: list[PossessionFlash] = []
        self.shake = 0.0

    def spawn_sparks(self, x: float, y: float, color: tuple,
                     count: int = HIT_SPARK_COUNT):
        rng = self.rng
        for _ in range(count):
            self.sparks.append(HitSpark(
                x, y,
                (rng.random() - 0.5) * 2 * HIT_SPARK_SPEED,
                (rng.random() - 0.5) * 2 * HIT_SPARK_SPEED,
                0.2 + rng.random() * 0.15,
                color,
                2 + rng.random() * 4,
            ))

    def spawn_blood(self, x: float, y: float, defender_facing: int,
                    count: int = BLOOD_PARTICLE_COUNT):
        rng = self._jitter
        for _ in range(count):
            self.blood.append(BloodParticle(
                x, y,
                (rng.random() - 0.5) * BLOOD_SPEED * -defender_facing,
                (rng.random() - 1) * 4,
                0.5 + rng.random() * 0.5,
                BLOOD_COLOR,
                2 + rng.random() * 2,
            ))

    def spawn_flash(self, x: float, y: float) -> PossessionFlash:
        flash = PossessionFlash(x, y, self.rng.choice(POSSESSION_WORDS))
        self.flashes.append(flash)
        return flash

    def trigger_shake(self, intensity: float):
        self.shake = max(self.shake, intensity)

    def update(self, dt: float):
        self.shake *= SCREEN_SHAKE_DECAY
        for spark in self.sparks:
            spark.update(dt)
        self.sparks = [s for s in self.sparks if s.alive]
        for drop in self.blood:
            drop.update(dt)
        self.blood = [d for d in self.blood if d.alive]
        for flash in self.flashes:
            flash.update(dt)
        self.flashes = [f for f in self.flashes if f.alive]

    def shake_offset(self) -> tuple[int, int]:
        if self.shake <= 0.5:
            return (0, 0)
        return (int((self._jitter.random() - 0.5) * self.shake),
                int((self._jitter.random() - 0.5) * self.shake))

    def clear(self):
        self.sparks.clear()
        self.blood.clear()
        self.flashes.clear()
        self.shake = 0.0

    # ── Drawing ───────────────────────────────────────────

    def draw(self, surface: pygame.Surface, font: pygame.font.Font,
             offset: tuple[int, int] = (0, 0)):
        for spark in self.sparks:
            spark.draw(surface, offset)
        for drop in self.blood:
            drop.draw(surface, offset)
        for flash in self.flashes:
            alpha = int(255 * max(0.0, min(1.0, flash.life * 2)))
            txt = font.render(flash.text, True, FLASH_COLOR)
            txt.set_alpha(alpha)
            surface.blit(txt, (int(flash.x) - txt.get_width() // 2 + offset[0],
                               int(flash.y) - 20 + offset[1]))
