"""Cosmetic effect tests – sparks, blood, flashes, shake."""

import pytest

from conftest import TICK, ScriptedRandom
from settings import BLOOD_COLOR, POSSESSION_WORDS
from systems.vfx_system import CombatEffects


class TestBlood:
    """Droplets thrown off clean hits"""

    def test_burst_size_and_color(self):
        fx = CombatEffects(ScriptedRandom())
        fx.spawn_blood(200, 300, defender_facing=-1)
        assert len(fx.blood) == 5
        assert all(d.color == BLOOD_COLOR for d in fx.blood)
        assert all(0.5 <= d.life <= 1.0 for d in fx.blood)

    def test_thrown_away_from_defender(self):
        fx = CombatEffects(ScriptedRandom())
        fx._jitter = ScriptedRandom(default=0.9)
        fx.spawn_blood(200, 300, defender_facing=1)
        assert all(d.vx < 0 for d in fx.blood)

    def test_gravity_pulls_drops_down(self):
        fx = CombatEffects(ScriptedRandom())
        fx.spawn_blood(200, 300, defender_facing=1, count=1)
        drop = fx.blood[0]
        vy = drop.vy
        fx.update(TICK)
        assert drop.vy == pytest.approx(vy + 0.3)

    def test_sim_rng_untouched(self):
        rng = ScriptedRandom([0.1, 0.2])
        fx = CombatEffects(rng)
        fx.spawn_blood(200, 300, defender_facing=1)
        assert rng.values == [0.1, 0.2]

    def test_expires(self):
        fx = CombatEffects(ScriptedRandom())
        fx.spawn_blood(200, 300, defender_facing=1)
        for _ in range(61):
            fx.update(TICK)
        assert fx.blood == []


class TestFlashesAndShake:
    """Possession words and screen shake"""

    def test_flash_word(self):
        fx = CombatEffects(ScriptedRandom())
        flash = fx.spawn_flash(10, 20)
        assert flash.text in POSSESSION_WORDS

    def test_shake_keeps_the_strongest(self):
        fx = CombatEffects(ScriptedRandom())
        fx.trigger_shake(8.0)
        fx.trigger_shake(5.0)
        assert fx.shake == 8.0

    def test_clear(self):
        fx = CombatEffects(ScriptedRandom())
        fx.spawn_sparks(0, 0, (255, 255, 255))
        fx.spawn_blood(0, 0, 1)
        fx.trigger_shake(5.0)
        fx.clear()
        assert (fx.sparks, fx.blood, fx.shake) == ([], [], 0.0)
