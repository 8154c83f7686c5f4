"""Fighter state machine tests."""

import logging

import pytest

from conftest import TICK, press, hold
from entities.fighter import Fighter, CombatState, InvariantViolation
from settings import (
    GROUND_Y, ARENA_LEFT, ARENA_RIGHT, FIGHTER_WIDTH, JUMP_FORCE,
    MOVE_SPEED, SPECIAL_CHARGE_COST, PLAYER_SPECIAL_COOLDOWN,
    KNOCKDOWN_INVINCIBILITY,
)
from systems.input_source import Button, NEUTRAL


@pytest.fixture
def fighter():
    return Fighter(200, 1, "P1", strict=True)


class TestInitialState:
    """Fresh fighter"""

    def test_defaults(self, fighter):
        assert fighter.health == 100
        assert fighter.state == CombatState.IDLE
        assert fighter.on_ground
        assert fighter.y == GROUND_Y
        assert fighter.active_attack is None
        assert fighter.can_act

    def test_body_box(self, fighter):
        """Body box spans width x height above the feet line"""
        box = fighter.body_box
        assert (box.x, box.w, box.h) == (200, 36, 64)
        assert box.bottom == GROUND_Y


class TestInput:
    """apply_input / update"""

    def test_walk_forward(self, fighter):
        fighter.update(TICK, hold(Button.RIGHT), opponent_x=400)
        assert fighter.state == CombatState.WALKING
        assert fighter.x == pytest.approx(200 + MOVE_SPEED)

    def test_holding_back_blocks(self, fighter):
        """Holding away from the opponent on the ground raises a guard"""
        fighter.update(TICK, hold(Button.LEFT), opponent_x=400)
        assert fighter.state == CombatState.BLOCKING
        assert fighter.x == 200

    def test_block_lapses_after_release(self, fighter):
        fighter.update(TICK, hold(Button.LEFT), opponent_x=400)
        for _ in range(20):
            fighter.update(TICK, NEUTRAL, opponent_x=400)
        assert fighter.state == CombatState.IDLE

    def test_punch(self, fighter):
        action = fighter.update(TICK, press(Button.A), opponent_x=400)
        assert action == "punch"
        assert fighter.state == CombatState.ATTACKING
        assert fighter.active_attack.name == "punch"

    def test_held_button_does_not_repeat(self, fighter):
        """Only the press edge starts an attack"""
        fighter.update(TICK, press(Button.A), opponent_x=400)
        for _ in range(20):
            fighter.update(TICK, hold(Button.A), opponent_x=400)
        assert fighter.state == CombatState.IDLE

    def test_attack_runs_its_full_length(self, fighter):
        fighter.update(TICK, press(Button.A), opponent_x=400)
        for _ in range(14):
            fighter.update(TICK, NEUTRAL, opponent_x=400)
            assert fighter.state == CombatState.ATTACKING
        fighter.update(TICK, NEUTRAL, opponent_x=400)
        assert fighter.state == CombatState.IDLE
        assert fighter.active_attack is None

    def test_special_needs_charge(self, fighter):
        assert fighter.update(TICK, press(Button.X), opponent_x=400) is None
        assert fighter.state != CombatState.ATTACKING

    def test_special_spends_charge(self, fighter):
        fighter.special_charge = SPECIAL_CHARGE_COST
        assert fighter.update(TICK, press(Button.X), opponent_x=400) == "special"
        assert fighter.special_charge == 0
        assert fighter.special_cooldown == PLAYER_SPECIAL_COOLDOWN

    def test_jump_and_land(self, fighter):
        assert fighter.update(TICK, press(Button.UP), opponent_x=400) == "jump"
        assert fighter.state == CombatState.JUMPING
        assert not fighter.on_ground
        assert fighter.vy > JUMP_FORCE  # gravity already applied once
        for _ in range(120):
            fighter.update(TICK, NEUTRAL, opponent_x=400)
        assert fighter.on_ground
        assert fighter.y == GROUND_Y
        assert fighter.state == CombatState.IDLE

    def test_faces_opponent(self, fighter):
        fighter.update(TICK, NEUTRAL, opponent_x=50)
        assert fighter.facing == -1


class TestTimers:
    """Charge, hitstun and knockdown timing"""

    def test_charge_regenerates(self, fighter):
        fighter.begin_tick(1.0)
        assert fighter.special_charge == pytest.approx(10.0)

    def test_charge_caps(self, fighter):
        for _ in range(20):
            fighter.begin_tick(1.0)
        assert fighter.special_charge == 100

    def test_hitstun_locks_then_recovers(self, fighter):
        fighter.receive_hit(8, 0.2, 0.0)
        assert fighter.state == CombatState.HITSTUN
        assert not fighter.begin_tick(0.1)
        assert fighter.state == CombatState.HITSTUN
        fighter.begin_tick(0.1)
        assert fighter.state == CombatState.IDLE

    def test_knockdown_grants_invincibility(self, fighter):
        fighter.receive_hit(20, 0.0, 0.0, knockdown=True)
        assert fighter.state == CombatState.KNOCKDOWN
        fighter.begin_tick(0.8)
        assert fighter.state == CombatState.IDLE
        assert fighter.invincible_timer == KNOCKDOWN_INVINCIBILITY

    def test_hit_cancels_attack(self, fighter):
        fighter.start_attack("kick")
        fighter.receive_hit(8, 0.2, 0.0)
        assert fighter.active_attack is None
        assert fighter.state == CombatState.HITSTUN


class TestHealth:
    """Damage and invariants"""

    def test_damage_floors_at_zero(self, fighter):
        assert fighter.take_damage(500) == 100
        assert fighter.health == 0
        assert not fighter.alive

    def test_negative_damage_ignored(self, fighter):
        fighter.take_damage(-5)
        assert fighter.health == 100

    def test_arena_clamp(self, fighter):
        fighter.x = ARENA_LEFT - 50
        fighter.end_tick()
        assert fighter.x == ARENA_LEFT
        fighter.x = ARENA_RIGHT + 50
        fighter.end_tick()
        assert fighter.x == ARENA_RIGHT - FIGHTER_WIDTH

    def test_strict_invariant_raises(self, fighter):
        fighter.health = 150
        with pytest.raises(InvariantViolation):
            fighter.check_invariants()

    def test_lenient_invariant_repairs(self, caplog):
        fighter = Fighter(200, 1, "P1", strict=False)
        fighter.health = 150
        fighter.state = CombatState.ATTACKING
        with caplog.at_level(logging.WARNING):
            fighter.check_invariants()
        assert fighter.health == 100
        assert fighter.state == CombatState.IDLE
        assert "invariant" in caplog.text

    def test_state_and_attack_stay_in_step(self, fighter):
        """Attacking exactly when an attack is active, across a whole move"""
        fighter.update(TICK, press(Button.B), opponent_x=400)
        for _ in range(30):
            assert (fighter.state == CombatState.ATTACKING) == (fighter.active_attack is not None)
            fighter.update(TICK, NEUTRAL, opponent_x=400)

    def test_snapshot(self, fighter):
        fighter.start_attack("punch")
        snap = fighter.get_state_snapshot()
        assert snap["state"] == "attacking"
        assert snap["attack"] == "punch"
        assert snap["health"] == 100
