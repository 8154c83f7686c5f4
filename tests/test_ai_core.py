"""AI decision engine tests."""

import pytest

from conftest import ScriptedRandom
from ai.ai_core import AIBrain, HOLD
from entities.fighter import Fighter, CombatState
from systems.escalation import EscalationPolicy

LEVEL_0 = EscalationPolicy.from_level(0)
LEVEL_2 = EscalationPolicy.from_level(2)


def make_brain(values=(), default=0.99):
    return AIBrain(ScriptedRandom(values, default))


@pytest.fixture
def far_pair():
    me = Fighter(380, -1, "AI")
    human = Fighter(120, 1, "P1")
    return me, human


class TestReactionWindow:
    """Decisions happen at most once per reaction window"""

    def test_holds_inside_window(self, far_pair):
        me, human = far_pair
        assert make_brain().update(me, human, 0.1, LEVEL_0) is HOLD

    def test_decides_when_window_elapses(self, far_pair):
        me, human = far_pair
        brain = make_brain()
        brain.update(me, human, 0.1, LEVEL_0)
        decision = brain.update(me, human, 0.1, LEVEL_0)
        assert decision.acted

    def test_locked_fighter_holds(self, far_pair):
        me, human = far_pair
        me.receive_hit(8, 0.2, 0.0)
        assert make_brain().update(me, human, 1.0, LEVEL_0) is HOLD


class TestSpacing:
    """Approach and retreat"""

    def test_approaches_when_far(self, far_pair):
        me, human = far_pair
        decision = make_brain().update(me, human, 0.2, LEVEL_0)
        assert decision.move == pytest.approx(-0.8)
        assert decision.attack is None

    def test_retreats_when_crowded(self):
        me = Fighter(150, -1)
        human = Fighter(120, 1)
        # retreat roll, attack roll (miss), jump roll (miss)
        decision = make_brain([0.1, 0.9, 0.9]).update(me, human, 0.2, LEVEL_0)
        assert decision.move == pytest.approx(0.5)
        assert decision.reason == "retreat"


class TestAttacks:
    """Attack roll and move choice"""

    @pytest.mark.parametrize("pick, move", [(0.1, "punch"), (0.5, "kick")])
    def test_attack_pick(self, pick, move):
        me = Fighter(180, -1)
        human = Fighter(120, 1)
        decision = make_brain([0.05, pick]).update(me, human, 0.2, LEVEL_0)
        assert decision.attack == move
        assert not decision.jump

    def test_hop_rolled_after_attack_starts(self):
        me = Fighter(180, -1)
        human = Fighter(120, 1)
        # attack roll hit, punch pick, hop roll hit
        decision = make_brain([0.05, 0.1, 0.01]).update(me, human, 0.2, LEVEL_0)
        assert decision.attack == "punch"
        assert decision.jump
        me.apply_decision(decision)
        assert me.state == CombatState.ATTACKING
        assert not me.on_ground

    def test_special_needs_charge(self):
        me = Fighter(180, -1)
        human = Fighter(120, 1)
        decision = make_brain([0.05, 0.9]).update(me, human, 0.2, LEVEL_0)
        assert decision.attack is None

    def test_special_when_charged(self):
        me = Fighter(180, -1)
        me.special_charge = 100
        human = Fighter(120, 1)
        decision = make_brain([0.05, 0.9]).update(me, human, 0.2, LEVEL_0)
        assert decision.attack == "special"
        me.apply_decision(decision)
        assert me.special_cooldown == pytest.approx(2.0)

    def test_aggression_raises_attack_chance(self):
        me = Fighter(180, -1)
        human = Fighter(120, 1)
        assert make_brain([0.2, 0.1]).update(me, human, 0.2, LEVEL_0).attack is None
        assert make_brain([0.2, 0.1]).update(me, human, 0.2, LEVEL_2).attack == "punch"

    def test_reactive_block(self):
        me = Fighter(180, -1)
        human = Fighter(120, 1)
        human.start_attack("punch")
        # attack roll miss, jump roll miss, block roll hit
        decision = make_brain([0.9, 0.9, 0.1]).update(me, human, 0.2, LEVEL_0)
        assert decision.block_duration == pytest.approx(0.4)


class TestInputReading:
    """Level 2+: the AI counters the human's last action"""

    def test_special_read_jumps(self, far_pair):
        me, human = far_pair
        decision = make_brain().update(me, human, 0.05, LEVEL_2, observation="special")
        assert decision.jump
        assert decision.consumed_observation
        me.apply_decision(decision)
        assert me.state == CombatState.JUMPING
        assert not me.on_ground

    @pytest.mark.parametrize("observed", ["punch", "kick"])
    def test_strike_read_blocks(self, far_pair, observed):
        me, human = far_pair
        decision = make_brain().update(me, human, 0.05, LEVEL_2, observation=observed)
        assert decision.block_duration == pytest.approx(0.3)
        me.apply_decision(decision)
        assert me.state == CombatState.BLOCKING

    def test_jump_read_is_consumed(self, far_pair):
        me, human = far_pair
        decision = make_brain().update(me, human, 0.05, LEVEL_2, observation="jump")
        assert decision.consumed_observation
        assert decision.reason == "approach"

    def test_ignored_below_level_two(self, far_pair):
        me, human = far_pair
        decision = make_brain().update(me, human, 0.2, LEVEL_0, observation="special")
        assert not decision.consumed_observation
        assert not decision.jump

    def test_observation_waits_for_window(self, far_pair):
        me, human = far_pair
        decision = make_brain().update(me, human, 0.01, LEVEL_2, observation="special")
        assert decision is HOLD
        assert not decision.consumed_observation
