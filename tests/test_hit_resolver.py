"""Hit resolution tests – single-frame rule, blocking, chip, knockdown, push-apart."""

import pytest

from conftest import TICK, advance_to_frame
from settings import ARENA_LEFT, ARENA_RIGHT
from entities.fighter import Fighter, CombatState
from systems.escalation import EscalationPolicy
from systems.hit_resolver import HitResolver

LEVEL_0 = EscalationPolicy.from_level(0)
LEVEL_2 = EscalationPolicy.from_level(2)
LEVEL_3 = EscalationPolicy.from_level(3)


@pytest.fixture
def resolver():
    return HitResolver()


class TestConnectFrame:
    """An attack lands only on the tick its frame counter equals startup"""

    @pytest.mark.parametrize("move, startup", [("punch", 4), ("kick", 6), ("special", 10)])
    def test_connects_once_at_startup(self, resolver, pair, move, startup):
        player, opponent = pair
        player.start_attack(move)
        connected_at = []
        while player.active_attack is not None:
            frame = player.attack_frame
            if resolver.resolve(player, opponent, LEVEL_0).connected:
                connected_at.append(frame)
            player.begin_tick(TICK)
        assert connected_at == [startup]

    def test_adjacent_frames_miss(self, resolver, pair):
        player, opponent = pair
        player.start_attack("punch")
        advance_to_frame(player, 3)
        assert not resolver.resolve(player, opponent, LEVEL_0).connected
        player.attack_frame = 5
        assert not resolver.resolve(player, opponent, LEVEL_0).connected
        assert opponent.health == 100

    def test_out_of_reach(self, resolver):
        player = Fighter(100, 1, "P1")
        opponent = Fighter(300, -1, "P2")
        player.start_attack("special")
        advance_to_frame(player, 10)
        assert not resolver.resolve(player, opponent, LEVEL_0).connected

    def test_reach_when_facing_left(self, resolver):
        """Box extends from the left edge when facing -1"""
        player = Fighter(200, -1, "P1")
        opponent = Fighter(154, 1, "P2")
        player.start_attack("punch")
        advance_to_frame(player, 4)
        assert resolver.resolve(player, opponent, LEVEL_0).landed

    def test_invincible_defender(self, resolver, pair):
        player, opponent = pair
        opponent.invincible_timer = 0.5
        player.start_attack("punch")
        advance_to_frame(player, 4)
        assert not resolver.resolve(player, opponent, LEVEL_0).connected
        assert opponent.health == 100


class TestCleanHits:
    """Unblocked hits"""

    def test_punch_scenario(self, resolver, pair):
        """Level 0 punch: 100 → 92 and 0.2 s of hitstun"""
        player, opponent = pair
        player.start_attack("punch")
        advance_to_frame(player, 4)
        result = resolver.resolve(player, opponent, LEVEL_0)
        assert result.landed
        assert result.damage == 8
        assert opponent.health == 92
        assert opponent.state == CombatState.HITSTUN
        assert opponent.hitstun_timer == pytest.approx(0.2)
        assert opponent.vx > 0

    def test_kick_is_not_knockdown(self, resolver, pair):
        player, opponent = pair
        player.start_attack("kick")
        advance_to_frame(player, 6)
        result = resolver.resolve(player, opponent, LEVEL_0)
        assert not result.knockdown
        assert opponent.state == CombatState.HITSTUN
        assert opponent.health == 88

    def test_special_knocks_down(self, resolver, pair):
        player, opponent = pair
        player.start_attack("special")
        advance_to_frame(player, 10)
        result = resolver.resolve(player, opponent, LEVEL_0)
        assert result.knockdown
        assert opponent.state == CombatState.KNOCKDOWN
        assert opponent.hitstun_timer == 0
        assert not opponent.on_ground
        assert opponent.health == 80

    def test_hit_interrupts_defender_attack(self, resolver, pair):
        player, opponent = pair
        opponent.start_attack("kick")
        player.start_attack("punch")
        advance_to_frame(player, 4)
        resolver.resolve(player, opponent, LEVEL_0)
        assert opponent.active_attack is None

    def test_inflated_damage_on_human(self, resolver, pair):
        """At level 3 the human takes floor(damage * 1.3)"""
        attacker, human = pair
        attacker.start_attack("punch")
        advance_to_frame(attacker, 4)
        resolver.resolve(attacker, human, LEVEL_3, defender_is_human=True)
        assert human.health == 90

    def test_no_inflation_on_ai(self, resolver, pair):
        attacker, ai = pair
        attacker.start_attack("punch")
        advance_to_frame(attacker, 4)
        resolver.resolve(attacker, ai, LEVEL_3, defender_is_human=False)
        assert ai.health == 92


class TestBlocking:
    """Blocked hits"""

    @pytest.mark.parametrize("policy", [LEVEL_0, LEVEL_2])
    def test_block_negates_damage_and_stun(self, resolver, pair, policy):
        player, opponent = pair
        opponent.start_block(0.4)
        player.start_attack("kick")
        advance_to_frame(player, 6)
        result = resolver.resolve(player, opponent, policy)
        assert result.blocked
        assert result.damage == 0
        assert opponent.health == 100
        assert opponent.state == CombatState.BLOCKING

    @pytest.mark.parametrize("move, startup, chip", [
        ("punch", 4, 1), ("kick", 6, 1), ("special", 10, 3),
    ])
    def test_chip_damage_at_level_3(self, resolver, pair, move, startup, chip):
        player, opponent = pair
        opponent.start_block(0.4)
        player.start_attack(move)
        advance_to_frame(player, startup)
        result = resolver.resolve(player, opponent, LEVEL_3)
        assert result.blocked
        assert opponent.health == 100 - chip
        assert opponent.state == CombatState.BLOCKING

    def test_blocked_special_does_not_knock_down(self, resolver, pair):
        player, opponent = pair
        opponent.start_block(0.4)
        player.start_attack("special")
        advance_to_frame(player, 10)
        result = resolver.resolve(player, opponent, LEVEL_0)
        assert not result.knockdown
        assert opponent.on_ground

    def test_block_pushback_is_halved(self, resolver, pair):
        player, opponent = pair
        opponent.start_block(0.4)
        player.start_attack("punch")
        advance_to_frame(player, 4)
        resolver.resolve(player, opponent, LEVEL_0)
        assert opponent.vx == pytest.approx(2.0)


class TestPushApart:
    """Body separation"""

    def test_overlapping_bodies_separate(self):
        a = Fighter(200, 1)
        b = Fighter(205, -1)
        HitResolver.push_apart(a, b)
        assert b.x - a.x == pytest.approx(72 * 0.35)

    def test_distant_bodies_untouched(self):
        a = Fighter(100, 1)
        b = Fighter(300, -1)
        assert HitResolver.push_apart(a, b) == 0
        assert (a.x, b.x) == (100, 300)

    def test_wall_pinned_fighter_passes_push_on(self):
        a = Fighter(ARENA_LEFT, 1)
        b = Fighter(ARENA_LEFT + 5, -1)
        HitResolver.push_apart(a, b)
        assert a.x == ARENA_LEFT
        assert b.x - a.x == pytest.approx(72 * 0.35)

    def test_right_wall_pins_the_other_way(self):
        a = Fighter(ARENA_RIGHT - 36 - 5, 1)
        b = Fighter(ARENA_RIGHT - 36, -1)
        HitResolver.push_apart(a, b)
        assert b.x == ARENA_RIGHT - 36
        assert b.x - a.x == pytest.approx(72 * 0.35)
