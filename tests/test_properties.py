"""Long seeded matches – properties that must hold on every tick."""

import random

import pytest

from conftest import TICK
from settings import BODY_OVERLAP_FRACTION
from systems.input_source import Button, ButtonTracker
from systems.round_controller import RoundController, RoundPhase

PAD = (Button.LEFT, Button.RIGHT, Button.UP, Button.DOWN,
       Button.A, Button.B, Button.X)


def mashing(seed: int):
    """Endless stream of input frames from a button-mashing human."""
    rng = random.Random(seed)
    tracker = ButtonTracker()
    held = ()
    while True:
        if rng.random() < 0.2:
            held = [b for b in PAD if rng.random() < 0.3]
        yield tracker.feed(held)


@pytest.mark.parametrize("level", [0, 1, 2, 3, 4])
@pytest.mark.parametrize("seed", [1, 7, 42])
def test_sustained_match(level, seed):
    ctrl = RoundController(level, rng=random.Random(seed), strict=True)
    frames = mashing(seed + 1000)
    last = (ctrl.match.round_number, ctrl.player.health, ctrl.opponent.health)

    for _ in range(2400):
        if ctrl.match.phase == RoundPhase.MATCH_OVER:
            break
        ctrl.tick(TICK, next(frames))
        player, opponent = ctrl.player, ctrl.opponent
        player.check_invariants()
        opponent.check_invariants()

        now = (ctrl.match.round_number, player.health, opponent.health)
        assert 0 <= player.health <= player.max_health
        assert 0 <= opponent.health <= opponent.max_health
        if now[0] == last[0]:
            assert now[1] <= last[1], "player health went up mid-round"
            assert now[2] <= last[2], "opponent health went up mid-round"
        last = now

        min_gap = (player.width + opponent.width) * BODY_OVERLAP_FRACTION
        assert abs(player.x - opponent.x) >= min_gap - 1e-9

        wins = (ctrl.match.player_wins, ctrl.match.opponent_wins)
        assert max(wins) <= 2
