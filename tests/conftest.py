"""Shared fixtures for the fight simulation tests."""

import random

import pytest

from entities.fighter import Fighter
from systems.input_source import Button, InputFrame
from systems.round_controller import RoundController, RoundPhase

TICK = 1.0 / 60


class ScriptedRandom(random.Random):
    """``random()`` returns queued values first, then a fixed default."""

    def __init__(self, values=(), default=0.99):
        super().__init__(0)
        self.values = list(values)
        self.default = default

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self.default


class RecordingSink:
    """Callable sink that remembers everything it was given."""

    def __init__(self):
        self.calls = []

    def __call__(self, item):
        self.calls.append(item)


def press(*buttons: Button) -> InputFrame:
    """Frame where *buttons* went down this tick."""
    held = frozenset(buttons)
    return InputFrame(held=held, just_pressed=held)


def hold(*buttons: Button) -> InputFrame:
    """Frame where *buttons* are held but were already down last tick."""
    return InputFrame(held=frozenset(buttons))


def advance_to_frame(fighter: Fighter, frame: int):
    """Tick an attacking fighter's timers until its attack frame equals *frame*."""
    while fighter.attack_frame < frame:
        fighter.begin_tick(TICK)


def run_until(controller: RoundController, predicate, max_ticks: int = 2000,
              dt: float = TICK):
    for _ in range(max_ticks):
        if predicate(controller):
            return
        controller.tick(dt)
    raise AssertionError("condition not reached")


def start_fight(controller: RoundController):
    run_until(controller, lambda c: c.match.phase == RoundPhase.FIGHTING)


@pytest.fixture
def cues():
    return RecordingSink()


@pytest.fixture
def narrative():
    return RecordingSink()


@pytest.fixture
def make_controller(cues, narrative):
    """Factory for a strict controller with a scripted RNG."""

    def _make(level: int = 0, rng=None, **kwargs):
        return RoundController(
            escalation=level,
            cue_sink=cues,
            narrative_sink=narrative,
            rng=rng or ScriptedRandom(),
            strict=True,
            **kwargs,
        )

    return _make


@pytest.fixture
def pair():
    """Player at x=100 facing right, opponent just inside punch reach."""
    player = Fighter(100, 1, "P1", strict=True)
    opponent = Fighter(146, -1, "P2", strict=True)
    return player, opponent
