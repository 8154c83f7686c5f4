"""
input_source.py – Per-tick controller state as seen by the simulation.

The simulation never polls hardware.  Each tick it receives an
``InputFrame`` describing which buttons are held, which went down this
tick, and the d-pad vector.  ``ButtonTracker`` turns a stream of
held-button sets into frames with correct edge detection, so a jump or
attack fires exactly once per press.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class Button(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    A = "a"          # punch
    B = "b"          # kick
    X = "x"          # special
    START = "start"


ATTACK_BUTTONS: dict[Button, str] = {
    Button.A: "punch",
    Button.B: "kick",
    Button.X: "special",
}


@dataclass(frozen=True)
class InputFrame:
    """Immutable controller snapshot for one tick."""

    held: frozenset = field(default_factory=frozenset)
    just_pressed: frozenset = field(default_factory=frozenset)

    def is_pressed(self, button: Button) -> bool:
        return button in self.held

    def is_just_pressed(self, button: Button) -> bool:
        return button in self.just_pressed

    @property
    def dpad(self) -> tuple[int, int]:
        """(x, y) with x: -1 left / +1 right, y: -1 up / +1 down."""
        x = int(Button.RIGHT in self.held) - int(Button.LEFT in self.held)
        y = int(Button.DOWN in self.held) - int(Button.UP in self.held)
        return x, y


NEUTRAL = InputFrame()


class ButtonTracker:
    """Derives just-pressed edges from successive held-button sets."""

    def __init__(self):
        self._previous: frozenset = frozenset()

    def feed(self, held: Iterable[Button]) -> InputFrame:
        held_set = frozenset(held)
        frame = InputFrame(held=held_set, just_pressed=held_set - self._previous)
        self._previous = held_set
        return frame

    def reset(self):
        self._previous = frozenset()
