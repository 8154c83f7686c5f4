"""
keybinds.py – Rebindable cabinet controls with JSON persistence.

The fight reads an eight-button controller (d-pad, A, B, X, START).
FIGHT_KEYS maps each button's action name → pygame key constant:

    up, down, left, right, punch (A), kick (B), special (X), start

Usage:
    from keybinds import KeyboardInput
    controls = KeyboardInput()
    frame = controls.poll()          # once per tick → InputFrame

Persistence:
    save_keybinds()   – write current bindings to controls.json
    load_keybinds()   – load from controls.json (called on import)
    reset_keybinds()  – restore factory defaults
"""

from __future__ import annotations

import json
import logging
import os

import pygame

from settings import BG_COLOR, WHITE, YELLOW, RED, GRAY
from systems.input_source import Button, ButtonTracker, InputFrame
from utils.helpers import draw_text, draw_banner

logger = logging.getLogger(__name__)

# ══════════════════════════════════════════════════════════
#  Path to persistence file
# ══════════════════════════════════════════════════════════

_CONTROLS_PATH = os.path.join(
    os.path.dirname(os.path.abspath(__file__)),
    "controls.json",
)

# ══════════════════════════════════════════════════════════
#  Canonical action list
# ══════════════════════════════════════════════════════════

ACTION_BUTTONS: dict[str, Button] = {
    "up":      Button.UP,
    "down":    Button.DOWN,
    "left":    Button.LEFT,
    "right":   Button.RIGHT,
    "punch":   Button.A,
    "kick":    Button.B,
    "special": Button.X,
    "start":   Button.START,
}

ACTIONS: list[str] = list(ACTION_BUTTONS)

# Human-friendly labels for the controls menu
ACTION_LABELS: dict[str, str] = {
    "up":      "Jump",
    "down":    "Crouch",
    "left":    "Left",
    "right":   "Right",
    "punch":   "Punch (A)",
    "kick":    "Kick (B)",
    "special": "Special (X)",
    "start":   "Start",
}

# ══════════════════════════════════════════════════════════
#  Default bindings (factory settings)
# ══════════════════════════════════════════════════════════

_DEFAULT_KEYS: dict[str, int] = {
    "up":      pygame.K_UP,
    "down":    pygame.K_DOWN,
    "left":    pygame.K_LEFT,
    "right":   pygame.K_RIGHT,
    "punch":   pygame.K_z,
    "kick":    pygame.K_x,
    "special": pygame.K_c,
    "start":   pygame.K_RETURN,
}

# Live binding dictionary (mutated at runtime)
FIGHT_KEYS: dict[str, int] = dict(_DEFAULT_KEYS)


# ══════════════════════════════════════════════════════════
#  Persistence helpers
# ══════════════════════════════════════════════════════════

def save_keybinds(path: str = _CONTROLS_PATH) -> None:
    """Persist current bindings to controls.json."""
    payload = {"fight": dict(FIGHT_KEYS)}
    try:
        with open(path, "w", encoding="utf-8") as fp:
            json.dump(payload, fp, indent=2)
        logger.info("Keybinds saved to %s", path)
    except OSError as exc:
        logger.error("Could not write button map %s: %s", path, exc)


def load_keybinds(path: str = _CONTROLS_PATH) -> None:
    """Load bindings from controls.json into FIGHT_KEYS.

    Missing actions are filled from defaults.  Unknown actions are
    silently ignored so a hand-edited JSON won't crash the game.
    """
    if not os.path.exists(path):
        logger.info("No button map at %s, using the factory layout", path)
        return

    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Unreadable button map %s (%s), keeping current keys", path, exc)
        return

    raw = data.get("fight", {}) if isinstance(data, dict) else {}
    for action in ACTIONS:
        try:
            FIGHT_KEYS[action] = int(raw[action])
        except (KeyError, TypeError, ValueError):
            FIGHT_KEYS[action] = _DEFAULT_KEYS[action]
    logger.info("Keybinds loaded from %s", path)


def reset_keybinds(path: str = _CONTROLS_PATH) -> None:
    """Restore factory defaults and save."""
    FIGHT_KEYS.update(_DEFAULT_KEYS)
    save_keybinds(path)
    logger.info("Button map reset to the factory layout")


# ══════════════════════════════════════════════════════════
#  Conflict detection
# ══════════════════════════════════════════════════════════

def has_conflict(bindings: dict[str, int], action: str, new_key: int) -> str | None:
    """If *new_key* is already used by another action in *bindings*,
    return that action's name.  Otherwise return None."""
    for act, key in bindings.items():
        if act != action and key == new_key:
            return act
    return None


def key_name(key_code: int) -> str:
    """Return a human-readable name for a pygame key constant."""
    return pygame.key.name(key_code).upper()


# ══════════════════════════════════════════════════════════
#  Keyboard → controller frames
# ══════════════════════════════════════════════════════════

def buttons_from_keys(pressed, bindings: dict[str, int] | None = None) -> frozenset[Button]:
    """Map a ``pygame.key.get_pressed()``-style sequence to held buttons."""
    bindings = FIGHT_KEYS if bindings is None else bindings
    return frozenset(
        ACTION_BUTTONS[action]
        for action, key in bindings.items()
        if action in ACTION_BUTTONS and pressed[key]
    )


class KeyboardInput:
    """Polls the keyboard once per tick and yields InputFrames with edges."""

    def __init__(self, bindings: dict[str, int] | None = None):
        self.bindings = bindings
        self._tracker = ButtonTracker()

    def poll(self) -> InputFrame:
        return self._tracker.feed(buttons_from_keys(pygame.key.get_pressed(),
                                                    self.bindings))

    def reset(self):
        self._tracker.reset()


# ══════════════════════════════════════════════════════════
#  Rebinding
# ══════════════════════════════════════════════════════════

def rebind(action: str, key: int, bindings: dict[str, int] | None = None) -> str | None:
    """Bind *key* to *action* unless another action already holds it.

    Returns the holding action on a conflict, None once bound.
    """
    bindings = FIGHT_KEYS if bindings is None else bindings
    holder = has_conflict(bindings, action, key)
    if holder is None:
        bindings[action] = key
        logger.info("Rebound %s to key %d", action, key)
    return holder


# ══════════════════════════════════════════════════════════
#  Button map screen
# ══════════════════════════════════════════════════════════

class ControlsMenu:
    """Steps through the cabinet buttons one at a time.

    Any key binds the highlighted button and moves on; BACKSPACE keeps the
    current key, F5 restores the factory layout, ESC saves and leaves.
    """

    def __init__(self, path: str = _CONTROLS_PATH):
        self.path = path
        self.index = 0
        self.message = ""

    @property
    def action(self) -> str:
        return ACTIONS[self.index]

    def handle_key(self, key: int) -> bool:
        """Apply one key press.  False once the screen should close."""
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_F5:
            reset_keybinds(self.path)
            self.index = 0
            self.message = "FACTORY LAYOUT RESTORED"
            return True
        if key != pygame.K_BACKSPACE:
            holder = rebind(self.action, key)
            if holder is not None:
                self.message = f"KEY ALREADY ON {ACTION_LABELS[holder].upper()}"
                return True
        self.message = ""
        self.index = (self.index + 1) % len(ACTIONS)
        return True

    def run(self, screen: pygame.Surface, clock: pygame.time.Clock) -> None:
        running = True
        while running:
            clock.tick(30)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    pygame.quit()
                    raise SystemExit
                if event.type == pygame.KEYDOWN:
                    running = self.handle_key(event.key)
            self.draw(screen)
            pygame.display.flip()
        save_keybinds(self.path)

    def draw(self, surface: pygame.Surface) -> None:
        surface.fill(BG_COLOR)
        draw_banner(surface, "BUTTON MAP", YELLOW, 40, 40)
        for i, act in enumerate(ACTIONS):
            color = YELLOW if i == self.index else WHITE
            draw_text(surface, ACTION_LABELS[act], 140, 80 + i * 30, color, 24)
            draw_text(surface, key_name(FIGHT_KEYS[act]), 320, 80 + i * 30, color, 24)
        if self.message:
            draw_banner(surface, self.message, RED, 22, 340)
        draw_banner(surface, "PRESS A KEY   BKSP: KEEP   F5: DEFAULTS   ESC: DONE",
                    GRAY, 18, 400)


# ══════════════════════════════════════════════════════════
#  Auto-load on import
# ══════════════════════════════════════════════════════════

load_keybinds()
