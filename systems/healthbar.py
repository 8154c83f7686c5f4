"""healthbar.py - Draws the fight HUD (health bars, timer, round pips, meters) from a MatchSnapshot."""

import random

import pygame
from settings import (
    WHITE, GREEN, RED, GRAY, YELLOW, SCREEN_WIDTH,
    HEALTHBAR_WIDTH, HEALTHBAR_HEIGHT, HEALTHBAR_Y, HEALTHBAR_GAP,
    LOW_HEALTH_FRACTION, SPECIAL_CHARGE_MAX, SPECIAL_CHARGE_COST,
    WIN_ROUNDS, SMALL_FONT_SIZE, FONT_SIZE,
)

PLAYER_HB_X = SCREEN_WIDTH // 2 - HEALTHBAR_GAP // 2 - HEALTHBAR_WIDTH
OPPONENT_HB_X = SCREEN_WIDTH // 2 + HEALTHBAR_GAP // 2

# ── Smooth display state (persists between frames) ────────
# keyed by side → {displayed, prev, shake_timer}
_bar_state: dict[str, dict] = {}

_LERP_SPEED = 0.08  # interpolation factor per frame
_SHAKE_DURATION = 0.25  # seconds of bar shake on damage
_SHAKE_INTENSITY = 3     # pixels


def bar_color(fraction: float) -> tuple:
    """Green while healthy, red at or below the danger line."""
    return RED if fraction <= LOW_HEALTH_FRACTION else GREEN


def draw_hud(surface, snap, dt: float = 0.016):
    """Render both health bars, the round timer, win pips and special meters.

    The player's bar is drawn from ``snap.player_health_displayed``, which
    may not match the true value at high escalation.
    """
    font = font_small()

    shown = snap.player_health_displayed
    _draw_bar(surface, PLAYER_HB_X, HEALTHBAR_Y, shown, "player", dt,
              mirrored=True)
    label = font.render(snap.player["name"], True, WHITE)
    surface.blit(label, (PLAYER_HB_X, HEALTHBAR_Y + HEALTHBAR_HEIGHT + 4))

    opp = snap.opponent
    _draw_bar(surface, OPPONENT_HB_X, HEALTHBAR_Y,
              opp["health"] / opp["max_health"], "opponent", dt)
    label = font.render(opp["name"], True, WHITE)
    surface.blit(label, (OPPONENT_HB_X + HEALTHBAR_WIDTH - label.get_width(),
                         HEALTHBAR_Y + HEALTHBAR_HEIGHT + 4))

    # ── Round timer ───────────────────────────────────────
    timer_font = pygame.font.SysFont(None, FONT_SIZE + 6)
    timer = timer_font.render(str(int(snap.round_timer)), True, YELLOW)
    surface.blit(timer, (SCREEN_WIDTH // 2 - timer.get_width() // 2, HEALTHBAR_Y - 2))

    # ── Round pips ────────────────────────────────────────
    pip_y = HEALTHBAR_Y + HEALTHBAR_HEIGHT + 8
    for i in range(WIN_ROUNDS):
        px = PLAYER_HB_X + HEALTHBAR_WIDTH - 8 - i * 14
        _draw_pip(surface, px, pip_y, i < snap.player_wins)
        ox = OPPONENT_HB_X + 8 + i * 14
        _draw_pip(surface, ox, pip_y, i < snap.opponent_wins)

    # ── Special meters ────────────────────────────────────
    meter_y = HEALTHBAR_Y + HEALTHBAR_HEIGHT + 22
    _draw_meter(surface, PLAYER_HB_X, meter_y, snap.player["special_charge"])
    _draw_meter(surface, OPPONENT_HB_X, meter_y, opp["special_charge"])

    # ── Score / combo ─────────────────────────────────────
    score = font.render(f"SCORE {snap.score:07d}", True, WHITE)
    surface.blit(score, (PLAYER_HB_X, meter_y + 10))
    if snap.combo_count >= 2:
        combo = pygame.font.SysFont(None, FONT_SIZE).render(
            f"{snap.combo_count} HITS", True, YELLOW)
        surface.blit(combo, (SCREEN_WIDTH // 2 - combo.get_width() // 2, meter_y + 10))


def _draw_bar(surface, x, y, fraction, side, dt: float, mirrored: bool = False):
    """Draw a single smoothly-animated health bar with damage shake."""
    fraction = max(0.0, min(1.0, fraction))
    if side not in _bar_state:
        _bar_state[side] = {
            "displayed": fraction,
            "prev": fraction,
            "shake_timer": 0.0,
        }
    st = _bar_state[side]

    # Detect a drop → trigger shake
    if fraction < st["prev"]:
        st["shake_timer"] = _SHAKE_DURATION
    st["prev"] = fraction

    if st["shake_timer"] > 0:
        st["shake_timer"] -= dt
        shake_x = random.randint(-_SHAKE_INTENSITY, _SHAKE_INTENSITY)
        shake_y = random.randint(-_SHAKE_INTENSITY, _SHAKE_INTENSITY)
    else:
        shake_x, shake_y = 0, 0

    bx = x + shake_x
    by = y + shake_y

    st["displayed"] += (fraction - st["displayed"]) * _LERP_SPEED
    displayed = st["displayed"]
    radius = 4

    shadow_rect = pygame.Rect(bx + 2, by + 2, HEALTHBAR_WIDTH, HEALTHBAR_HEIGHT)
    pygame.draw.rect(surface, (15, 15, 15), shadow_rect, border_radius=radius)

    bg_rect = pygame.Rect(bx, by, HEALTHBAR_WIDTH, HEALTHBAR_HEIGHT)
    pygame.draw.rect(surface, GRAY, bg_rect, border_radius=radius)

    # Player bar drains toward the centre of the screen
    fill_width = int(HEALTHBAR_WIDTH * displayed)
    if fill_width > 0:
        fx = bx + HEALTHBAR_WIDTH - fill_width if mirrored else bx
        fill_rect = pygame.Rect(fx, by, fill_width, HEALTHBAR_HEIGHT)
        pygame.draw.rect(surface, bar_color(fraction), fill_rect, border_radius=radius)

    pygame.draw.rect(surface, (180, 180, 180), bg_rect, 2, border_radius=radius)


def _draw_pip(surface, x, y, filled: bool):
    pygame.draw.circle(surface, YELLOW if filled else GRAY, (x, y), 5)
    pygame.draw.circle(surface, WHITE, (x, y), 5, 1)


def _draw_meter(surface, x, y, charge: float):
    frac = max(0.0, min(1.0, charge / SPECIAL_CHARGE_MAX))
    pygame.draw.rect(surface, GRAY, (x, y, HEALTHBAR_WIDTH, 4))
    color = YELLOW if charge >= SPECIAL_CHARGE_COST else (120, 120, 160)
    pygame.draw.rect(surface, color, (x, y, int(HEALTHBAR_WIDTH * frac), 4))


def _clear_cache():
    """Reset the displayed-HP cache (call on match reset)."""
    _bar_state.clear()


# Small font helper (cached after first call)
_font_cache = None

def font_small():
    global _font_cache
    if _font_cache is None:
        _font_cache = pygame.font.SysFont(None, SMALL_FONT_SIZE)
    return _font_cache
