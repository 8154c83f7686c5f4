"""
main.py - Entry point for Possessed Fighter.

Hosts the fight simulation in a pygame window:
- Round / match controller (systems/round_controller.py)
- Keyboard controller with rebindable keys (keybinds.py)
- Procedural audio cues (audio_manager.py)
- HUD drawn from match snapshots (systems/healthbar.py)
- Match statistics report (ai/stats.py)

The escalation level belongs to the console shell; here it is set with the
number keys 0-4 on the title screen or mid-fight.

Run:  python main.py
"""
VERSION = "1.0.0"

import pygame
import sys
import logging
import math

logger = logging.getLogger(__name__)

# ── Project imports ───────────────────────────────────────
from settings import (
    SCREEN_WIDTH, SCREEN_HEIGHT, FPS, TITLE, BG_COLOR, WHITE, GRAY,
    YELLOW, MAGENTA, RED, FLOOR_COLOR, GROUND_Y,
    FIGHTER_WIDTH, FIGHTER_HEIGHT, HAZARD_WIDTH, HAZARD_HEIGHT,
)
from systems.round_controller import RoundController, RoundPhase
from systems.healthbar import draw_hud, _clear_cache as clear_healthbar_cache
from systems.attack_catalog import get_attack
from systems.vfx_system import CombatEffects
from utils import draw_text, draw_banner, draw_end_screen
from ai.stats import MatchStats
from audio_manager import AudioManager
from keybinds import KeyboardInput, ControlsMenu

FIXED_DT = 1.0 / FPS
_NARRATIVE_HOLD = 3.0   # seconds a narrative line stays on screen

_ESCALATION_KEYS = {
    pygame.K_0: 0, pygame.K_1: 1, pygame.K_2: 2, pygame.K_3: 3, pygame.K_4: 4,
}


# ══════════════════════════════════════════════════════════
#  FIGHTER DRAWING
# ══════════════════════════════════════════════════════════

def draw_fighter(surface: pygame.Surface, snap: dict, color: tuple,
                 offset: tuple[int, int] = (0, 0)):
    """Blocky arcade sprite built from rects, posed by combat state."""
    ox, oy = offset
    x = int(snap["x"]) + ox
    feet = int(snap["y"]) + oy
    h = FIGHTER_HEIGHT // 2 if snap["crouching"] and snap["state"] == "idle" else FIGHTER_HEIGHT
    if snap["state"] == "knockdown":
        body = pygame.Rect(x - 10, feet - 16, FIGHTER_WIDTH + 20, 16)
    else:
        body = pygame.Rect(x, feet - h, FIGHTER_WIDTH, h)

    if snap["invincible"] and int(pygame.time.get_ticks() / 60) % 2:
        color = tuple(min(255, c + 90) for c in color)
    pygame.draw.rect(surface, color, body)

    # Head
    if snap["state"] != "knockdown":
        head_x = body.centerx + snap["facing"] * 4
        pygame.draw.circle(surface, (230, 190, 150), (head_x, body.top - 8), 9)

    # Guard
    if snap["state"] == "blocking":
        gx = body.right if snap["facing"] > 0 else body.left - 6
        pygame.draw.rect(surface, WHITE, (gx, body.top + 10, 6, body.height - 20))

    # Limb extended over the active window
    if snap["state"] == "attacking" and snap["attack"]:
        reach = get_attack(snap["attack"]).range
        reach = int(reach * math.sin(min(1.0, snap["attack_progress"] * 2) * math.pi / 2))
        limb_y = body.top + (12 if snap["attack"] == "punch" else body.height // 2)
        lx = body.right if snap["facing"] > 0 else body.left - reach
        limb_color = YELLOW if snap["attack"] == "special" else color
        pygame.draw.rect(surface, limb_color, (lx, limb_y, reach, 8))

    # Hitstun tint
    if snap["state"] == "hitstun":
        pygame.draw.rect(surface, WHITE, body, 2)


def draw_glitch(surface: pygame.Surface, snap: dict, offset: tuple[int, int] = (0, 0)):
    """Flickering translucent silhouette for the third fighter."""
    alpha = max(0, min(255, int(snap["alpha"] * 255)))
    ghost = pygame.Surface((HAZARD_WIDTH, HAZARD_HEIGHT), pygame.SRCALPHA)
    ghost.fill((*MAGENTA, alpha))
    surface.blit(ghost, (int(snap["x"]) + offset[0],
                         int(snap["y"]) - HAZARD_HEIGHT + offset[1]))


# ══════════════════════════════════════════════════════════
#  GAME
# ══════════════════════════════════════════════════════════

class Game:
    """Top-level game controller.  Owns the loop, events, and rendering."""

    def __init__(self):
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption(TITLE)
        self.clock = pygame.time.Clock()

        # Shell-owned escalation level
        self.escalation_level = 0

        self.audio = AudioManager()
        self.controls = KeyboardInput()
        self.match_stats: MatchStats | None = None
        self.controller: RoundController | None = None

        # Narrative overlay (latest line from the controller)
        self._narrative_text = ""
        self._narrative_timer = 0.0

        self.game_state = "MENU"   # "MENU" | "PLAYING" | "GAME_OVER"
        self.running = True
        self.winner_text = ""

    # ── Match setup ───────────────────────────────────────

    def _start_match(self):
        self.match_stats = MatchStats(self.escalation_level)
        self.controller = RoundController(
            escalation=lambda: self.escalation_level,
            cue_sink=self.audio,
            narrative_sink=self._on_narrative,
            stats=self.match_stats,
            strict=False,
        )
        self.controls.reset()
        clear_healthbar_cache()
        self.audio.reset()
        self._narrative_text = ""
        self._narrative_timer = 0.0
        self.game_state = "PLAYING"
        logger.info("Match started at escalation %d", self.escalation_level)

    def _on_narrative(self, payload: dict):
        text = payload.get("text")
        if text:
            self._narrative_text = text
            self._narrative_timer = _NARRATIVE_HOLD
        logger.info("Narrative event: %s", payload)

    # ── Main loop ─────────────────────────────────────────

    def run(self):
        """Start the game loop."""
        while self.running:
            self.clock.tick(FPS)

            if self.game_state == "MENU":
                self._handle_home_events()
                self._draw_home_screen()
            elif self.game_state == "PLAYING":
                self._handle_events()
                self._update()
                self._draw()
            elif self.game_state == "GAME_OVER":
                self._handle_game_over_events()
                self._draw()

        pygame.quit()
        sys.exit()

    # ── Home Screen (MENU state) ──────────────────────────

    def _handle_home_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_RETURN:
                    self.audio.play("confirm")
                    self._start_match()
                elif event.key == pygame.K_F1:
                    ControlsMenu().run(self.screen, self.clock)
                elif event.key in _ESCALATION_KEYS:
                    self.escalation_level = _ESCALATION_KEYS[event.key]
                elif event.key == pygame.K_ESCAPE:
                    self.running = False

    def _draw_home_screen(self):
        self.screen.fill(BG_COLOR)
        cx = SCREEN_WIDTH // 2
        draw_banner(self.screen, TITLE.upper(), YELLOW, 48, 120)
        draw_banner(self.screen, "PRESS ENTER", WHITE, 28, 220)

        hint_font = pygame.font.SysFont(None, 20)
        lines = [
            f"Escalation {self.escalation_level}  (0-4 to change)",
            "F1: Controls   ESC: Quit",
        ]
        for i, line in enumerate(lines):
            txt = hint_font.render(line, True, (140, 140, 140))
            self.screen.blit(txt, (cx - txt.get_width() // 2, SCREEN_HEIGHT - 70 + i * 22))
        pygame.display.flip()

    # ── Fight ─────────────────────────────────────────────

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.game_state = "MENU"
                elif event.key in _ESCALATION_KEYS:
                    self.escalation_level = _ESCALATION_KEYS[event.key]
                    logger.info("Escalation set to %d", self.escalation_level)

    def _update(self):
        ctrl = self.controller
        ctrl.tick(FIXED_DT, self.controls.poll())

        if self._narrative_timer > 0:
            self._narrative_timer -= FIXED_DT

        snap = ctrl.snapshot()
        self.audio.update(snap.player_health_true,
                          match_active=snap.phase == RoundPhase.FIGHTING.value)

        if ctrl.match.phase == RoundPhase.MATCH_OVER:
            self._on_match_end()

    def _on_match_end(self):
        winner = self.controller.match.winner
        if winner == "player":
            self.winner_text = "YOU WIN"
        elif self.escalation_level >= 3:
            self.winner_text = "YOU WERE ALWAYS GOING TO LOSE"
        else:
            self.winner_text = "GAME OVER"
        self.match_stats.end_match(winner)
        self.game_state = "GAME_OVER"

    def _handle_game_over_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_r:
                    self._start_match()
                elif event.key == pygame.K_ESCAPE:
                    self.game_state = "MENU"

    # ── Rendering ─────────────────────────────────────────

    def _draw(self):
        if self.controller is None:
            return
        snap = self.controller.snapshot()
        effects: CombatEffects = self.controller.effects
        offset = effects.shake_offset()

        self.screen.fill(BG_COLOR)
        pygame.draw.rect(self.screen, FLOOR_COLOR,
                         (0, GROUND_Y + offset[1], SCREEN_WIDTH, SCREEN_HEIGHT - GROUND_Y))

        draw_fighter(self.screen, snap.player, self.controller.player.color, offset)
        draw_fighter(self.screen, snap.opponent, self.controller.opponent.color, offset)
        if snap.hazard is not None:
            draw_glitch(self.screen, snap.hazard, offset)

        effects.draw(self.screen, pygame.font.SysFont(None, 28), offset)
        draw_hud(self.screen, snap, FIXED_DT)

        if snap.banner:
            color = RED if snap.banner.startswith("YOU WERE") else YELLOW
            draw_banner(self.screen, snap.banner, color)
        if self._narrative_timer > 0:
            draw_banner(self.screen, self._narrative_text, MAGENTA, 22,
                        SCREEN_HEIGHT - 40)

        draw_text(self.screen, f"LV {snap.escalation_level}",
                  SCREEN_WIDTH - 44, SCREEN_HEIGHT - 18, GRAY, 16)

        if self.game_state == "GAME_OVER":
            draw_end_screen(self.screen, self.winner_text, snap.score)

        pygame.display.flip()


# ── Run ───────────────────────────────────────────────────
def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    Game().run()


if __name__ == "__main__":
    main()
