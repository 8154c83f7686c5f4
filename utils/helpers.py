"""helpers.py - Reusable utility functions."""

import pygame
from settings import WHITE, SCREEN_WIDTH, SCREEN_HEIGHT, FONT_SIZE


def draw_text(surface, text, x, y, color=WHITE, size=FONT_SIZE):
    """Render a single line of text at (x, y)."""
    font = pygame.font.SysFont(None, size)
    rendered = font.render(text, True, color)
    surface.blit(rendered, (x, y))


def draw_banner(surface, text, color=WHITE, size=48, y=None):
    """Centre a large line of text horizontally (round / fight / result banners)."""
    if not text:
        return
    font = pygame.font.SysFont(None, size)
    rendered = font.render(text, True, color)
    # Long banners shrink to fit the cabinet screen
    if rendered.get_width() > SCREEN_WIDTH - 20:
        scale = (SCREEN_WIDTH - 20) / rendered.get_width()
        rendered = pygame.transform.smoothscale(
            rendered, (int(rendered.get_width() * scale),
                       int(rendered.get_height() * scale)))
    y = SCREEN_HEIGHT // 2 - 60 if y is None else y
    rect = rendered.get_rect(center=(SCREEN_WIDTH // 2, y))
    surface.blit(rendered, rect)


def draw_end_screen(surface, message, score=None):
    """Fill the screen with a dark overlay and show a large
    win/loss message plus a restart hint."""
    overlay = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT))
    overlay.set_alpha(180)
    overlay.fill((0, 0, 0))
    surface.blit(overlay, (0, 0))

    draw_banner(surface, message, size=56, y=SCREEN_HEIGHT // 2 - 30)

    small_font = pygame.font.SysFont(None, 24)
    if score is not None:
        txt = small_font.render(f"SCORE {score}", True, WHITE)
        surface.blit(txt, txt.get_rect(center=(SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2 + 10)))

    hint = small_font.render("Press R to Restart  |  ESC to Quit", True, WHITE)
    hint_rect = hint.get_rect(center=(SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2 + 40))
    surface.blit(hint, hint_rect)
