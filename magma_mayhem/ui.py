"""HUD, overlay screens, and game over / leaderboard screen"""

from __future__ import annotations

import pygame

from magma_mayhem.constants import (
    HUD_PADDING, HUD_HEIGHT, TEXT_COLOR, TOTAL_LEVELS, MAX_LEVEL_SCORE, MAX_TOTAL_SCORE,
    START_LIVES, FONT_NAME, FONT_SIZE_SMALL, CHARACTERS, CHARACTER_COLORS
)

HEART_COLOR = (255, 68, 102)
HEART_LOST = (70, 60, 70)


def timer_bar_color(percentage: float) -> tuple[int, int, int]:
    if percentage > 60:
        return (0, 255, 136)
    if percentage > 30:
        return (255, 204, 0)
    return (255, 68, 68)


class HUD:
    """Heads-Up Display: sector and lives on the left, score and timer bar on the right."""

    def __init__(self, font: pygame.font.Font) -> None:
        self.font = font
        self.small_font = pygame.font.Font(FONT_NAME, FONT_SIZE_SMALL)

    def draw(self, surf: pygame.Surface, level: int, total_score: int, lives: int,
             level_score: int, show_fps: bool = False, fps: float = 0.0,
             paused: bool = False, muted: bool = False) -> None:
        current_width = surf.get_width()

        # LEFT SIDE: Sector and lives
        left_x = HUD_PADDING
        left_y = HUD_PADDING

        level_text = self.font.render(f"Sector {level}/{TOTAL_LEVELS}", True, TEXT_COLOR)
        surf.blit(level_text, (left_x, left_y))
        left_y += level_text.get_height() + 8

        for i in range(START_LIVES):
            color = HEART_COLOR if i < lives else HEART_LOST
            pygame.draw.circle(surf, color, (left_x + 8 + i * 24, left_y + 8), 8)

        # RIGHT SIDE: Score, potential award and timer bar
        score_text = self.font.render(f"Score: {total_score}", True, TEXT_COLOR)
        right_x = current_width - score_text.get_width() - HUD_PADDING
        surf.blit(score_text, (right_x, HUD_PADDING))

        percentage = level_score / MAX_LEVEL_SCORE * 100
        bar_rect = pygame.Rect(current_width - 160 - HUD_PADDING, HUD_PADDING + 30, 160, 12)
        pygame.draw.rect(surf, (40, 40, 60), bar_rect)
        fill = bar_rect.copy()
        fill.width = int(bar_rect.width * percentage / 100)
        pygame.draw.rect(surf, timer_bar_color(percentage), fill)
        pygame.draw.rect(surf, TEXT_COLOR, bar_rect, 1)

        potential = self.small_font.render(f"+{max(1, level_score)}", True, TEXT_COLOR)
        surf.blit(potential, (bar_rect.x - potential.get_width() - 6, bar_rect.y - 2))

        status_y = HUD_PADDING + 48
        if show_fps:
            fps_color = (0, 255, 0) if fps >= 55 else (255, 255, 0) if fps >= 30 else (255, 0, 0)
            fps_text = self.small_font.render(f"FPS: {fps:.1f}", True, fps_color)
            surf.blit(fps_text, (bar_rect.x, status_y))
            status_y += fps_text.get_height() + 2

        if muted:
            muted_text = self.small_font.render("MUTED", True, (255, 150, 150))
            surf.blit(muted_text, (bar_rect.x, status_y))

        if paused:
            pause_text = self.font.render("PAUSED", True, (255, 255, 100))
            text_rect = pause_text.get_rect(center=(current_width // 2, HUD_HEIGHT + 40))
            # Semi-transparent background
            bg_rect = text_rect.inflate(20, 10)
            bg_surf = pygame.Surface(bg_rect.size, pygame.SRCALPHA)
            bg_surf.fill((0, 0, 0, 128))
            surf.blit(bg_surf, bg_rect)
            surf.blit(pause_text, text_rect)


class MessageScreen:
    """Centered title plus a few lines of text over a dimmed playfield."""

    def __init__(self, font_big: pygame.font.Font, font_small: pygame.font.Font):
        self.font_big = font_big
        self.font_small = font_small

    def draw(self, surf: pygame.Surface, title: str, lines: list[str],
             title_color: tuple[int, int, int] = (255, 255, 100), dim: bool = True) -> int:
        """Draw the screen and return the y just below the last line."""
        current_width = surf.get_width()
        current_height = surf.get_height()

        if dim:
            overlay = pygame.Surface((current_width, current_height), pygame.SRCALPHA)
            overlay.fill((0, 0, 0, 180))
            surf.blit(overlay, (0, 0))

        title_y = max(80, int(current_height * 0.25))
        title_text = self.font_big.render(title, True, title_color)
        surf.blit(title_text, title_text.get_rect(center=(current_width // 2, title_y)))

        y_offset = title_y + 70
        for line in lines:
            text_surf = self.font_small.render(line, True, TEXT_COLOR)
            surf.blit(text_surf, text_surf.get_rect(center=(current_width // 2, y_offset)))
            y_offset += 28
        return y_offset


class StartScreen(MessageScreen):
    """Title, character picker and controls."""

    def draw_start(self, surf: pygame.Surface, selected: str) -> None:
        y = self.draw(surf, "MAGMA MAYHEM", [
            "Collect every blue tile. Don't stand in the lava.",
            "Clear a sector fast for up to 10 points.",
        ], dim=False)

        center_x = surf.get_width() // 2
        spacing = 90
        first_x = center_x - spacing * (len(CHARACTERS) - 1) // 2
        for i, name in enumerate(CHARACTERS):
            x = first_x + i * spacing
            body, accent = CHARACTER_COLORS[name]
            pygame.draw.circle(surf, body, (x, y + 30), 22)
            pygame.draw.circle(surf, accent, (x, y + 30), 8)
            if name == selected:
                pygame.draw.circle(surf, TEXT_COLOR, (x, y + 30), 28, 2)
            label = self.font_small.render(name, True, TEXT_COLOR)
            surf.blit(label, label.get_rect(center=(x, y + 70)))

        hint = self.font_small.render("[LEFT/RIGHT] character | [ENTER] start | [ESC] quit", True, (180, 180, 180))
        surf.blit(hint, hint.get_rect(center=(center_x, y + 120)))


class GameOverScreen(MessageScreen):
    """Game over / win screen with final stats and leaderboard submission."""

    def draw_final(self, surf: pygame.Surface, won: bool, total_score: int, level: int,
                   name: str, status: str, top: list[dict]) -> None:
        title = "YOU WIN!" if won else "GAME OVER"
        color = (0, 255, 136) if won else (255, 100, 100)
        lines = [
            f"Score: {total_score}/{MAX_TOTAL_SCORE}",
            f"Reached Sector: {level}",
            f"Name: {name}_",
            status,
        ]
        y = self.draw(surf, title, lines, color)

        for i, entry in enumerate(top[:5]):
            line = f"#{i + 1}  {entry['name']}  {entry['score']}"
            text_surf = self.font_small.render(line, True, (200, 200, 200))
            surf.blit(text_surf, text_surf.get_rect(center=(surf.get_width() // 2, y + i * 22)))

        inst = self.font_small.render("Type a name + [ENTER] to submit, [ENTER] again to replay | [ESC] quit",
                                      True, (150, 150, 150))
        surf.blit(inst, inst.get_rect(center=(surf.get_width() // 2, surf.get_height() - 30)))
