"""Game entry point"""

from __future__ import annotations

import math
import pygame

from magma_mayhem.constants import *
from magma_mayhem.leaderboard import LeaderboardStore, LeaderboardError
from magma_mayhem.logger import GameLogger
from magma_mayhem.models import EventType, GameEvent
from magma_mayhem.session import Session, GamePhase, CellState
from magma_mayhem.sound import SoundEffect
from magma_mayhem.ui import HUD, MessageScreen, StartScreen, GameOverScreen

TILE_COLORS = {
    CellState.DEFAULT: TILE_DEFAULT,
    CellState.SAFE_ISLAND: TILE_SAFE_ISLAND,
    CellState.COLLECTIBLE: TILE_COLLECTIBLE,
    CellState.LAVA: TILE_LAVA,
    CellState.COUNTDOWN: TILE_COUNTDOWN,
}

MOVE_KEYS = {
    pygame.K_UP: (0, -1), pygame.K_w: (0, -1),
    pygame.K_DOWN: (0, 1), pygame.K_s: (0, 1),
    pygame.K_LEFT: (-1, 0), pygame.K_a: (-1, 0),
    pygame.K_RIGHT: (1, 0), pygame.K_d: (1, 0),
}

CONFIRM_KEYS = (pygame.K_RETURN, pygame.K_SPACE, pygame.K_KP_ENTER)


class Game:
    """
    Main game controller: owns the window, turns keys into session calls,
    ticks the session once per frame, routes its events to audio and
    effects, and draws the board.
    """

    def __init__(self) -> None:
        """Initialize subsystems and set initial game state."""
        pygame.init()
        pygame.display.set_caption("Magma Mayhem")

        self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
        self.clock = pygame.time.Clock()
        self.font_small = pygame.font.Font(FONT_NAME, FONT_SIZE_MEDIUM)
        self.font_big = pygame.font.Font(FONT_NAME, FONT_SIZE_LARGE)
        self.board_x = (WIDTH - GRID_WIDTH * TILE_PX) // 2
        self.board_y = HUD_HEIGHT

        self.logger = GameLogger(LOG_FILE)
        self.session = Session(logger=self.logger)
        self.sound = SoundEffect()
        self.leaderboard = LeaderboardStore()

        self.hud = HUD(self.font_small)
        self.message_screen = MessageScreen(self.font_big, self.font_small)
        self.start_screen = StartScreen(self.font_big, self.font_small)
        self.game_over_screen = GameOverScreen(self.font_big, self.font_small)

        self.on_start_screen = True
        self.selected_character = DEFAULT_CHARACTER
        self.show_fps = False
        self.fps_samples: list[float] = []
        self.damage_flash_until = 0
        self.score_popup: GameEvent | None = None
        self.reset_submission()

    def reset_submission(self) -> None:
        self.player_name = ""
        self.submit_status = ""
        self.submitted = False
        self.top_scores: list[dict] = []

    def wall_ms(self) -> int:
        return pygame.time.get_ticks()

    # --------------------------------- Loop -----------------------------------------

    def run(self) -> None:
        """Main game loop: process events, update, render; exits on quit request."""
        running = True
        while running:
            self.fps_samples.append(self.clock.get_fps())
            if len(self.fps_samples) > 10:
                self.fps_samples.pop(0)
            avg_fps = sum(self.fps_samples) / len(self.fps_samples)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self.handle_key(event)
                    if not running:
                        break

            now = self.wall_ms()
            self.session.tick(now)
            self.route_events(now)
            self.draw(now, avg_fps)
            self.clock.tick(FPS)

        pygame.quit()

    def route_events(self, now: int) -> None:
        """Hand session events to the audio and effects collaborators."""
        for event in self.session.drain_events():
            self.sound.handle(event)
            if event.kind is EventType.HIT:
                self.damage_flash_until = now + DAMAGE_FLASH_MS
            elif event.kind is EventType.LEVEL_CLEARED:
                self.score_popup = event
            elif event.kind in (EventType.GAME_OVER, EventType.WIN):
                self.reset_submission()
                self.top_scores = self.leaderboard.top()

    # --------------------------------- Input ----------------------------------------

    def handle_key(self, event: pygame.event.Event) -> bool:
        """Dispatch a key press by phase; returns False to quit."""
        now = self.wall_ms()
        phase = self.session.phase

        # Name entry takes every printable key
        if not self.on_start_screen and phase in (GamePhase.GAME_OVER, GamePhase.WON):
            return self.handle_name_key(event, now)

        if event.key == pygame.K_m:
            self.sound.toggle_mute()
            return True
        if event.key == pygame.K_f:
            self.show_fps = not self.show_fps
            return True
        if event.key in (pygame.K_MINUS, pygame.K_EQUALS):
            step = 0.1 if event.key == pygame.K_EQUALS else -0.1
            self.sound.set_sfx_volume(self.sound.sfx_volume + step)
            return True

        if self.on_start_screen:
            return self.handle_start_key(event, now)

        if phase in (GamePhase.PLAYING, GamePhase.PAUSED):
            if event.key in (pygame.K_ESCAPE, pygame.K_p):
                self.session.toggle_pause(now)
            elif event.key in MOVE_KEYS:
                self.session.move(*MOVE_KEYS[event.key], now)
            return True

        if event.key == pygame.K_ESCAPE:
            return False
        if event.key in CONFIRM_KEYS:
            if phase is GamePhase.TUTORIAL:
                self.session.dismiss_tutorial(now)
            elif phase is GamePhase.LEVEL_COMPLETE:
                self.session.next_level(now)
        return True

    def handle_start_key(self, event: pygame.event.Event, now: int) -> bool:
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key in (pygame.K_LEFT, pygame.K_RIGHT):
            step = 1 if event.key == pygame.K_RIGHT else -1
            index = CHARACTERS.index(self.selected_character)
            self.selected_character = CHARACTERS[(index + step) % len(CHARACTERS)]
        elif event.key in CONFIRM_KEYS:
            self.on_start_screen = False
            self.session.start_game(now, self.selected_character)
            self.sound.start_music()
        return True

    def handle_name_key(self, event: pygame.event.Event, now: int) -> bool:
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if self.submitted:
                self.reset_submission()
                self.session.restart_game(now)
                self.sound.start_music()
            else:
                self.submit_score()
        elif event.key == pygame.K_BACKSPACE:
            self.player_name = self.player_name[:-1]
        elif event.unicode and event.unicode.isprintable() and len(self.player_name) < MAX_NAME_LENGTH:
            self.player_name += event.unicode
        return True

    def submit_score(self) -> None:
        """Send the finished run to the leaderboard and show the rank."""
        name, score, level, character = self.session.leaderboard_entry(self.player_name)
        try:
            result = self.leaderboard.submit_score(name, score, level, character)
        except LeaderboardError as e:
            self.submit_status = f"Submission failed: {e}"
            self.logger.log_submission(name, score, None)
            return
        self.submitted = True
        self.submit_status = f"Rank #{result['rank']}! [ENTER] to play again"
        self.top_scores = self.leaderboard.top()
        self.logger.log_submission(name, score, result["rank"])

    # --------------------------------- Rendering ------------------------------------

    def tile_rect(self, x: float, z: float) -> pygame.Rect:
        return pygame.Rect(self.board_x + x * TILE_PX + 1, self.board_y + z * TILE_PX + 1,
                           TILE_PX - 2, TILE_PX - 2)

    def draw_board(self, now: int) -> None:
        game_time = self.session.now(now)
        for cell in self.session.grid.cells():
            state = self.session.cell_state(cell, now)
            color = TILE_COLORS[state]
            if state is CellState.COLLECTIBLE:
                glow = 0.85 + math.sin(game_time / 250) * 0.15
                color = tuple(min(255, int(c * glow)) for c in color)
            pygame.draw.rect(self.screen, color, self.tile_rect(*cell), border_radius=4)

    def draw_player(self, now: int) -> None:
        player = self.session.player
        game_time = self.session.now(now)
        if not player.is_visible(game_time):
            return
        pose = player.pose(game_time)
        body, accent = CHARACTER_COLORS[self.session.character]

        cx = self.board_x + (pose.x + 0.5) * TILE_PX
        cy = self.board_y + (pose.z + 0.5) * TILE_PX - pose.y * TILE_PX * 0.5
        w = TILE_PX * 0.6 * pose.stretch
        h = TILE_PX * 0.6 * pose.squash
        pygame.draw.ellipse(self.screen, body, pygame.Rect(cx - w / 2, cy - h / 2, w, h))

        # Beak / nose on the facing side
        fx, fz = -math.sin(player.facing), -math.cos(player.facing)
        pygame.draw.circle(self.screen, accent, (int(cx + fx * w * 0.4), int(cy + fz * h * 0.4)), 4)

    def draw_popups(self, now: int) -> None:
        popup = self.score_popup
        if popup is None:
            return
        age = self.session.now(now) - popup.at_ms
        if age > SCORE_POPUP_MS:
            self.score_popup = None
            return
        x, z = popup.cell
        text = self.font_big.render(f"+{popup.value}", True, (255, 255, 100))
        rect = self.tile_rect(x, z)
        self.screen.blit(text, text.get_rect(center=(rect.centerx, rect.centery - 20 - age * 0.03)))

    def draw_damage_flash(self, now: int) -> None:
        if now < self.damage_flash_until:
            alpha = int(100 * (self.damage_flash_until - now) / DAMAGE_FLASH_MS)
            flash_surface = pygame.Surface((WIDTH, HEIGHT), pygame.SRCALPHA)
            flash_surface.fill((255, 0, 0, alpha))
            self.screen.blit(flash_surface, (0, 0))

    def draw(self, now: int, fps: float) -> None:
        """Compose the frame: board -> player -> HUD -> effects -> overlays."""
        self.screen.fill(BG_COLOR)
        session = self.session

        if self.on_start_screen:
            self.start_screen.draw_start(self.screen, self.selected_character)
            pygame.display.flip()
            return

        self.draw_board(now)
        if session.phase in (GamePhase.PLAYING, GamePhase.PAUSED):
            self.draw_player(now)
        self.hud.draw(self.screen, session.level, session.total_score, session.lives,
                      session.level_score, self.show_fps, fps, session.is_paused, self.sound.muted)
        self.draw_popups(now)
        self.draw_damage_flash(now)

        phase = session.phase
        if phase is GamePhase.TUTORIAL:
            self.message_screen.draw(self.screen, "HOW TO PLAY", [
                "Arrows / WASD to hop one tile",
                "Step on every blue tile to clear the sector",
                "Red tiles are lava; green tiles are always safe",
                "The faster you clear, the more points (max 10)",
                "[ENTER] to begin",
            ])
        elif phase is GamePhase.COUNTING_DOWN and session.countdown_number(now) is None:
            self.message_screen.draw(self.screen, f"SECTOR {session.level}", [])
        elif phase is GamePhase.LEVEL_COMPLETE:
            self.message_screen.draw(self.screen, "SECTOR CLEARED", [
                f"+{session.last_award} points!",
                f"Score: {session.total_score}",
                "[ENTER] next sector",
            ], (0, 255, 136))
        elif phase in (GamePhase.GAME_OVER, GamePhase.WON):
            self.game_over_screen.draw_final(self.screen, phase is GamePhase.WON, session.total_score,
                                             session.level, self.player_name, self.submit_status,
                                             self.top_scores)

        pygame.display.flip()


def main() -> None:
    Game().run()


if __name__ == "__main__":
    main()
