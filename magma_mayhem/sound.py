# Sound effects

from __future__ import annotations

import os

import pygame

from magma_mayhem.constants import (
    MUSIC_PATH, HOP_SFX_PATH, HIT_SFX_PATH, COLLECT_SFX_PATH, COUNTDOWN_SFX_PATH,
    GO_SFX_PATH, LEVEL_UP_SFX_PATH, WIN_SFX_PATH, GAME_OVER_SFX_PATH
)
from magma_mayhem.models import EventType, GameEvent

EVENT_SOUNDS = {
    EventType.HOP: HOP_SFX_PATH,
    EventType.HIT: HIT_SFX_PATH,
    EventType.COLLECT: COLLECT_SFX_PATH,
    EventType.COUNTDOWN_TICK: COUNTDOWN_SFX_PATH,
    EventType.GO: GO_SFX_PATH,
    EventType.LEVEL_COMPLETE: LEVEL_UP_SFX_PATH,
    EventType.WIN: WIN_SFX_PATH,
    EventType.GAME_OVER: GAME_OVER_SFX_PATH,
}


class SoundEffect:
    """
    Plays one optional sound per game event.

    Every asset is optional and so is the mixer itself: anything that fails to
    load is reported once and then skipped.
    """

    def __init__(self) -> None:
        self.muted = False
        self.available = False
        self.music_loaded = False

        # Volume settings (0.0 to 1.0)
        self.bgm_volume = 0.5
        self.sfx_volume = 0.7

        self.sounds: dict[EventType, pygame.mixer.Sound] = {}
        self.init_mixer()

    def init_mixer(self) -> None:
        try:
            pygame.mixer.init(frequency=22050, size=-16, channels=2, buffer=512)
        except pygame.error as e:
            print(f"Audio unavailable: {e}")
            return
        self.available = True

        for event, path in EVENT_SOUNDS.items():
            if not os.path.exists(path):
                print(f"Sound effect file not found: {path}")
                continue
            try:
                sound = pygame.mixer.Sound(path)
            except pygame.error as e:
                print(f"Failed to load sound effect {path}: {e}")
                continue
            sound.set_volume(self.sfx_volume)
            self.sounds[event] = sound

        if os.path.exists(MUSIC_PATH):
            try:
                pygame.mixer.music.load(MUSIC_PATH)
                pygame.mixer.music.set_volume(self.bgm_volume)
                self.music_loaded = True
            except pygame.error as e:
                print(f"Failed to load background music: {e}")
        else:
            print(f"Background music file not found: {MUSIC_PATH}")

    def play(self, event: GameEvent) -> None:
        sound = self.sounds.get(event.kind)
        if sound is not None and not self.muted:
            sound.play()

    def start_music(self) -> None:
        if self.music_loaded and not pygame.mixer.music.get_busy():
            pygame.mixer.music.play(-1)

    def stop_music(self) -> None:
        if self.music_loaded:
            pygame.mixer.music.stop()

    def pause_music(self) -> None:
        if self.music_loaded:
            pygame.mixer.music.pause()

    def resume_music(self) -> None:
        if self.music_loaded:
            pygame.mixer.music.unpause()

    def toggle_mute(self) -> None:
        self.muted = not self.muted
        if self.music_loaded:
            pygame.mixer.music.set_volume(0.0 if self.muted else self.bgm_volume)

    def handle(self, event: GameEvent) -> None:
        """Route one session event to a sound and any music change."""
        if event.kind is EventType.PAUSED:
            self.pause_music()
        elif event.kind is EventType.RESUMED:
            self.resume_music()
        elif event.kind in (EventType.GAME_OVER, EventType.WIN):
            self.stop_music()
        self.play(event)

    def set_sfx_volume(self, volume: float) -> None:
        """Set sound effects volume (0.0 to 1.0)"""
        self.sfx_volume = max(0.0, min(1.0, volume))  # Clamp between 0 and 1
        for sound in self.sounds.values():
            sound.set_volume(self.sfx_volume)
