"""
audio_manager.py  –  Procedural cue player for the fight.

Every cue the round controller emits ("jump", "hit", "block", "punch",
"shoot", "glitch", "scare", "confirm") is synthesised at startup with numpy
and played through pygame.mixer channels.  A low-HP heartbeat loop runs
underneath while the human fighter is in danger.

No audio files required – everything is synthesised at startup.
If WAV files exist in ``assets/audio/`` they override procedural tones.
If the mixer cannot start the manager stays silent; cues never raise.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

import numpy as np
import pygame

from settings import SCREEN_WIDTH, LOW_HEALTH_FRACTION

logger = logging.getLogger(__name__)

# ─── Constants ────────────────────────────────────────────
_SAMPLE_RATE = 44100
_CHANNELS_MIX = 12        # pygame mixer channels to reserve
_BASE_VOLUME = 0.55        # master volume (0.0 – 1.0)
_ASSETS_DIR = os.path.join(os.path.dirname(__file__), "assets", "audio")

# ─── Waveform helpers ────────────────────────────────────


def _sine(freq: float, dur: float, sr: int = _SAMPLE_RATE) -> np.ndarray:
    """Pure sine wave."""
    t = np.linspace(0, dur, int(sr * dur), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _square(freq: float, dur: float, sr: int = _SAMPLE_RATE) -> np.ndarray:
    """Square wave (sign of sine)."""
    return np.sign(_sine(freq, dur, sr))


def _noise(dur: float, sr: int = _SAMPLE_RATE) -> np.ndarray:
    """White noise burst."""
    return np.random.uniform(-1, 1, int(sr * dur))


def _sweep(f0: float, f1: float, dur: float, sr: int = _SAMPLE_RATE) -> np.ndarray:
    """Sine with a linear frequency glide from *f0* to *f1*."""
    t = np.linspace(0, dur, int(sr * dur), endpoint=False)
    freq = f0 + (f1 - f0) * (t / dur)
    return np.sin(2 * np.pi * np.cumsum(freq) / sr)


def _fade_env(samples: np.ndarray, attack: float = 0.005,
              release: float = 0.05) -> np.ndarray:
    """Apply a linear attack/release envelope so clips don't pop."""
    n = len(samples)
    sr = _SAMPLE_RATE
    att = min(int(attack * sr), n // 2)
    rel = min(int(release * sr), n // 2)
    env = np.ones(n, dtype=np.float64)
    if att > 0:
        env[:att] = np.linspace(0, 1, att)
    if rel > 0:
        env[-rel:] = np.linspace(1, 0, rel)
    return samples * env


def _to_sound(samples: np.ndarray, volume: float = 0.45) -> pygame.mixer.Sound:
    """Convert a float64 numpy array to a pygame Sound (16-bit stereo)."""
    samples = np.clip(samples * volume, -1, 1)
    pcm = (samples * 32767).astype(np.int16)
    # Duplicate mono to stereo (interleaved L R L R ...)
    stereo = np.column_stack((pcm, pcm)).flatten()
    return pygame.mixer.Sound(buffer=stereo.tobytes())


# ─── Procedural cue definitions ──────────────────────────
# Each returns (samples, volume) so tests can inspect waveforms without a mixer.


def _synth_jump() -> tuple[np.ndarray, float]:
    """Rising square chirp."""
    dur = 0.12
    samples = np.sign(_sweep(220, 660, dur))
    return _fade_env(samples, 0.002, 0.04), 0.25


def _synth_punch() -> tuple[np.ndarray, float]:
    """Short whoosh of a swing."""
    dur = 0.08
    t = np.linspace(0, dur, int(_SAMPLE_RATE * dur), endpoint=False)
    samples = _noise(dur) * np.exp(-t * 30) * 0.6
    return _fade_env(samples, 0.002, 0.03), 0.30


def _synth_hit() -> tuple[np.ndarray, float]:
    """Punchy click plus low body."""
    click = _noise(0.015) * 0.7
    body = _sine(160, 0.08) * 0.6
    samples = np.concatenate([click, body])
    return _fade_env(samples, 0.001, 0.03), 0.45


def _synth_block() -> tuple[np.ndarray, float]:
    """Dull knock with a metallic ring."""
    knock = _sine(90, 0.05) * 0.6
    ring = _square(1400, 0.04) * 0.15
    samples = np.concatenate([knock, ring])
    return _fade_env(samples, 0.001, 0.02), 0.35


def _synth_shoot() -> tuple[np.ndarray, float]:
    """Falling zap for the special move."""
    samples = _sweep(1200, 200, 0.25) * 0.5 + _noise(0.25) * 0.1
    return _fade_env(samples, 0.003, 0.08), 0.40


def _synth_glitch() -> tuple[np.ndarray, float]:
    """Bit-crushed stutter."""
    dur = 0.18
    tone = _square(97, dur) * 0.4 + _noise(dur) * 0.3
    step = 220
    held = np.repeat(tone[::step], step)[:len(tone)]
    return _fade_env(held, 0.001, 0.03), 0.35


def _synth_scare() -> tuple[np.ndarray, float]:
    """Dissonant swell."""
    dur = 0.6
    samples = (_sine(110, dur) * 0.4 + _sine(116.5, dur) * 0.4
               + _noise(dur) * 0.1)
    return _fade_env(samples, 0.08, 0.20), 0.50


def _synth_confirm() -> tuple[np.ndarray, float]:
    """Two-note menu blip."""
    samples = np.concatenate([_sine(660, 0.06), _sine(990, 0.08)]) * 0.4
    return _fade_env(samples, 0.003, 0.03), 0.30


def _synth_heartbeat() -> tuple[np.ndarray, float]:
    """Loopable low heartbeat bass – ~0.8 s loop."""
    dur = 0.80
    t = np.linspace(0, dur, int(_SAMPLE_RATE * dur), endpoint=False)
    # Double thump
    beat1_env = np.exp(-((t - 0.05) ** 2) / 0.002)
    beat2_env = np.exp(-((t - 0.25) ** 2) / 0.003)
    wave = (_sine(45, dur) * (beat1_env + beat2_env * 0.7))
    return _fade_env(wave, 0.01, 0.05), 0.35


# ─── Sound registry ──────────────────────────────────────

CUE_SYNTHS: dict[str, Callable[[], tuple[np.ndarray, float]]] = {
    "jump":     _synth_jump,
    "punch":    _synth_punch,
    "hit":      _synth_hit,
    "block":    _synth_block,
    "shoot":    _synth_shoot,
    "glitch":   _synth_glitch,
    "scare":    _synth_scare,
    "confirm":  _synth_confirm,
}

_LOOP_SYNTHS: dict[str, Callable[[], tuple[np.ndarray, float]]] = {
    "heartbeat": _synth_heartbeat,
}


# ==============================================================
#  AudioManager
# ==============================================================

class AudioManager:
    """Cue sink backed by pygame.mixer.

    * Preloads all cues at startup (procedural or WAV files).
    * Non-blocking playback via mixer channels.
    * Stereo panning based on world X position.
    * Low-HP tension heartbeat loop.

    Instances are callable, so one can be handed straight to the round
    controller as its cue sink.
    """

    def __init__(self):
        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self.enabled = False
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.pre_init(
                    frequency=_SAMPLE_RATE, size=-16, channels=2, buffer=512,
                )
                pygame.mixer.init()
            pygame.mixer.set_num_channels(_CHANNELS_MIX)
            self._preload()
            self.enabled = True
        except pygame.error as exc:
            logger.warning("Audio disabled: %s", exc)

        self._volume = _BASE_VOLUME

        # Heartbeat (low-HP tension) state
        self._heartbeat_channel: Optional[pygame.mixer.Channel] = None
        self._heartbeat_active = False

    # ── Preload ───────────────────────────────────────────

    def _preload(self):
        """Load all sounds – prefer WAV files, fall back to procedural."""
        for name, synth in {**CUE_SYNTHS, **_LOOP_SYNTHS}.items():
            wav_path = os.path.join(_ASSETS_DIR, f"{name}.wav")
            if os.path.isfile(wav_path):
                try:
                    self._sounds[name] = pygame.mixer.Sound(wav_path)
                    continue
                except pygame.error as exc:
                    logger.debug("Bad WAV %s (%s), synthesising", wav_path, exc)
            samples, volume = synth()
            self._sounds[name] = _to_sound(samples, volume)

    # ── Core playback ─────────────────────────────────────

    def play(self, name: str, x_pos: Optional[float] = None,
             volume_mult: float = 1.0):
        """Play a cue by name.  Unknown cues and busy mixers are ignored.

        Parameters
        ----------
        name        : key in the cue registry.
        x_pos       : world X position for stereo panning (None = centre).
        volume_mult : extra multiplier on top of the master volume.
        """
        if not self.enabled:
            return
        sound = self._sounds.get(name)
        if sound is None:
            logger.debug("Unknown cue %r", name)
            return

        channel = pygame.mixer.find_channel()
        if channel is None:
            return  # all channels busy

        vol = self._volume * volume_mult
        if x_pos is not None:
            left, right = self._stereo_pan(x_pos)
            channel.set_volume(left * vol, right * vol)
        else:
            channel.set_volume(vol, vol)
        channel.play(sound)

    __call__ = play

    # ── Per-frame update ──────────────────────────────────

    def update(self, player_hp_frac: float = 1.0, match_active: bool = True):
        """Call once per frame to drive the heartbeat loop."""
        if not self.enabled:
            return
        if match_active:
            self._update_heartbeat(player_hp_frac)
        elif self._heartbeat_active:
            self._stop_heartbeat()

    # ── Stereo panning ────────────────────────────────────

    @staticmethod
    def _stereo_pan(x_pos: float) -> tuple[float, float]:
        """Compute (left, right) volume from world X position."""
        pan = max(0.0, min(1.0, x_pos / SCREEN_WIDTH))
        right = 0.3 + 0.7 * pan        # never fully silent on either side
        left = 0.3 + 0.7 * (1.0 - pan)
        return left, right

    # ── Heartbeat (low-HP tension) ────────────────────────

    def _update_heartbeat(self, hp_frac: float):
        """Start / stop / modulate the heartbeat loop."""
        if 0 < hp_frac < LOW_HEALTH_FRACTION:
            # Louder as HP drops toward 0
            intensity = 1.0 - (hp_frac / LOW_HEALTH_FRACTION)
            target = 0.15 + 0.35 * intensity
            if not self._heartbeat_active:
                self._start_heartbeat()
            if self._heartbeat_channel is not None:
                cur = self._heartbeat_channel.get_volume()
                new_vol = cur + (target - cur) * 0.08
                self._heartbeat_channel.set_volume(new_vol, new_vol)
        elif self._heartbeat_active:
            self._stop_heartbeat()

    def _start_heartbeat(self):
        sound = self._sounds.get("heartbeat")
        if sound is None:
            return
        ch = pygame.mixer.find_channel()
        if ch is None:
            return
        ch.set_volume(0.0, 0.0)  # start silent, fade in
        ch.play(sound, loops=-1)
        self._heartbeat_channel = ch
        self._heartbeat_active = True

    def _stop_heartbeat(self):
        if self._heartbeat_channel is not None:
            self._heartbeat_channel.fadeout(400)
        self._heartbeat_channel = None
        self._heartbeat_active = False

    # ── Reset ─────────────────────────────────────────────

    def reset(self):
        """Stop all audio.  Call on match restart."""
        if self.enabled:
            pygame.mixer.stop()
        self._heartbeat_active = False
        self._heartbeat_channel = None
