"""Audio cue tests – waveform synthesis and the silent fallback."""

import numpy as np
import pygame
import pytest

import audio_manager
from audio_manager import AudioManager, CUE_SYNTHS
from systems.round_controller import ACTION_CUES


class TestSynthesis:
    """Procedural cue waveforms"""

    def test_every_controller_cue_has_a_sound(self):
        emitted = set(ACTION_CUES.values()) | {"hit", "block", "glitch", "scare"}
        assert emitted <= set(CUE_SYNTHS)

    @pytest.mark.parametrize("name", sorted(CUE_SYNTHS))
    def test_waveform(self, name):
        samples, volume = CUE_SYNTHS[name]()
        assert samples.ndim == 1
        assert len(samples) > 0
        assert np.all(np.isfinite(samples))
        assert 0 < volume <= 1

    def test_envelope_silences_edges(self):
        out = audio_manager._fade_env(np.ones(1000), attack=0.001, release=0.001)
        assert out[0] == 0
        assert out[-1] == 0
        assert out[500] == 1


class TestSilentFallback:
    """No mixer → cues are dropped quietly"""

    @pytest.fixture
    def silent(self, monkeypatch):
        def broken_init(*_args, **_kwargs):
            raise pygame.error("no audio device")

        monkeypatch.setattr(pygame.mixer, "get_init", lambda: None)
        monkeypatch.setattr(pygame.mixer, "pre_init", lambda *a, **k: None)
        monkeypatch.setattr(pygame.mixer, "init", broken_init)
        return AudioManager()

    def test_disabled(self, silent):
        assert not silent.enabled

    def test_play_is_a_no_op(self, silent):
        silent.play("hit")
        silent("scare")
        silent.update(0.1)
        silent.reset()

    def test_stereo_pan(self):
        left, right = AudioManager._stereo_pan(0)
        assert left == pytest.approx(1.0)
        assert right == pytest.approx(0.3)
