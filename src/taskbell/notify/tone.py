# src/taskbell/notify/tone.py

from __future__ import annotations

import logging
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100

START_HZ = 440.0
END_HZ = 880.0
RAMP_SECONDS = 0.1
DURATION_SECONDS = 1.0
START_GAIN = 0.5
END_GAIN = 0.01


def synthesize_alert_tone(sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """
    Two-step rising sine: 440 Hz sweeping exponentially up to 880 Hz over the
    first 0.1 s, then held, with gain decaying exponentially 0.5 -> 0.01 over 1 s.

    Returns mono float32 samples in [-0.5, 0.5].
    """
    n = int(sample_rate * DURATION_SECONDS)
    t = np.arange(n, dtype=np.float64) / float(sample_rate)

    ramp = np.clip(t / RAMP_SECONDS, 0.0, 1.0)
    freq = START_HZ * (END_HZ / START_HZ) ** ramp

    # Integrate frequency to phase so the sweep has no discontinuities.
    phase = 2.0 * np.pi * np.cumsum(freq) / float(sample_rate)
    gain = START_GAIN * (END_GAIN / START_GAIN) ** (t / DURATION_SECONDS)

    return (gain * np.sin(phase)).astype(np.float32)


class AudioToneNotifier:
    """
    Plays the alert tone through the default output device.

    sounddevice is imported lazily: if it (or PortAudio) is missing, the channel
    reports itself unavailable instead of failing at import time.
    Playback is non-blocking; the tone finishes on the audio thread.
    """

    name = "audio_tone"

    def __init__(self, *, enabled: bool = True, player: Any = None, sample_rate: int = SAMPLE_RATE) -> None:
        self.enabled = bool(enabled)
        self.sample_rate = int(sample_rate)
        self._player = player
        self._probed = player is not None
        self._tone: np.ndarray | None = None

    def _load_player(self) -> Any:
        if self._probed:
            return self._player
        self._probed = True
        try:
            import sounddevice as sd  # type: ignore
        except Exception as e:
            logger.warning("Audio output unavailable (sounddevice/PortAudio missing): %r", e)
            self._player = None
        else:
            self._player = sd
        return self._player

    def available(self) -> bool:
        return self.enabled and self._load_player() is not None

    def notify(self, task, reminder) -> None:
        player = self._load_player()
        if not self.enabled or player is None:
            return
        if self._tone is None:
            self._tone = synthesize_alert_tone(self.sample_rate)
        player.play(self._tone, self.sample_rate)
        logger.debug("Alert tone started reminder=%s", reminder.id)
