"""Cue synthesis and playback using numpy + QSoundEffect.

All cues are generated programmatically as WAV files from sine waves
with exponential decay.  Files are cached to disk so subsequent launches
only load them.

Cue names
---------
- ``start``             three ascending notes
- ``halfway``           800 Hz blip
- ``last_ten``          short 600 Hz tick
- ``finish``            rising three-beep fanfare
- ``step_complete``     800 Hz blip between routine steps
- ``routine_complete``  same fanfare as ``finish``
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "BigTimer"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

CUE_NAMES = (
    "start",
    "finish",
    "halfway",
    "last_ten",
    "step_complete",
    "routine_complete",
)

SAMPLE_RATE = 44100
START_GAIN = 0.3
END_GAIN = 0.01


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _beep(freq: float, duration_ms: int) -> np.ndarray:
    """Sine beep whose gain decays exponentially from 0.3 to 0.01."""
    tone = _sine(freq, duration_ms / 1000)
    return tone * np.geomspace(START_GAIN, END_GAIN, len(tone))


def _sequence(beeps: list[tuple[float, float, int]]) -> np.ndarray:
    """Mix ``(offset_s, freq, duration_ms)`` beeps onto one timeline."""
    placed = [(int(SAMPLE_RATE * offset), _beep(freq, dur)) for offset, freq, dur in beeps]
    out = np.zeros(max(start + len(part) for start, part in placed))
    for start, part in placed:
        out[start:start + len(part)] += part
    return out


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_start() -> bytes:
    """Start: C5 → E5 → G5."""
    notes = [523.25, 659.25, 783.99]
    return _to_wav_bytes(_sequence([
        (i * 0.15, freq, 120) for i, freq in enumerate(notes)
    ]))


def _generate_fanfare() -> bytes:
    """Finish: 1000 Hz, then 1200 Hz at 0.6 s, then 1500 Hz at 1.0 s."""
    return _to_wav_bytes(_sequence([
        (0.0, 1000.0, 500),
        (0.6, 1200.0, 300),
        (1.0, 1500.0, 400),
    ]))


def _generate_halfway() -> bytes:
    return _to_wav_bytes(_beep(800.0, 200))


def _generate_last_ten() -> bytes:
    return _to_wav_bytes(_beep(600.0, 100))


def _generate_step_complete() -> bytes:
    return _to_wav_bytes(_beep(800.0, 200))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "start": _generate_start,
    "finish": _generate_fanfare,
    "halfway": _generate_halfway,
    "last_ten": _generate_last_ten,
    "step_complete": _generate_step_complete,
    "routine_complete": _generate_fanfare,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """The application's single cue player.

    Usage::

        player = SoundManager(parent=app)
        player.set_volume(70)
        timer = SingleTimer(cue_player=player)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.5  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a cue by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound loaded for cue %r", name)
            return
        effect.play()

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())
                logger.debug("Generated cue %s", path)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in CUE_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
            else:
                logger.warning("Missing cue file %s", path)
