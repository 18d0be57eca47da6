"""Audio cue package."""

from .cues import SoundManager, CUE_NAMES

__all__ = ["SoundManager", "CUE_NAMES"]
