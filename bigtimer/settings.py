"""Timer preferences with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/BigTimer/settings.json

Usage::

    settings = load_settings()
    settings.sound_halfway = True
    save_settings(settings)

Schema versions
---------------
1  ``focus_lock_enabled`` and ``style`` only.
2  adds ``last_custom_minutes``, the three sound toggles and
   ``sound_volume``.

Older files are upgraded on load: fields they do not carry take their
defaults.  The file is always written with the current version.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "BigTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

SCHEMA_VERSION = 2

STYLE_CHOICES = ("numbers", "pie", "bar")
MIN_CUSTOM_MINUTES = 1
MAX_CUSTOM_MINUTES = 180


def clamp_custom_minutes(minutes: int) -> int:
    return max(MIN_CUSTOM_MINUTES, min(MAX_CUSTOM_MINUTES, int(minutes)))


@dataclass
class TimerSettings:
    """User preferences that survive across runs and launches."""

    schema_version: int = SCHEMA_VERSION

    # ── timer ─────────────────────────────────────────────────────────
    focus_lock_enabled: bool = False
    style: str = "numbers"                 # numbers | pie | bar
    last_custom_minutes: int = 10          # 1-180

    # ── audio cues ────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_halfway: bool = False
    sound_last_ten: bool = False
    sound_volume: int = 50                 # 0-100, player only

    def normalized(self) -> TimerSettings:
        """Copy with every field coerced into its legal range."""
        defaults = TimerSettings()
        style = self.style
        if isinstance(style, int) and not isinstance(style, bool) \
                and 0 <= style < len(STYLE_CHOICES):
            style = STYLE_CHOICES[style]   # v1 stored the enum ordinal
        if style not in STYLE_CHOICES:
            style = "numbers"
        return TimerSettings(
            schema_version=SCHEMA_VERSION,
            focus_lock_enabled=_flag(self.focus_lock_enabled, defaults.focus_lock_enabled),
            style=style,
            last_custom_minutes=clamp_custom_minutes(self.last_custom_minutes),
            sound_enabled=_flag(self.sound_enabled, defaults.sound_enabled),
            sound_halfway=_flag(self.sound_halfway, defaults.sound_halfway),
            sound_last_ten=_flag(self.sound_last_ten, defaults.sound_last_ten),
            sound_volume=max(0, min(100, int(self.sound_volume))),
        )


def _flag(value, default: bool) -> bool:
    # JSON booleans only; strings like "false" take the default
    return value if isinstance(value, bool) else default


def settings_from_dict(data: dict) -> TimerSettings:
    """Build settings from a decoded JSON object of any schema version."""
    valid_keys = {f.name for f in fields(TimerSettings)}
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    version = filtered.pop("schema_version", 1)
    if not isinstance(version, int) or isinstance(version, bool):
        logger.warning("Unreadable settings schema version %r, treating as v1", version)
        version = 1
    if version > SCHEMA_VERSION:
        logger.warning(
            "Settings schema v%s is newer than supported v%s; "
            "reading known fields only", version, SCHEMA_VERSION,
        )
    try:
        return TimerSettings(**filtered).normalized()
    except (TypeError, ValueError):
        logger.warning("Malformed settings values, using defaults")
        return TimerSettings()


def load_settings(path: Path | None = None) -> TimerSettings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return settings_from_dict(data)
            logger.warning("Ignoring settings file %s: not a JSON object", path)
    except (OSError, ValueError):
        logger.warning("Could not read settings from %s", path, exc_info=True)
    return TimerSettings()


def save_settings(settings: TimerSettings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings.normalized()), indent=2) + "\n",
        encoding="utf-8",
    )


class SettingsStore:
    """Key-value store handed to the app: ``load()`` / ``save(snapshot)``."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path or SETTINGS_PATH

    def load(self) -> TimerSettings:
        return load_settings(self.path)

    def save(self, settings: TimerSettings) -> None:
        save_settings(settings, self.path)
        logger.debug("Saved settings to %s", self.path)
