# SPDX-License-Identifier: GPL-3.0-or-later
"""
User settings, stored in ~/.tinyreplay/config.json.

Missing or unreadable files fall back to defaults; keys missing from the
file take their defaults, unknown keys are ignored.
"""
import json
import logging
import math
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

APP_DIR = os.path.join(os.path.expanduser("~"), ".tinyreplay")
CONFIG_PATH = os.path.join(APP_DIR, "config.json")

HYPER = "<ctrl>+<alt>+<cmd>"

# pynput GlobalHotKeys syntax
DEFAULT_HOTKEYS = {
    "record":      f"{HYPER}+r",
    "play":        f"{HYPER}+p",
    "loop":        f"{HYPER}+<shift>+p",
    "stop":        f"{HYPER}+x",
    "save":        f"{HYPER}+s",
    "load":        f"{HYPER}+l",
    "clear":       f"{HYPER}+c",
    "compress":    f"{HYPER}+k",
    "mouse_moves": f"{HYPER}+m",
    "info":        f"{HYPER}+i",
    "help":        f"{HYPER}+h",
}
# "play N times" is bound to HYPER+1 .. HYPER+9
PLAY_TIMES_PREFIX = HYPER


def _load_json(path: str, default: Any) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as ex:
        logger.warning("Ignoring unreadable config %s: %s", path, ex)
        return default


def _save_json(path: str, data: Any) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _number(settings, defaults, name: str, ok) -> float:
    """Finite float from `settings.name` passing `ok`, else the default."""
    value = getattr(settings, name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = float("nan")
    if math.isfinite(number) and ok(number):
        return number
    logger.warning("Ignoring bad %s %r", name, value)
    return getattr(defaults, name)


@dataclass
class Settings:
    record_mouse_moves: bool = False
    auto_compress_on_save: bool = True
    show_alerts: bool = True
    playback_speed: float = 1.0
    default_path: str = "~/keystroke_recording.json"
    loop_gap: float = 0.25
    repeat_gap: float = 0.2
    move_min_interval: float = 0.01
    verbose: bool = False
    hotkeys: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HOTKEYS))

    @property
    def recording_path(self) -> str:
        return os.path.expanduser(self.default_path)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Settings":
        data = _load_json(path or CONFIG_PATH, {})
        if not isinstance(data, dict):
            logger.warning("Ignoring config that is not a JSON object")
            data = {}
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in data.items() if k in known and k != "hotkeys"})
        # Merge so bindings added later still show up for existing users.
        hotkeys = data.get("hotkeys")
        if isinstance(hotkeys, dict):
            settings.hotkeys.update({k: str(v) for k, v in hotkeys.items() if k in DEFAULT_HOTKEYS})
        defaults = cls()
        settings.playback_speed = _number(settings, defaults, "playback_speed", lambda v: v > 0)
        for name in ("loop_gap", "repeat_gap", "move_min_interval"):
            setattr(settings, name, _number(settings, defaults, name, lambda v: v >= 0))
        return settings

    def save(self, path: Optional[str] = None) -> None:
        _save_json(path or CONFIG_PATH, asdict(self))
