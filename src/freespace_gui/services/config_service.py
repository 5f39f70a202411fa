from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable

from freespace_gui.exceptions import PreferenceUnavailable
from freespace_gui.models.preferences import (
    MAX_REFRESH_INTERVAL,
    MIN_REFRESH_INTERVAL,
    DisplayMode,
    Preferences,
)

logger = logging.getLogger("freespace_gui.config")

KEY_MAIN_MOUNT_POINT = "main-mount-point"
KEY_HIDDEN_MOUNT_POINTS = "hidden-mount-points"
KEY_USE_BINARY_UNITS = "use-binary-units"
KEY_DISPLAY_MODE = "indicator-display-mode"
KEY_REFRESH_INTERVAL = "refresh-interval"

DEFAULT_PREFERENCES = Preferences()


@dataclass(frozen=True)
class ConfigPaths:
    path: Path


class ConfigService:
    def __init__(self, paths: ConfigPaths | None = None) -> None:
        self.paths = paths or ConfigPaths(path=self.default_path())

    @staticmethod
    def default_path() -> Path:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg:
            base = Path(xdg)
        else:
            base = Path.home() / ".config"
        return base / "freespace_gui" / "config.json"

    def load(self) -> dict[str, Any]:
        p = self.paths.path
        if not p.exists():
            return {}
        try:
            with open(p, "r", encoding="utf-8") as f:
                obj = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read settings from %s: %s", p, e)
            return {}
        return obj if isinstance(obj, dict) else {}

    def save(self, cfg: dict[str, Any]) -> None:
        p = self.paths.path
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(cfg, f, ensure_ascii=False, indent=2, sort_keys=True)
        tmp.replace(p)


def _require(raw: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    if key not in raw:
        raise PreferenceUnavailable(f"missing key {key!r}")
    value = raw[key]
    # bool is an int subclass; don't accept True as an interval
    if isinstance(value, bool) and kind is int:
        raise PreferenceUnavailable(f"{key!r} must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise PreferenceUnavailable(f"{key!r} has unexpected value {value!r}")
    return value


def _get(raw: dict[str, Any], key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    try:
        return _require(raw, key, kind)
    except PreferenceUnavailable as e:
        logger.warning("Preference unavailable, using default %r: %s", default, e)
        return default


def clamp_interval(seconds: int) -> int:
    return max(MIN_REFRESH_INTERVAL, min(MAX_REFRESH_INTERVAL, int(seconds)))


def preferences_from_dict(raw: dict[str, Any]) -> Preferences:
    d = DEFAULT_PREFERENCES
    if not raw:
        return d

    main = _get(raw, KEY_MAIN_MOUNT_POINT, str, d.main_mount_point)

    hidden_obj = _get(raw, KEY_HIDDEN_MOUNT_POINTS, list, sorted(d.hidden_mount_points))
    hidden = frozenset(str(x) for x in hidden_obj if isinstance(x, str))

    binary = _get(raw, KEY_USE_BINARY_UNITS, bool, d.use_binary_units)

    mode_raw = _get(raw, KEY_DISPLAY_MODE, str, d.indicator_display_mode.value)
    try:
        mode = DisplayMode(mode_raw)
    except ValueError:
        logger.warning("Unknown display mode %r, using %r", mode_raw, d.indicator_display_mode.value)
        mode = d.indicator_display_mode

    interval = _get(raw, KEY_REFRESH_INTERVAL, int, d.refresh_interval)
    clamped = clamp_interval(interval)
    if clamped != interval:
        logger.warning("Refresh interval %ss out of range, using %ss", interval, clamped)

    return Preferences(
        main_mount_point=main,
        hidden_mount_points=hidden,
        use_binary_units=binary,
        indicator_display_mode=mode,
        refresh_interval=clamped,
    )


def preferences_to_dict(prefs: Preferences) -> dict[str, Any]:
    return {
        KEY_MAIN_MOUNT_POINT: prefs.main_mount_point,
        KEY_HIDDEN_MOUNT_POINTS: sorted(prefs.hidden_mount_points),
        KEY_USE_BINARY_UNITS: prefs.use_binary_units,
        KEY_DISPLAY_MODE: prefs.indicator_display_mode.value,
        KEY_REFRESH_INTERVAL: prefs.refresh_interval,
    }


ChangedCallback = Callable[[Preferences], None]


class SettingsStore:
    """Current preferences backed by the JSON config file, with change notifications."""

    def __init__(self, config: ConfigService | None = None) -> None:
        self._config = config or ConfigService()
        self._lock = threading.Lock()
        self._callbacks: list[ChangedCallback] = []
        raw = self._config.load()
        self._prefs = preferences_from_dict(raw)
        if not self.path.exists():
            self._config.save(preferences_to_dict(self._prefs))

    @property
    def path(self) -> Path:
        return self._config.paths.path

    def get(self) -> Preferences:
        with self._lock:
            return self._prefs

    def connect(self, callback: ChangedCallback) -> None:
        self._callbacks.append(callback)

    def set(self, **changes: Any) -> Preferences:
        if "hidden_mount_points" in changes:
            changes["hidden_mount_points"] = frozenset(changes["hidden_mount_points"])
        if "indicator_display_mode" in changes:
            changes["indicator_display_mode"] = DisplayMode(changes["indicator_display_mode"])
        if "refresh_interval" in changes:
            changes["refresh_interval"] = clamp_interval(changes["refresh_interval"])

        with self._lock:
            new = replace(self._prefs, **changes)
            if new == self._prefs:
                return new
            self._prefs = new
        self._config.save(preferences_to_dict(new))
        self._notify(new)
        return new

    def reload(self) -> Preferences:
        new = preferences_from_dict(self._config.load())
        with self._lock:
            if new == self._prefs:
                return new
            self._prefs = new
        logger.info("Settings reloaded from %s", self.path)
        self._notify(new)
        return new

    def _notify(self, prefs: Preferences) -> None:
        for cb in list(self._callbacks):
            try:
                cb(prefs)
            except Exception:  # noqa: BLE001
                logger.exception("Settings change handler failed")
