from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

MIN_REFRESH_INTERVAL = 10
MAX_REFRESH_INTERVAL = 3600


class DisplayMode(str, Enum):
    ICON = "icon"
    LABEL = "label"
    BOTH = "both"


@dataclass(frozen=True)
class Preferences:
    main_mount_point: str = "/"
    hidden_mount_points: frozenset[str] = field(default_factory=frozenset)
    use_binary_units: bool = True
    indicator_display_mode: DisplayMode = DisplayMode.BOTH
    refresh_interval: int = 60

    def is_hidden(self, path: str) -> bool:
        return path in self.hidden_mount_points
