from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol

from freespace_gui.collectors.disk_collector import DiskCollector
from freespace_gui.models.disk import DiskRecord, DiskSnapshot
from freespace_gui.models.preferences import DisplayMode, Preferences
from freespace_gui.services.change_service import has_significant_change
from freespace_gui.services.format_service import format_bytes
from freespace_gui.services.policy_service import apply_policy, pick_main_disk

logger = logging.getLogger("freespace_gui.monitor")

NO_DISKS_TITLE = "No disks"


@dataclass(frozen=True)
class DetailRow:
    heading: str
    usage: str
    fraction: float


@dataclass(frozen=True)
class IndicatorView:
    title: str
    disks: tuple[DiskRecord, ...]
    display_mode: DisplayMode
    use_binary_units: bool

    def rows(self) -> list[DetailRow]:
        out: list[DetailRow] = []
        for d in self.disks:
            used = format_bytes(d.used_bytes, self.use_binary_units)
            total = format_bytes(d.total_bytes, self.use_binary_units)
            out.append(
                DetailRow(
                    heading=f"{d.device} on {d.path}",
                    usage=f"{used} / {total}",
                    fraction=d.used_fraction,
                )
            )
        return out


class RenderSink(Protocol):
    def render(self, view: IndicatorView) -> None: ...


def build_title(visible: tuple[DiskRecord, ...], prefs: Preferences) -> str:
    main = pick_main_disk(visible, prefs)
    if main is None:
        return NO_DISKS_TITLE
    return format_bytes(main.free_bytes, prefs.use_binary_units, condensed=True)


class DiskMonitor:
    """Runs refresh cycles and owns the last rendered (visible) snapshot."""

    def __init__(self, collector: DiskCollector, sink: RenderSink, prefs: Preferences | None = None) -> None:
        self.collector = collector
        self.sink = sink
        self._prefs = prefs or Preferences()
        self._lock = threading.Lock()
        self._snapshot: DiskSnapshot | None = None
        self._visible: tuple[DiskRecord, ...] | None = None

    @property
    def prefs(self) -> Preferences:
        return self._prefs

    @property
    def visible(self) -> tuple[DiskRecord, ...] | None:
        return self._visible

    def refresh(self, forced: bool = False) -> bool:
        """Run one sampling cycle; returns True when the sink was re-rendered."""
        try:
            res = self.collector.collect()
        except Exception:  # noqa: BLE001
            logger.exception("Refresh cycle failed")
            return False

        if not res.ok:
            for w in res.warnings:
                logger.info(w)
        return self._accept(res.data, forced)

    def update_preferences(self, prefs: Preferences) -> bool:
        """Swap preferences and re-render from the last snapshot.

        Returns False when no snapshot was built yet; the caller then has to
        schedule a sampling cycle.
        """
        with self._lock:
            self._prefs = prefs
            if self._snapshot is None:
                return False
            return self._accept_locked(self._snapshot, forced=True)

    def build_view(self) -> IndicatorView:
        prefs = self._prefs
        visible = self._visible or ()
        return IndicatorView(
            title=build_title(visible, prefs),
            disks=visible,
            display_mode=prefs.indicator_display_mode,
            use_binary_units=prefs.use_binary_units,
        )

    def _accept(self, snapshot: DiskSnapshot, forced: bool) -> bool:
        with self._lock:
            if self._snapshot is None and self._prefs.main_mount_point not in snapshot.paths:
                logger.warning("Main mount point %s is not among the sampled mounts", self._prefs.main_mount_point)
            return self._accept_locked(snapshot, forced)

    def _accept_locked(self, snapshot: DiskSnapshot, forced: bool) -> bool:
        # caller holds self._lock: prefs, policy, comparison and render stay in one step
        visible = apply_policy(snapshot.disks, self._prefs)
        self._snapshot = snapshot
        if not has_significant_change(self._visible, visible, forced):
            logger.debug("No significant change across %d disks", len(visible))
            return False
        self._visible = visible

        if not visible:
            logger.warning("No disks to show")
        try:
            self.sink.render(self.build_view())
        except Exception:  # noqa: BLE001
            logger.exception("Render failed")
        return True
