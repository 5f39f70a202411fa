from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

from helpers import GB
from freespace_gui.models.common import CollectorResult
from freespace_gui.models.disk import DiskSnapshot
from freespace_gui.models.preferences import DisplayMode, Preferences
from freespace_gui.services.monitor_service import NO_DISKS_TITLE, DiskMonitor, IndicatorView


class RecordingSink:
    def __init__(self) -> None:
        self.views: list[IndicatorView] = []

    def render(self, view: IndicatorView) -> None:
        self.views.append(view)


class ScriptedCollector:
    def __init__(self, *snapshots) -> None:
        self.snapshots = list(snapshots)
        self.calls = 0

    def collect(self) -> CollectorResult[DiskSnapshot]:
        self.calls += 1
        item = self.snapshots.pop(0) if len(self.snapshots) > 1 else self.snapshots[0]
        if isinstance(item, Exception):
            raise item
        return CollectorResult(ts=datetime.now(), status="OK", warning_count=0, data=DiskSnapshot(disks=tuple(item)))


def test_end_to_end_main_mount_first(two_disks) -> None:
    sink = RecordingSink()
    prefs = Preferences(main_mount_point="/data", use_binary_units=False)
    monitor = DiskMonitor(ScriptedCollector(two_disks), sink, prefs)

    assert monitor.refresh() is True

    view = sink.views[-1]
    assert [d.path for d in view.disks] == ["/data", "/"]
    assert view.disks[0].free_bytes == 490 * GB
    assert view.title == "490.0G"
    assert view.display_mode == DisplayMode.BOTH


def test_title_in_binary_units(two_disks) -> None:
    sink = RecordingSink()
    DiskMonitor(ScriptedCollector(two_disks), sink, Preferences(main_mount_point="/data")).refresh()
    assert sink.views[-1].title == "456.3Gi"


def test_detail_rows(two_disks) -> None:
    sink = RecordingSink()
    DiskMonitor(ScriptedCollector(two_disks), sink, Preferences(use_binary_units=False)).refresh()

    rows = sink.views[-1].rows()
    assert rows[0].heading == "/dev/sda1 on /"
    assert rows[0].usage == "50.0 GB / 100.0 GB"
    assert rows[0].fraction == 0.5
    assert rows[1].heading == "/dev/sdb1 on /data"


def test_small_change_is_suppressed_and_big_one_rendered(two_disks) -> None:
    root, data = two_disks
    small = (replace(root, used_bytes=root.used_bytes + 50_000_000), data)
    big = (replace(root, used_bytes=root.used_bytes + 2 * GB), data)
    sink = RecordingSink()
    monitor = DiskMonitor(ScriptedCollector(two_disks, small, big), sink)

    assert monitor.refresh() is True
    assert monitor.refresh() is False
    assert monitor.visible == two_disks
    assert monitor.refresh() is True
    assert monitor.visible == big
    assert len(sink.views) == 2


def test_forced_refresh_always_renders(two_disks) -> None:
    sink = RecordingSink()
    monitor = DiskMonitor(ScriptedCollector(two_disks), sink)
    monitor.refresh()
    assert monitor.refresh(forced=True) is True
    assert len(sink.views) == 2


def test_failed_cycle_keeps_previous_state(two_disks) -> None:
    sink = RecordingSink()
    monitor = DiskMonitor(ScriptedCollector(two_disks, RuntimeError("findmnt vanished"), two_disks), sink)

    monitor.refresh()
    assert monitor.refresh() is False
    assert monitor.visible == two_disks
    assert len(sink.views) == 1


def test_all_mounts_failing_shows_no_disks() -> None:
    sink = RecordingSink()
    DiskMonitor(ScriptedCollector([]), sink).refresh()
    assert sink.views[-1].title == NO_DISKS_TITLE
    assert sink.views[-1].disks == ()
    assert sink.views[-1].rows() == []


def test_preference_change_rederives_without_sampling(two_disks) -> None:
    sink = RecordingSink()
    collector = ScriptedCollector(two_disks)
    monitor = DiskMonitor(collector, sink)
    monitor.refresh()

    hidden = Preferences(hidden_mount_points=frozenset({"/"}), indicator_display_mode=DisplayMode.ICON)
    assert monitor.update_preferences(hidden) is True

    assert collector.calls == 1
    assert [d.path for d in sink.views[-1].disks] == ["/data"]
    assert sink.views[-1].display_mode == DisplayMode.ICON
    # main mount "/" is hidden, so the first visible disk gives the title
    assert sink.views[-1].title == "456.3Gi"


def test_preference_change_before_first_cycle() -> None:
    sink = RecordingSink()
    monitor = DiskMonitor(ScriptedCollector([]), sink)
    assert monitor.update_preferences(Preferences(main_mount_point="/srv")) is False
    assert sink.views == []
    assert monitor.prefs.main_mount_point == "/srv"


def test_render_errors_do_not_escape(two_disks) -> None:
    class BrokenSink:
        def render(self, view: IndicatorView) -> None:
            raise RuntimeError("widget gone")

    monitor = DiskMonitor(ScriptedCollector(two_disks), BrokenSink())
    assert monitor.refresh() is True
    assert monitor.visible == two_disks


class _DisksStartingPrefChange(tuple):
    """Disk tuple that fires a callback the first time it is iterated."""

    def __new__(cls, disks, on_first_iter):
        obj = super().__new__(cls, disks)
        obj.on_first_iter = on_first_iter
        return obj

    def __iter__(self):
        callback, self.on_first_iter = self.on_first_iter, None
        if callback is not None:
            callback()
        return super().__iter__()


def test_preference_change_during_cycle_is_not_undone(two_disks) -> None:
    sink = RecordingSink()
    hidden = Preferences(hidden_mount_points=frozenset({"/"}))
    threads: list[threading.Thread] = []

    def change_prefs_concurrently() -> None:
        t = threading.Thread(target=monitor.update_preferences, args=(hidden,))
        threads.append(t)
        t.start()
        # the GUI thread gets a chance to run while the cycle applies the policy
        t.join(timeout=0.2)

    class RacingCollector:
        def __init__(self) -> None:
            self.calls = 0

        def collect(self) -> CollectorResult[DiskSnapshot]:
            self.calls += 1
            disks = two_disks if self.calls == 1 else _DisksStartingPrefChange(two_disks, change_prefs_concurrently)
            return CollectorResult(ts=datetime.now(), status="OK", warning_count=0, data=DiskSnapshot(disks=disks))

    monitor = DiskMonitor(RacingCollector(), sink)
    monitor.refresh()
    monitor.refresh()
    for t in threads:
        t.join(timeout=5)

    assert monitor.prefs == hidden
    assert [d.path for d in monitor.visible] == ["/data"]
    assert [d.path for d in sink.views[-1].disks] == ["/data"]


def test_missing_main_mount_is_reported_once(two_disks, caplog) -> None:
    monitor = DiskMonitor(ScriptedCollector(two_disks), RecordingSink(), Preferences(main_mount_point="/srv"))

    monitor.refresh()
    monitor.refresh(forced=True)

    warnings = [r for r in caplog.records if "Main mount point /srv" in r.getMessage()]
    assert len(warnings) == 1


def test_present_main_mount_is_not_reported(two_disks, caplog) -> None:
    DiskMonitor(ScriptedCollector(two_disks), RecordingSink(), Preferences(main_mount_point="/data")).refresh()
    assert "Main mount point" not in caplog.text
