from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QThreadPool, QTimer, Slot

from freespace_gui.gui.workers import RefreshWorker
from freespace_gui.services.config_service import clamp_interval
from freespace_gui.services.monitor_service import DiskMonitor

logger = logging.getLogger("freespace_gui.gui")


class RefreshTimer(QObject):
    """Periodic refresh that re-arms only after the running cycle has finished.

    At most one cycle runs at a time. Requests arriving during a cycle are
    folded into one pending cycle, forced if any of them was.
    """

    def __init__(self, monitor: DiskMonitor, interval_s: int, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._monitor = monitor
        self._interval_s = clamp_interval(interval_s)
        self._pool = QThreadPool.globalInstance()
        self._worker: RefreshWorker | None = None
        self._pending: bool | None = None
        self._stopped = True

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)  # type: ignore[arg-type]

    @property
    def interval_s(self) -> int:
        return self._interval_s

    @property
    def running(self) -> bool:
        return self._worker is not None

    def start(self) -> None:
        self._stopped = False
        if not self.running:
            self._arm()

    def stop(self) -> None:
        self._stopped = True
        self._pending = None
        self._timer.stop()

    def set_interval(self, seconds: int) -> None:
        self._interval_s = clamp_interval(seconds)
        # a running cycle re-arms with the new interval when it completes
        if not self._stopped and not self.running:
            self._arm()

    def trigger(self, forced: bool = True) -> None:
        if self.running:
            self._pending = forced or bool(self._pending)
            return
        self._timer.stop()
        self._run(forced)

    def _arm(self) -> None:
        self._timer.start(self._interval_s * 1000)

    @Slot()
    def _on_timeout(self) -> None:
        self._run(False)

    def _run(self, forced: bool) -> None:
        logger.debug("Starting %s refresh cycle", "forced" if forced else "scheduled")
        w = RefreshWorker(self._monitor, forced)
        w.signals.rendered.connect(self._on_cycle_rendered)  # type: ignore[arg-type]
        w.signals.error.connect(self._on_cycle_error)  # type: ignore[arg-type]
        w.signals.finished.connect(self._on_cycle_finished)  # type: ignore[arg-type]
        self._worker = w
        self._pool.start(w)

    @Slot(bool)
    def _on_cycle_rendered(self, rendered: bool) -> None:
        logger.debug("Refresh cycle done, %s", "re-rendered" if rendered else "no significant change")

    @Slot(str)
    def _on_cycle_error(self, msg: str) -> None:
        logger.warning("Refresh cycle failed: %s", msg)

    @Slot()
    def _on_cycle_finished(self) -> None:
        self._worker = None
        if self._pending is not None:
            forced = self._pending
            self._pending = None
            self._run(forced)
            return
        if not self._stopped:
            self._arm()
