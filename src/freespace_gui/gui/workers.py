from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QRunnable, Signal, Slot

from freespace_gui.services.monitor_service import DiskMonitor

logger = logging.getLogger("freespace_gui.gui")


class RefreshSignals(QObject):
    rendered = Signal(bool)
    error = Signal(str)
    finished = Signal()


class RefreshWorker(QRunnable):
    """Runs one DiskMonitor cycle off the GUI thread."""

    def __init__(self, monitor: DiskMonitor, forced: bool) -> None:
        super().__init__()
        self.monitor = monitor
        self.forced = forced
        self.signals = RefreshSignals()
        self.setAutoDelete(False)

    @Slot()
    def run(self) -> None:
        try:
            self.signals.rendered.emit(self.monitor.refresh(forced=self.forced))
        except Exception as e:  # noqa: BLE001
            logger.exception("Refresh worker failed")
            self.signals.error.emit(str(e))
        finally:
            self.signals.finished.emit()
