import faulthandler
import logging
import os
import sys

from PySide6.QtCore import QFileSystemWatcher
from PySide6.QtWidgets import QApplication

from freespace_gui.collectors.disk_collector import DiskCollector
from freespace_gui.gui.indicator import TrayIndicator
from freespace_gui.gui.refresh_timer import RefreshTimer
from freespace_gui.models.preferences import Preferences
from freespace_gui.services.config_service import SettingsStore
from freespace_gui.services.log_service import setup_logging
from freespace_gui.services.monitor_service import DiskMonitor

logger = logging.getLogger("freespace_gui")


def run() -> None:
    faulthandler.enable()
    setup_logging(debug=os.environ.get("FREESPACE_DEBUG") == "1")

    app = QApplication(sys.argv)
    app.setApplicationName("FreeSpace")
    app.setQuitOnLastWindowClosed(False)

    settings = SettingsStore()
    prefs = settings.get()

    indicator = TrayIndicator()
    monitor = DiskMonitor(DiskCollector(), indicator, prefs)
    timer = RefreshTimer(monitor, prefs.refresh_interval)

    def on_settings_changed(new: Preferences) -> None:
        logger.info("Settings changed, re-rendering")
        if not monitor.update_preferences(new):
            timer.trigger(forced=True)
        timer.set_interval(new.refresh_interval)

    settings.connect(on_settings_changed)
    indicator.refreshRequested.connect(lambda: timer.trigger(forced=True))  # type: ignore[arg-type]

    watcher = QFileSystemWatcher([str(settings.path)])

    def on_file_changed(path: str) -> None:
        settings.reload()
        # editors that replace the file drop it from the watch list
        if path not in watcher.files():
            watcher.addPath(path)

    watcher.fileChanged.connect(on_file_changed)  # type: ignore[arg-type]

    indicator.show()
    timer.start()
    timer.trigger(forced=True)

    raise SystemExit(app.exec())
