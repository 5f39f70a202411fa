from __future__ import annotations

from PySide6.QtCore import QObject, QRect, Qt, Signal, Slot
from PySide6.QtGui import QAction, QFont, QIcon, QPainter, QPixmap
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from freespace_gui.models.preferences import DisplayMode
from freespace_gui.services.monitor_service import IndicatorView

ICON_NAME = "drive-harddisk-symbolic"
HEADER = "Disk Space Usage"


def _drive_icon() -> QIcon:
    fallback = QApplication.style().standardIcon(QStyle.SP_DriveHDIcon)
    return QIcon.fromTheme(ICON_NAME, fallback)


def _label_icon(text: str, size: int = 64) -> QIcon:
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)
    p = QPainter(pm)
    try:
        font = QFont()
        font.setBold(True)
        font.setPixelSize(size // 3)
        p.setFont(font)
        p.setPen(Qt.white)
        p.drawText(QRect(0, 0, size, size), Qt.AlignCenter, text)
    finally:
        p.end()
    return QIcon(pm)


def _progress_bar(fraction: float, width: int = 20) -> str:
    filled = max(0, min(width, round(width * fraction)))
    return "█" * filled + "░" * (width - filled)


class TrayIndicator(QObject):
    """Tray icon plus a detail menu fed with IndicatorView values.

    render() may be called from worker threads; drawing happens on the GUI
    thread through a queued signal.
    """

    refreshRequested = Signal()
    _viewReady = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._icon = _drive_icon()
        self._tray = QSystemTrayIcon(self._icon, self)
        self._tray.setToolTip("...")

        self._menu = QMenu()
        self._tray.setContextMenu(self._menu)
        self._build_menu(None)

        self._viewReady.connect(self._apply_view)  # type: ignore[arg-type]

    def show(self) -> None:
        self._tray.show()

    def render(self, view: IndicatorView) -> None:
        self._viewReady.emit(view)

    @Slot(object)
    def _apply_view(self, view: IndicatorView) -> None:
        if view.display_mode == DisplayMode.LABEL:
            self._tray.setIcon(_label_icon(view.title))
        else:
            self._tray.setIcon(self._icon)

        if view.display_mode == DisplayMode.ICON:
            self._tray.setToolTip(HEADER)
        else:
            self._tray.setToolTip(view.title)

        self._build_menu(view)

    def _build_menu(self, view: IndicatorView | None) -> None:
        self._menu.clear()

        header = self._menu.addAction(HEADER)
        header.setEnabled(False)
        self._menu.addSeparator()

        rows = view.rows() if view is not None else []
        if view is not None and not rows:
            self._menu.addAction("No disks").setEnabled(False)

        for i, row in enumerate(rows):
            self._menu.addAction(row.heading).setEnabled(False)
            pct = int(round(row.fraction * 100))
            self._menu.addAction(f"{_progress_bar(row.fraction)}  {row.usage} ({pct}%)").setEnabled(False)
            if i < len(rows) - 1:
                self._menu.addSeparator()

        self._menu.addSeparator()
        refresh = QAction("Refresh", self._menu)
        refresh.triggered.connect(lambda _checked=False: self.refreshRequested.emit())  # type: ignore[arg-type]
        self._menu.addAction(refresh)

        quit_action = QAction("Quit", self._menu)
        quit_action.triggered.connect(lambda _checked=False: QApplication.quit())  # type: ignore[arg-type]
        self._menu.addAction(quit_action)
