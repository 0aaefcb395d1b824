# Rev 0.1.0

# roadmapz/main.py  (Rev 0.1.0)
import sys

from PySide6.QtCore import QCoreApplication, Qt
from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from .app_context import AppContext
from .ui.timeline_window import TimelineWindow
from .utils.config import save_settings
from .utils.logging_setup import get_logger, setup_logging
from .utils.paths import ensure_dirs
from .viewmodels.timeline_viewmodel import TimelineViewModel


def main() -> int:
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )
    app = QApplication(sys.argv)
    QCoreApplication.setOrganizationName("roadmapz")
    QCoreApplication.setApplicationName("roadmapZ")

    ensure_dirs()
    logfile = setup_logging()
    log = get_logger("main")
    log.info("Writing log to %s", logfile)

    # --- DI wiring ---
    ctx = AppContext.create()
    app.aboutToQuit.connect(ctx.close)

    vm = TimelineViewModel(ctx.service, ctx.timeline_settings)
    win = TimelineWindow(vm)
    geometry = ctx.settings["main_window"]
    win.resize(geometry["width"], geometry["height"])
    vm.load(ctx.default_roadmap_id())
    if geometry["is_maximized"]:
        win.showMaximized()
    else:
        win.show()

    def _remember_geometry() -> None:
        geometry.update(width=win.width(), height=win.height(), is_maximized=win.isMaximized())
        save_settings(ctx.settings)

    app.aboutToQuit.connect(_remember_geometry)
    vm.reveal_first_item()

    app.setProperty("mainWindow", win)
    app.setFont(QFont("Sans Serif", 10))
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
