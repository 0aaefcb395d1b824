# Rev 0.1.0

"""roadmapZ logging (Rev 0.1.0)
- Rotating file under $XDG_STATE_HOME/roadmapZ/logs plus stdout
- Level from ROADMAPZ_LOG_LEVEL (default INFO)
- Uncaught exceptions and Qt messages end up in the same log
"""
from __future__ import annotations
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from .paths import LOGS_DIR

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "roadmapz.log"
MAX_BYTES = 5_000_000
BACKUPS = 7

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

# handlers we own, so a second setup_logging() call replaces instead of duplicating
_installed: list[logging.Handler] = []


def get_logger(name: str) -> logging.Logger:
    """Namespaced logger; everything hangs under the `roadmapz` root."""
    if name.startswith("roadmapz"):
        return logging.getLogger(name)
    return logging.getLogger(f"roadmapz.{name}")


def _qt_message(msg_type, context, message) -> None:
    logging.getLogger("qt").log(_QT_LEVELS.get(msg_type, logging.INFO), message)


def _log_uncaught(exctype, value, tb) -> None:
    logging.getLogger("unhandled").critical("Uncaught exception", exc_info=(exctype, value, tb))
    sys.__excepthook__(exctype, value, tb)


def resolve_level(raw: Optional[str] = None) -> int:
    name = (raw if raw is not None else os.environ.get("ROADMAPZ_LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_dir: Optional[Path] = None, *, install_hooks: bool = True) -> Path:
    level = resolve_level()
    log_dir = Path(log_dir) if log_dir is not None else LOGS_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    for h in _installed:
        root.removeHandler(h)
        h.close()
    _installed.clear()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    file_handler = RotatingFileHandler(logfile, maxBytes=MAX_BYTES, backupCount=BACKUPS, encoding="utf-8")
    console = logging.StreamHandler(sys.stdout)
    for h in (file_handler, console):
        h.setFormatter(formatter)
        h.setLevel(level)
        root.addHandler(h)
        _installed.append(h)
    root.setLevel(level)

    if install_hooks:
        sys.excepthook = _log_uncaught
        qInstallMessageHandler(_qt_message)

    get_logger("logging").info("Logging at %s; file: %s", logging.getLevelName(level), logfile)
    return logfile
