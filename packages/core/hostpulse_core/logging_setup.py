"""Run log setup and crash hooks."""

from __future__ import annotations

import faulthandler
import logging
import sys
import threading
import uuid
from datetime import datetime
from pathlib import Path


_LOGGER_NAME = "hostpulse"
_fault_file = None


class LineFormatter(logging.Formatter):
    """``[YYYY-MM-DD HH:MM:SS] LEVEL: message``, one line per record."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        message = record.getMessage().replace("\n", " ")
        line = f"[{stamp}] {record.levelname}: {message}"
        if record.exc_info:
            line += " | " + self.formatException(record.exc_info).replace("\n", " | ")
        return line


def run_log_path(logs_dir: Path, stamp: str | None = None) -> Path:
    stamp = stamp or datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"hostpulse_{stamp}.log"


def configure_logging(logs_dir: Path | None = None, stamp: str | None = None, console: bool = True, level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False

    if logs_dir is not None:
        handler = logging.FileHandler(str(run_log_path(logs_dir, stamp)), mode="a", encoding="utf-8")
        handler.setFormatter(LineFormatter())
        logger.addHandler(handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.WARNING)
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(stream_handler)

    logger.info("logging configured")
    return logger


def reset_logging() -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def _install_fault_handler(logs_dir: Path, logger: logging.Logger) -> None:
    global _fault_file
    if _fault_file is None:
        _fault_file = (logs_dir / "fault.log").open("a", encoding="utf-8")
    faulthandler.enable(file=_fault_file)
    logger.debug("fault handler enabled")


def install_crash_hooks(logs_dir: Path | None = None) -> None:
    logger = get_logger()

    def _log_uncaught(exc_type, exc_value, exc_tb) -> None:
        crash_id = str(uuid.uuid4())
        logger.critical(f"uncaught exception crash_id={crash_id}", exc_info=(exc_type, exc_value, exc_tb))
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        crash_id = str(uuid.uuid4())
        logger.critical(
            f"thread exception crash_id={crash_id} thread={args.thread.name if args.thread else '?'}",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _log_uncaught
    threading.excepthook = _thread_hook
    if logs_dir is not None:
        _install_fault_handler(logs_dir, logger)
