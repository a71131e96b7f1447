from __future__ import annotations

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_TAG = "_pos_dashboard_handler"


def setup_logging(log_dir: Path | str, level: int = logging.INFO) -> logging.Logger:
    """
    Configure the `pos_core` logger: one file per day in log_dir plus console.

    Safe to call on every Streamlit rerun; handlers are only attached once.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    today = datetime.now().strftime("%Y-%m-%d")
    log_file = log_dir / f"pos_dashboard_{today}.log"

    logger = logging.getLogger("pos_core")
    logger.setLevel(level)

    # Drop handlers from a previous call (e.g. data directory changed)
    for h in list(logger.handlers):
        if getattr(h, _HANDLER_TAG, False):
            logger.removeHandler(h)
            h.close()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    # maxBytes=10MB, backupCount=5
    file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    setattr(file_handler, _HANDLER_TAG, True)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_TAG, True)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    logger.propagate = False

    logger.info("Logging configured. File: %s", log_file)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    if name:
        return logging.getLogger(f"pos_core.{name}")
    return logging.getLogger("pos_core")
