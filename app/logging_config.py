
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config import settings


# chatty at INFO: passlib backend detection, one httpx line per mail API call
NOISY_LOGGERS = ("passlib", "httpx", "httpcore")


def setup_logging():
    """
    - Console + file (<LOG_DIR>/app.log)
    - Rotate to avoid infinite growth
    """
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = settings.LOG_LEVEL.upper()

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    root = logging.getLogger()
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Prevent duplicate handlers
    if root.handlers:
        return

    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)

    file_handler = RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root.addHandler(console)
    root.addHandler(file_handler)
