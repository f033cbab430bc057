# src/warehouse_putaway/utils/logger.py
"""
Package logging: one shared log file plus a console stream, attached to the
"warehouse_putaway" logger so every module logger inherits them.

LOG_DIR / LOG_FILE / LOG_LEVEL come from the environment (.env honored).
"""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT_LOGGER_NAME = "warehouse_putaway"

LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = Path(os.getenv("LOG_FILE", LOG_DIR / "putaway.log"))

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

def _install_handlers(root: logging.Logger) -> None:
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    file_handler.setLevel(LOG_LEVEL)
    file_handler.setFormatter(formatter)

    # CLI output goes to stdout; only problems reach the console by default
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)

    root.addHandler(file_handler)
    root.addHandler(console_handler)
    root.setLevel(LOG_LEVEL)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        _install_handlers(root)
    return logging.getLogger(name)


def set_console_level(level) -> None:
    """--verbose on the CLIs: echo INFO to the console as well."""
    root = get_logger()
    for handler in root.handlers:
        # FileHandler is a StreamHandler too; leave the log file alone
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
