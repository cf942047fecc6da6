"""
Centralized logging configuration.

Provides a single setup_logging function that configures the root logger with:
- Console output (INFO, or DEBUG when verbose)
- An append-only log file so every hand-off run leaves a timestamped trail
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

_TECHNICAL_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _close_handlers(logger: logging.Logger) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Handler close failed: %s", e)
    logger.handlers = []


def _build_console_handler(verbose: bool) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    return console_handler


def _build_file_handler(log_file: Path) -> Optional[logging.Handler]:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.WatchedFileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as exc:  # Console logging still works  # policy_guard: allow-silent-handler
        _MODULE_LOGGER.warning("Cannot open log file %s: %s", log_file, exc)
        return None
    file_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.INFO)
    return file_handler


def setup_logging(log_file: Optional[Path] = None, verbose: bool = False) -> None:
    """Configure logging for the application"""

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        root_logger.addHandler(_build_console_handler(verbose))
        if log_file is not None:
            file_handler = _build_file_handler(log_file)
            if file_handler:
                root_logger.addHandler(file_handler)

        root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        logging.getLogger("asyncio").setLevel(logging.WARNING)
