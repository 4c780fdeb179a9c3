"""
==========================
Logger Module
==========================

This module provides a logging setup for the application using Python's built-in logging library.
It supports both file and console logging, with a rotating log file and a queue for thread-safe logging.
A listener processes log records from the queue and writes them to the real handlers.

Features:
- Uses `QueueHandler` to send log records to a queue.
- Uses `QueueListener` to listen for log records and write them to file and console.
- Configurable log folder and level (from the backup config).
- Formats log messages with timestamp, level, thread name, and message.

Usage:
>>> from autobackup.logger import logger, configure_logger, shutdown_logger
>>> configure_logger("./logs", "INFO")
>>> logger.info("This is an info message.")
>>> shutdown_logger()  # Important to stop the listener when done.

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import logging
import logging.handlers
import os
import queue as std_queue
from typing import Optional

LOG_FILE_NAME = "autobackup.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s"

# Public logger object other modules import
logger = logging.getLogger("autobackup")
logger.setLevel(logging.INFO)

# If nothing configures logging, fall back to console so imports can safely log.
if not logger.handlers:
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console)

# Internal state
_configured = False
_queue: Optional[std_queue.Queue] = None
_listener: Optional[logging.handlers.QueueListener] = None


def configure_logger(log_folder, level: str = "INFO", max_bytes: int = 5 * 1024 * 1024, backup_count: int = 5):
    """
    Configure the logger with file and console handlers behind a queue.
    Records go through a QueueHandler; a QueueListener thread owns the rotating
    file handler and the console handler, so a slow disk never blocks the backup cycle.

    Args:
        log_folder (str | Path): Folder for `autobackup.log`. Created if missing.
        level (str, optional): Logging level name. Defaults to "INFO".
        max_bytes (int, optional): Rotate the log file at this size. Defaults to 5 MiB.
        backup_count (int, optional): Number of rotated files to keep. Defaults to 5.
    """
    global _configured, _queue, _listener

    if _configured:
        return

    os.makedirs(log_folder, exist_ok=True)
    log_file = os.path.join(log_folder, LOG_FILE_NAME)

    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Remove the default console handler added on import so output isn't duplicated
    for h in list(logger.handlers):
        logger.removeHandler(h)

    fmt = logging.Formatter(LOG_FORMAT)

    _queue = std_queue.Queue(-1)
    logger.addHandler(logging.handlers.QueueHandler(_queue))

    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(fmt)

    _listener = logging.handlers.QueueListener(
        _queue, file_handler, console_handler)
    _listener.start()

    _configured = True


def shutdown_logger():
    """
    Shutdown the logger by stopping the listener and closing all handlers.
    Pending records are flushed before the handlers are closed.
    """
    global _listener, _configured

    if _listener:
        try:
            _listener.stop()
        except Exception:
            pass
        for h in _listener.handlers:
            try:
                h.flush()
                h.close()
            except Exception:
                pass
        _listener = None

    for h in list(logger.handlers):
        try:
            h.flush()
            h.close()
        except Exception:
            pass
        logger.removeHandler(h)

    _configured = False
