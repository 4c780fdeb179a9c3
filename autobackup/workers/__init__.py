"""
==========================
Worker Management Module
==========================

This module exposes the backup worker thread and a function for shutting it down gracefully.

Features:
- Implements a `BackupWorker` class that extends `threading.Thread`.
- Periodically archives the source folder and delivers the archive to a webhook.
- `graceful_workers_shutdown` signals the workers, joins them, and releases shared resources.


Usage:
>>> backup_thread = BackupWorker(stop_event, thread_name="BackupThread", cfg=cfg, archiver=archiver, router=router)
>>> backup_thread.start()  # Start the backup worker thread
>>> graceful_workers_shutdown(stop_event, [backup_thread], closers=[client.close])

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import threading

from autobackup.workers.backup import BackupWorker, SingleFlight, run_cycle

from autobackup.logger import logger, shutdown_logger


def graceful_workers_shutdown(stop_event: threading.Event, workers: list[threading.Thread], closers=(), join_timeout: float = 5.0):
    """
    Graceful shutdown sequence:
      1. signal workers to stop (stop_event)
      2. join the worker threads with a timeout (an archive or upload in flight is abandoned at exit)
      3. call the closers (HTTP session etc.)
      4. stop the logger queue
    """
    logger.info("Beginning graceful shutdown...")

    try:
        stop_event.set()

        for thr in workers:
            logger.info("Waiting for thread %s to stop...", thr.name)
            thr.join(timeout=join_timeout)
            if thr.is_alive():
                logger.warning(
                    "Thread %s still busy after %.0fs, abandoning it", thr.name, join_timeout)

        for close in closers:
            try:
                close()
            except Exception:
                logger.exception("Error while releasing %s", close)

        logger.info("Stopping Logger Queue...")
    finally:
        shutdown_logger()
