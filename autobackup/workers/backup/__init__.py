"""
==========================
Backup Worker Module
==========================

This module provides the background worker that runs the backup cycle on a fixed interval.
(Configure `cooldownDuration` in `config.json` to adjust the interval.)

Features:
- Implements a `BackupWorker` class that extends `threading.Thread`.
- Archives the source folder into `backup.7z` with the external archiver.
- Hands the archive to the upload router (direct or relayed upload).
- Skips a tick entirely when a cycle is still running (single-flight).
- Sleeps the full interval after each cycle, measured from its completion.

Usage:
>>> backup_worker = BackupWorker(stop_event, thread_name="BackupThread", cfg=cfg, archiver=archiver, router=router)
>>> backup_worker.start()

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""
from autobackup.workers.backup.worker import *
