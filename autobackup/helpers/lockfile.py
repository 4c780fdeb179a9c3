"""
==========================
Helpers - Cycle Lock File
==========================

This module guards the backup folder with a lock file while a cycle runs, so two
autobackup processes pointed at the same folder never write `backup.7z` at the same time.
The lock is created with O_CREAT | O_EXCL: whichever process creates the file owns it.

Functions:
- `lock_path_for`: Path of the lock file inside a backup folder.
- `acquire_cycle_lock`: Create the lock if nobody holds it, clearing an abandoned one first.
- `release_cycle_lock`: Remove the lock, but only when it belongs to this process.
- `read_lock_metadata`: Read `{pid, ts}` from the lock file.
- `is_pid_alive`: Check if a process with the given PID is alive.
- `is_lock_stale`: Decide whether a lock was abandoned (dead owner, too old, or garbage).


Usage:
>>> from autobackup.helpers.lockfile import acquire_cycle_lock, release_cycle_lock
>>> if acquire_cycle_lock("./backups", stale_seconds=3600):
...     try:
...         ...  # archive + upload
...     finally:
...         release_cycle_lock("./backups")

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import os
import datetime
import json
import time
from typing import Optional

import psutil

from autobackup.logger import logger

LOCK_FILE_NAME = ".backup.lock"

# an owner writes its metadata right after creating the file;
# an unreadable lock younger than this is still being written
UNREADABLE_GRACE_SECONDS = 60


def lock_path_for(backup_dir) -> str:
    return os.path.join(backup_dir, LOCK_FILE_NAME)


def _read_json(path) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            meta = json.load(f)
    except (OSError, ValueError):
        return None
    return meta if isinstance(meta, dict) else None


def read_lock_metadata(backup_dir) -> Optional[dict]:
    """
    Read the lock metadata.

    Args:
        backup_dir (str | Path): The backup folder.

    Returns:
        dict | None: `{"pid": int, "ts": iso8601}`, or None if missing or unreadable.
    """
    return _read_json(lock_path_for(backup_dir))


def is_pid_alive(pid) -> bool:
    try:
        return psutil.pid_exists(int(pid))
    except (TypeError, ValueError):
        return False


def _abandoned(path, stale_seconds: float) -> bool:
    meta = _read_json(path)
    if meta is None:
        try:
            age = time.time() - os.path.getmtime(path)
        except OSError:
            # vanished meanwhile
            return False
        return age > UNREADABLE_GRACE_SECONDS

    if not is_pid_alive(meta.get("pid")):
        return True
    try:
        locked_at = datetime.datetime.fromisoformat(meta.get("ts"))
    except (TypeError, ValueError):
        return True
    age = (datetime.datetime.now(datetime.UTC) - locked_at).total_seconds()
    return age > stale_seconds


def is_lock_stale(backup_dir, stale_seconds: float) -> bool:
    """
    Decide whether the current lock was abandoned.

    A lock is stale when its owner process is gone, when it is older than
    `stale_seconds`, or when it has been unreadable for longer than the grace period.

    Args:
        backup_dir (str | Path): The backup folder.
        stale_seconds (float): Age after which a live owner's lock is considered abandoned.

    Returns:
        bool: True if the lock may be cleared.
    """
    return _abandoned(lock_path_for(backup_dir), stale_seconds)


def _clear_stale_lock(backup_dir, stale_seconds: float) -> None:
    """
    Move an abandoned lock aside and delete it.
    The rename is atomic, so of several processes clearing the same lock only one succeeds.
    If a fresh lock slipped in before the rename, it is put back.
    """
    lp = lock_path_for(backup_dir)
    if not _abandoned(lp, stale_seconds):
        return
    aside = f"{lp}.stale.{os.getpid()}"
    try:
        os.rename(lp, aside)
    except OSError:
        return

    if _abandoned(aside, stale_seconds):
        logger.warning("Removed stale lock: %s", lp)
    else:
        try:
            os.link(aside, lp)
        except OSError:
            logger.warning("Could not restore live lock moved from %s", lp)

    try:
        os.remove(aside)
    except OSError:
        logger.exception("Failed to delete %s", aside)


def acquire_cycle_lock(backup_dir, stale_seconds: float, pid: Optional[int] = None) -> bool:
    """
    Take the cycle lock for `backup_dir`.

    Args:
        backup_dir (str | Path): The backup folder.
        stale_seconds (float): Age after which another owner's lock is considered abandoned.
        pid (int, optional): Owner pid written into the lock. Defaults to this process.

    Returns:
        bool: True if this caller now holds the lock, False if someone else does.
    """
    os.makedirs(backup_dir, exist_ok=True)
    lp = lock_path_for(backup_dir)
    owner = os.getpid() if pid is None else pid

    for attempt in range(2):
        try:
            fd = os.open(lp, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            if attempt == 0:
                _clear_stale_lock(backup_dir, stale_seconds)
                continue
            return False

        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"pid": owner, "ts": datetime.datetime.now(
                datetime.UTC).isoformat()}, f)
        return True
    return False


def release_cycle_lock(backup_dir, pid: Optional[int] = None) -> bool:
    """
    Remove the cycle lock if it belongs to `pid`.

    Args:
        backup_dir (str | Path): The backup folder.
        pid (int, optional): Expected owner. Defaults to this process.

    Returns:
        bool: True if the lock was removed.
    """
    owner = os.getpid() if pid is None else pid
    lp = lock_path_for(backup_dir)
    meta = read_lock_metadata(backup_dir)
    if meta is None or meta.get("pid") != owner:
        if os.path.exists(lp):
            logger.warning("Lock %s is not ours, leaving it in place", lp)
        return False
    try:
        os.remove(lp)
    except OSError:
        logger.exception("Failed to remove cycle lock: %s", lp)
        return False
    return True
