import threading
import time
from contextlib import contextmanager
from enum import Enum
from typing import Optional

from autobackup.errors import ArchiveError
from autobackup.helpers.config import BackupConfig
from autobackup.helpers.general import file_size_mb
from autobackup.helpers.lockfile import acquire_cycle_lock, release_cycle_lock
from autobackup.delivery.router import CycleResult
from autobackup.logger import logger


class CycleState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class SingleFlight:
    """
    At-most-one guard for backup cycles.
    Entry never blocks: a caller that finds a cycle running is told so and moves on.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = CycleState.IDLE

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is CycleState.RUNNING

    @contextmanager
    def attempt(self):
        """
        Try to enter the guard.

        Yields:
            bool: True if this caller now owns the cycle, False if one is already running.
        """
        if not self._lock.acquire(blocking=False):
            yield False
            return
        self._state = CycleState.RUNNING
        try:
            yield True
        finally:
            self._state = CycleState.IDLE
            self._lock.release()


def run_cycle(guard: SingleFlight, cfg: BackupConfig, archiver, router) -> Optional[CycleResult]:
    """
    Run one archive-then-deliver cycle under the single-flight guard.

    Implementation:
    1. Enter the guard; if a cycle is already running, log and return None.
    2. Take the backup folder lock; skip if another process holds it.
    3. Archive the source folder into the fixed archive path.
    4. Measure the archive and hand it to the router.
    5. Release the lock file and the guard whatever happened.

    Args:
        guard (SingleFlight): The scheduler's guard token.
        cfg (BackupConfig): Loaded configuration.
        archiver: Object with `create(source, destination)` raising ArchiveError on failure.
        router (UploadRouter): Delivers the archive.

    Returns:
        CycleResult | None: The cycle outcome, or None if the tick was skipped.
    """
    with guard.attempt() as entered:
        if not entered:
            logger.warning("Backup is already in progress, skipping this tick.")
            return None

        if not acquire_cycle_lock(cfg.backup_folder, cfg.lock_stale_seconds):
            logger.warning(
                "Another process is backing up into %s, skipping this tick.", cfg.backup_folder)
            return None

        try:
            try:
                archiver.create(cfg.source_path, cfg.archive_path)
                size = file_size_mb(cfg.archive_path)
            except (ArchiveError, OSError) as e:
                logger.error("Error creating backup: %s", e)
                return CycleResult.ARCHIVE_FAILED

            logger.info("Backup created successfully (%.2f MB).", size)
            return router.deliver(cfg.archive_path, size)
        finally:
            release_cycle_lock(cfg.backup_folder)


class BackupWorker(threading.Thread):
    """
    Periodically archives the configured folder and delivers it to a webhook.
    After every cycle (success or failure) the worker waits the full interval
    before the next one, so the schedule drifts by the cycle's duration.
    """

    def __init__(self, stop_event: threading.Event, thread_name: str, cfg: BackupConfig, archiver, router,
                 guard: Optional[SingleFlight] = None):
        super().__init__(name=thread_name, daemon=True)
        self.thread_name = thread_name
        self.stop_event = stop_event
        self.cfg = cfg
        self.archiver = archiver
        self.router = router
        self.guard = guard or SingleFlight()
        self.interval_seconds = cfg.interval_seconds
        self.last_result: Optional[CycleResult] = None

    def tick(self) -> Optional[CycleResult]:
        """
        Run one cycle now unless one is already running.
        Safe to call from any thread.

        Returns:
            CycleResult | None: The outcome, or None if the tick was skipped or crashed.
        """
        started = time.monotonic()
        try:
            result = run_cycle(self.guard, self.cfg,
                               self.archiver, self.router)
        except Exception as e:
            logger.exception("Backup cycle crashed: %s", e)
            return None

        if result is None:
            return None

        self.last_result = result
        elapsed = time.monotonic() - started
        if result.ok:
            logger.info("Backup cycle succeeded in %.1fs", elapsed)
        else:
            logger.error("Backup cycle failed (%s) after %.1fs",
                         result.value, elapsed)
        return result

    def trigger_now(self) -> threading.Thread:
        """
        Run an on-demand cycle in a helper thread so the caller never waits on it.
        """
        thr = threading.Thread(target=self.tick, daemon=True,
                               name=f"{self.thread_name}-OnDemand")
        thr.start()
        return thr

    def run(self):
        logger.info("Backup worker started. Running every %d minutes.",
                    self.cfg.interval_minutes)
        while not self.stop_event.is_set():
            self.tick()
            self.stop_event.wait(self.interval_seconds)

        logger.info("Worker Stopped")
