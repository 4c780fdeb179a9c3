"""
==========================
Archive Helper Module
==========================

This module wraps the external 7-Zip binary that compresses the backup folder
into a single archive.


Features:
- `archiver_exists`: Checks whether the archiver binary can be launched.
- `SevenZipArchiver`: Creates `backup.7z` from the source folder, replacing the previous one.

Usage:
>>> from autobackup.helpers.archive import SevenZipArchiver
>>> archiver = SevenZipArchiver(binary="7z", level=9, timeout=3600)
>>> archiver.create("/srv/world", "backups/backup.7z")


*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import os
import subprocess

from autobackup.errors import ArchiveError
from autobackup.logger import logger


def archiver_exists(binary: str = "7z") -> bool:
    """
    Check if the archiver binary is available.

    Args:
        binary (str, optional): Name or path of the 7-Zip executable. Defaults to "7z".

    Returns:
        bool: True if the binary could be launched, False otherwise.
    """
    try:
        subprocess.run([binary], stdout=subprocess.DEVNULL,
                       stderr=subprocess.DEVNULL, timeout=30)
        return True
    except (FileNotFoundError, PermissionError):
        return False
    except subprocess.TimeoutExpired:
        return True


def _run_and_log(cmd: list[str], timeout: float) -> None:
    """
    Run the archiver command, raising ArchiveError on any failure.

    Args:
        cmd (list): Command and arguments to run.
        timeout (float): Seconds before the process is killed.

    Raises:
        ArchiveError: On non-zero exit, missing binary or timeout.
    """
    try:
        subprocess.run(cmd, stdout=subprocess.DEVNULL,
                       stderr=subprocess.PIPE, check=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        err = (e.stderr.decode("utf-8", errors="replace")
               if getattr(e, "stderr", None) else str(e))
        logger.error(
            "archiver failed: %s\ncmd: %s\nstderr: %s", e, " ".join(cmd), err)
        raise ArchiveError(
            f"archiver exited with code {e.returncode}") from e
    except subprocess.TimeoutExpired as e:
        raise ArchiveError(f"archiver timed out after {timeout}s") from e
    except OSError as e:
        raise ArchiveError(f"could not run archiver: {e}") from e


class SevenZipArchiver:
    """
    Produces a single compressed file from a source folder using the 7z CLI.
    The destination is deleted first since `7z a` updates an existing archive in place.
    """

    def __init__(self, binary: str = "7z", level: int = 9, timeout: float = 3600):
        self.binary = binary
        self.level = level
        self.timeout = timeout

    def build_command(self, source, destination) -> list[str]:
        return [self.binary, "a", "-y", f"-mx={self.level}",
                os.fspath(destination), os.fspath(source)]

    def create(self, source, destination) -> None:
        """
        Archive `source` into `destination`.

        Args:
            source (str | Path): Folder to archive.
            destination (str | Path): Archive file to produce.

        Raises:
            ArchiveError: If the old archive can't be removed or the archiver fails.
        """
        try:
            if os.path.exists(destination):
                os.remove(destination)
        except OSError as e:
            raise ArchiveError(
                f"could not remove previous archive {destination}: {e}") from e

        cmd = self.build_command(source, destination)
        logger.debug("Running archiver: %s", " ".join(cmd))
        _run_and_log(cmd, self.timeout)

        if not os.path.isfile(destination):
            raise ArchiveError(f"archiver produced no file at {destination}")
