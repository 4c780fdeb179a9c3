"""
==========================
Helpers - General Operations
==========================

This module provides general helper functions for the application.

Features:
- `ensure_dirs`: Ensure the backup and log folders exist by creating them if they do not.
- `file_size_mb`: Size of a file in MiB.


Usage:
>>> from autobackup.helpers.general import ensure_dirs, file_size_mb
>>> ensure_dirs(cfg)  # Create the backup and log folders
>>> size = file_size_mb(cfg.archive_path)

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import os

from autobackup.errors import ConfigLoadError
from autobackup.helpers.config import BackupConfig

BYTES_PER_MB = 1024 * 1024


def ensure_dirs(cfg: BackupConfig) -> None:
    """
    Ensure the backup and log folders exist, parents included.

    Args:
        cfg (BackupConfig): Loaded configuration.

    Raises:
        ConfigLoadError: If a folder can't be created.
    """
    for d in (cfg.backup_folder, cfg.log_folder):
        try:
            os.makedirs(d, exist_ok=True)
        except OSError as e:
            raise ConfigLoadError(f"Could not create folder {d}: {e}") from e


def file_size_mb(path) -> float:
    """
    Get the size of a file in MiB.

    Args:
        path (str | Path): Path to the file.

    Raises:
        OSError: If the file can't be stat'ed.

    Returns:
        float: Size in MiB.
    """
    return os.path.getsize(path) / BYTES_PER_MB
