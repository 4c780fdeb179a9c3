"""
==========================
Error Types
==========================

Exceptions raised across the backup cycle.

- `ConfigLoadError`: configuration could not be loaded or validated. Fatal at startup.
- `ArchiveError`: the archiver failed. The cycle fails, the loop keeps going.
- `UploadTransportError`: an HTTP exchange failed or returned a non-2xx status.
- `UploadResponseParseError`: the file host replied with something we can't use.

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

from typing import Optional


class AutoBackupError(Exception):
    """Base class for every error raised by autobackup."""


class ConfigLoadError(AutoBackupError):
    pass


class ArchiveError(AutoBackupError):
    pass


class UploadTransportError(AutoBackupError):
    """
    An HTTP exchange failed at the transport level or with a non-2xx status.

    Args:
        url (str): Target of the failed request.
        message (str): What went wrong.
        status_code (int, optional): HTTP status when a response was received.
    """

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status_code = status_code


class UploadResponseParseError(AutoBackupError):
    pass
