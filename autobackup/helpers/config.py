"""
==========================
Helpers - Configurations
==========================

This module loads the backup configuration file and turns it into an immutable `BackupConfig`.

Features:
- Loads configuration from a JSON file.
- Validates the required keys and fills in defaults for the optional ones.
- Parses the simplified `*/N * * * *` cooldown expression into minutes.
- Defines the fixed constants of a backup cycle (artifact name, relay threshold, file host).

Config file example:
    {
        "folderToBackup": "/srv/minecraft/world",
        "backupFolder": "./backups",
        "webhooks": ["https://discord.com/api/webhooks/..."],
        "cooldownDuration": "*/30 * * * *"
    }

Usage:
>>> from autobackup.helpers.config import load_config
>>> cfg = load_config("config.json")
>>> print(cfg.interval_minutes)

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path

from autobackup.errors import ConfigLoadError
from autobackup.logger import logger

# =========================
# CONSTANTS
# =========================

DEFAULT_CONFIG_PATH = "config.json"
CONFIG_ENV_VAR = "AUTOBACKUP_CONFIG"

# Artifact
ARCHIVE_FILE_NAME = "backup.7z"

# Delivery
MAX_DIRECT_UPLOAD_MB = 23.0
FILE_HOST_URL = "https://file.io/?expires=1w"
DEFAULT_ATTRIBUTION = "<@1025369998438453298>"

# Defaults for optional keys
DEFAULT_BACKUP_FOLDER = "./backups"
DEFAULT_LOG_FOLDER = "./logs"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_COOLDOWN = "*/60 * * * *"
DEFAULT_COOLDOWN_MINUTES = 60
DEFAULT_ARCHIVER = "7z"
DEFAULT_COMPRESSION_LEVEL = 9
DEFAULT_ARCHIVE_TIMEOUT = 60 * 60
DEFAULT_UPLOAD_TIMEOUT = 15 * 60
DEFAULT_WEBHOOK_TIMEOUT = 30
DEFAULT_LOCK_STALE_MINUTES = 12 * 60

_COOLDOWN_RE = re.compile(r"^\*/(\d+)(\s|$)")


@dataclass(frozen=True)
class BackupConfig:
    """
    Validated, immutable snapshot of the operating parameters.
    Built once at startup by `load_config` and never modified afterwards.
    """

    source_path: Path
    backup_folder: Path
    webhooks: tuple[str, ...]
    interval_minutes: int = DEFAULT_COOLDOWN_MINUTES
    archiver: str = DEFAULT_ARCHIVER
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    archive_timeout: float = DEFAULT_ARCHIVE_TIMEOUT
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT
    webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT
    log_folder: Path = Path(DEFAULT_LOG_FOLDER)
    log_level: str = DEFAULT_LOG_LEVEL
    lock_stale_minutes: int = DEFAULT_LOCK_STALE_MINUTES
    attribution: str = DEFAULT_ATTRIBUTION

    @property
    def archive_path(self) -> Path:
        return self.backup_folder / ARCHIVE_FILE_NAME

    @property
    def interval_seconds(self) -> int:
        return self.interval_minutes * 60

    @property
    def lock_stale_seconds(self) -> int:
        return self.lock_stale_minutes * 60


def parse_cooldown(expr) -> int:
    """
    Parse the simplified cron-like cooldown into minutes.
    Only the `*/N ...` minutes form is honoured; anything else falls back to 60 minutes.

    Args:
        expr (str): Cooldown expression, e.g. "*/15 * * * *".

    Returns:
        int: Interval in minutes (always positive).
    """
    if isinstance(expr, str):
        m = _COOLDOWN_RE.match(expr.strip())
        if m and int(m.group(1)) > 0:
            return int(m.group(1))
    logger.warning("Unsupported cooldownDuration %r, using %d minutes",
                   expr, DEFAULT_COOLDOWN_MINUTES)
    return DEFAULT_COOLDOWN_MINUTES


def resolve_config_path(argv: list[str]) -> str:
    """
    Pick the config path: first CLI argument, then $AUTOBACKUP_CONFIG, then config.json.
    """
    if len(argv) > 1 and argv[1]:
        return argv[1]
    return os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def _positive_number(raw: dict, key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigLoadError(f"'{key}' must be a positive number, got {value!r}")
    return value


def _webhooks(raw: dict) -> tuple[str, ...]:
    hooks = raw.get("webhooks")
    if not isinstance(hooks, list):
        raise ConfigLoadError("'webhooks' must be a list of URLs")
    if not hooks:
        raise ConfigLoadError("'webhooks' must contain at least one URL")
    for h in hooks:
        if not isinstance(h, str) or not h.strip():
            raise ConfigLoadError(f"Invalid webhook entry: {h!r}")
    return tuple(h.strip() for h in hooks)


def parse_config(raw) -> BackupConfig:
    """
    Validate a parsed config mapping and build a `BackupConfig`.

    Args:
        raw (dict): Mapping as read from the config file.

    Raises:
        ConfigLoadError: If a required key is missing or a value is invalid.

    Returns:
        BackupConfig: The validated configuration.
    """
    if not isinstance(raw, dict):
        raise ConfigLoadError("Config file must contain a JSON object")

    source = raw.get("folderToBackup")
    if not isinstance(source, str) or not source.strip():
        raise ConfigLoadError("'folderToBackup' is required")
    source_path = Path(source)
    if not source_path.is_dir():
        raise ConfigLoadError(f"Folder to backup is not a directory: {source_path}")

    backup_folder = raw.get("backupFolder", DEFAULT_BACKUP_FOLDER)
    if not isinstance(backup_folder, str) or not backup_folder.strip():
        raise ConfigLoadError("'backupFolder' must be a non-empty string")

    level = raw.get("compressionLevel", DEFAULT_COMPRESSION_LEVEL)
    if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 9:
        raise ConfigLoadError(f"'compressionLevel' must be 0-9, got {level!r}")

    log_level = str(raw.get("logLevel", DEFAULT_LOG_LEVEL)).upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigLoadError(f"Unknown logLevel: {log_level}")

    return BackupConfig(
        source_path=source_path,
        backup_folder=Path(backup_folder),
        webhooks=_webhooks(raw),
        interval_minutes=parse_cooldown(
            raw.get("cooldownDuration", DEFAULT_COOLDOWN)),
        archiver=str(raw.get("archiver", DEFAULT_ARCHIVER)),
        compression_level=level,
        archive_timeout=_positive_number(
            raw, "archiveTimeoutSeconds", DEFAULT_ARCHIVE_TIMEOUT),
        upload_timeout=_positive_number(
            raw, "uploadTimeoutSeconds", DEFAULT_UPLOAD_TIMEOUT),
        webhook_timeout=_positive_number(
            raw, "webhookTimeoutSeconds", DEFAULT_WEBHOOK_TIMEOUT),
        log_folder=Path(str(raw.get("logFolder", DEFAULT_LOG_FOLDER))),
        log_level=log_level,
        lock_stale_minutes=int(_positive_number(
            raw, "lockStaleMinutes", DEFAULT_LOCK_STALE_MINUTES)),
        attribution=str(raw.get("attribution", DEFAULT_ATTRIBUTION)),
    )


def load_config(path: str = DEFAULT_CONFIG_PATH) -> BackupConfig:
    """
    Read and validate the configuration file.

    Args:
        path (str, optional): Path to the config file. Defaults to "config.json".

    Raises:
        ConfigLoadError: If the file can't be read, parsed or validated.

    Returns:
        BackupConfig: The validated configuration.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigLoadError(f"Could not read config {path}: {e}") from e
    except ValueError as e:
        raise ConfigLoadError(f"Could not parse config {path}: {e}") from e

    cfg = parse_config(raw)
    logger.info("Configuration loaded from %s", path)
    return cfg
