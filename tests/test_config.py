"""
Tests for loading and validating the backup configuration
"""

import dataclasses
import json
from pathlib import Path

import pytest

from autobackup.errors import ConfigLoadError
from autobackup.helpers.config import (
    ARCHIVE_FILE_NAME,
    BackupConfig,
    load_config,
    parse_config,
    parse_cooldown,
    resolve_config_path,
)
from autobackup.helpers.general import ensure_dirs, file_size_mb


class TestParseCooldown:

    @pytest.mark.parametrize("expr, minutes", [
        ("*/15 * * * *", 15),
        ("*/1 * * * *", 1),
        ("*/90", 90),
        ("  */5 * * * *", 5),
    ])
    def test_step_form_is_honoured(self, expr, minutes):
        assert parse_cooldown(expr) == minutes

    @pytest.mark.parametrize("expr", [
        "0 3 * * *",
        "*/0 * * * *",
        "*/abc * * * *",
        "*/15x * * * *",
        "",
        None,
        15,
    ])
    def test_anything_else_falls_back_to_an_hour(self, expr):
        assert parse_cooldown(expr) == 60


class TestLoadConfig:

    def test_minimal_config_gets_defaults(self, write_config, source_dir):
        path = write_config({
            "folderToBackup": str(source_dir),
            "webhooks": ["https://discord.example/hook"],
        })
        cfg = load_config(path)

        assert cfg.source_path == source_dir
        assert cfg.backup_folder == Path("./backups")
        assert cfg.webhooks == ("https://discord.example/hook",)
        assert cfg.interval_minutes == 60
        assert cfg.archive_path == Path("./backups") / ARCHIVE_FILE_NAME
        assert cfg.log_level == "INFO"

    def test_full_config(self, write_config, source_dir, tmp_path):
        path = write_config({
            "folderToBackup": str(source_dir),
            "backupFolder": str(tmp_path / "out"),
            "webhooks": ["https://a.example/hook", "https://b.example/hook"],
            "cooldownDuration": "*/15 * * * *",
            "uploadTimeoutSeconds": 120,
            "webhookTimeoutSeconds": 5.5,
            "compressionLevel": 5,
            "logLevel": "debug",
        })
        cfg = load_config(path)

        assert cfg.interval_minutes == 15
        assert cfg.interval_seconds == 15 * 60
        assert cfg.backup_folder == tmp_path / "out"
        assert len(cfg.webhooks) == 2
        assert cfg.upload_timeout == 120
        assert cfg.webhook_timeout == 5.5
        assert cfg.compression_level == 5
        assert cfg.log_level == "DEBUG"

    def test_non_step_cooldown_uses_default(self, write_config, source_dir):
        path = write_config({
            "folderToBackup": str(source_dir),
            "webhooks": ["https://discord.example/hook"],
            "cooldownDuration": "0 3 * * *",
        })
        assert load_config(path).interval_minutes == 60

    def test_config_is_immutable(self, write_config, source_dir):
        cfg = load_config(write_config({
            "folderToBackup": str(source_dir),
            "webhooks": ["https://discord.example/hook"],
        }))
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.interval_minutes = 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError):
            load_config(str(tmp_path / "nope.json"))

    def test_unparsable_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"folderToBackup": ', encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            load_config(str(path))

    @pytest.mark.parametrize("webhooks", [[], None, "https://x.example", [""], [42]])
    def test_bad_webhooks(self, write_config, source_dir, webhooks):
        data = {"folderToBackup": str(source_dir)}
        if webhooks is not None:
            data["webhooks"] = webhooks
        with pytest.raises(ConfigLoadError):
            load_config(write_config(data))

    def test_source_must_be_a_directory(self, write_config, tmp_path):
        plain_file = tmp_path / "world.zip"
        plain_file.write_bytes(b"PK")
        with pytest.raises(ConfigLoadError, match="not a directory"):
            load_config(write_config({
                "folderToBackup": str(plain_file),
                "webhooks": ["https://x.example"],
            }))

    def test_tab_indented_json(self, tmp_path, source_dir):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps({
                "folderToBackup": str(source_dir),
                "webhooks": ["https://discord.example/hook"],
                "cooldownDuration": "*/15 * * * *",
            }, indent="\t"),
            encoding="utf-8")
        assert "\t" in path.read_text(encoding="utf-8")

        cfg = load_config(str(path))

        assert cfg.webhooks == ("https://discord.example/hook",)
        assert cfg.interval_minutes == 15

    def test_missing_source_key(self, write_config):
        with pytest.raises(ConfigLoadError):
            load_config(write_config({"webhooks": ["https://x.example"]}))

    def test_source_must_exist(self, write_config, tmp_path):
        with pytest.raises(ConfigLoadError, match="not a directory"):
            load_config(write_config({
                "folderToBackup": str(tmp_path / "missing"),
                "webhooks": ["https://x.example"],
            }))

    @pytest.mark.parametrize("key, value", [
        ("uploadTimeoutSeconds", 0),
        ("archiveTimeoutSeconds", -5),
        ("webhookTimeoutSeconds", "30"),
        ("compressionLevel", 12),
        ("logLevel", "chatty"),
    ])
    def test_invalid_optional_values(self, write_config, source_dir, key, value):
        with pytest.raises(ConfigLoadError):
            load_config(write_config({
                "folderToBackup": str(source_dir),
                "webhooks": ["https://x.example"],
                key: value,
            }))

    def test_top_level_must_be_object(self):
        with pytest.raises(ConfigLoadError):
            parse_config(["not", "a", "mapping"])


class TestResolveConfigPath:

    def test_cli_argument_wins(self, monkeypatch):
        monkeypatch.setenv("AUTOBACKUP_CONFIG", "/etc/env.json")
        assert resolve_config_path(["main.py", "/tmp/cli.json"]) == "/tmp/cli.json"

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("AUTOBACKUP_CONFIG", "/etc/env.json")
        assert resolve_config_path(["main.py"]) == "/etc/env.json"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("AUTOBACKUP_CONFIG", raising=False)
        assert resolve_config_path(["main.py"]) == "config.json"


class TestGeneralHelpers:

    def test_ensure_dirs_creates_parents(self, source_dir, tmp_path):
        cfg = BackupConfig(source_path=source_dir,
                           backup_folder=tmp_path / "a" / "b" / "backups",
                           webhooks=("https://x.example",),
                           log_folder=tmp_path / "logs")
        ensure_dirs(cfg)
        assert cfg.backup_folder.is_dir()
        assert cfg.log_folder.is_dir()

    def test_ensure_dirs_failure_is_a_config_error(self, source_dir, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        cfg = BackupConfig(source_path=source_dir,
                           backup_folder=blocker / "backups",
                           webhooks=("https://x.example",),
                           log_folder=tmp_path / "logs")
        with pytest.raises(ConfigLoadError):
            ensure_dirs(cfg)

    def test_file_size_mb(self, tmp_path):
        f = tmp_path / "blob"
        f.write_bytes(b"\x00" * (3 * 1024 * 1024 // 2))
        assert file_size_mb(f) == pytest.approx(1.5)
