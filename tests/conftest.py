"""
Pytest configuration for autobackup tests
"""

import json
from pathlib import Path

import pytest

from autobackup.helpers.config import BackupConfig


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300


class FakeSession:
    """Stands in for requests.Session, recording every POST."""

    def __init__(self):
        self.headers = {}
        self.calls = []
        self._replies = []
        self.closed = False

    def reply(self, status_code=200, text="", exc=None):
        self._replies.append((status_code, text, exc))

    def post(self, url, **kwargs):
        call = {"url": url, **kwargs}
        if "files" in kwargs:
            name, fh = kwargs["files"]["file"]
            call["file_name"] = name
            call["file_bytes"] = fh.read()
        self.calls.append(call)
        status_code, text, exc = self._replies.pop(0) if self._replies else (200, "", None)
        if exc is not None:
            raise exc
        return FakeResponse(status_code, text)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def source_dir(tmp_path) -> Path:
    src = tmp_path / "data"
    src.mkdir()
    (src / "world.dat").write_bytes(b"\x00" * 128)
    return src


@pytest.fixture
def backup_cfg(tmp_path, source_dir) -> BackupConfig:
    backups = tmp_path / "backups"
    backups.mkdir()
    return BackupConfig(
        source_path=source_dir,
        backup_folder=backups,
        webhooks=("https://discord.example/hook", "https://discord.example/other"),
        interval_minutes=15,
        log_folder=tmp_path / "logs",
    )


@pytest.fixture
def write_config(tmp_path):
    """Write a config dict to config.json and return its path."""
    def _write(data) -> str:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return str(path)
    return _write
