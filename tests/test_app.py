"""
Tests for startup, shutdown and logging setup
"""

import threading
from unittest.mock import Mock, patch

import pytest

from autobackup import start_app
from autobackup.logger import configure_logger, logger, shutdown_logger
from autobackup.workers import graceful_workers_shutdown


class TestStartApp:

    def test_missing_config_exits_with_1(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            start_app(["main.py", str(tmp_path / "missing.json")])
        assert exc.value.code == 1

    def test_empty_webhooks_exit_with_1(self, write_config, source_dir):
        path = write_config({"folderToBackup": str(source_dir), "webhooks": []})
        with pytest.raises(SystemExit) as exc:
            start_app(["main.py", path])
        assert exc.value.code == 1

    def test_uncreatable_backup_folder_exits_with_1(self, write_config, source_dir, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        path = write_config({
            "folderToBackup": str(source_dir),
            "webhooks": ["https://discord.example/hook"],
            "backupFolder": str(blocker / "backups"),
        })
        with pytest.raises(SystemExit) as exc:
            start_app(["main.py", path])
        assert exc.value.code == 1


class TestShutdown:

    def test_graceful_shutdown(self):
        stop_event = threading.Event()
        worker = threading.Thread(target=stop_event.wait, name="Waiter")
        worker.start()
        closer = Mock()

        with patch("autobackup.workers.shutdown_logger") as stop_logging:
            graceful_workers_shutdown(stop_event, [worker], closers=[closer])

        assert stop_event.is_set()
        assert not worker.is_alive()
        closer.assert_called_once()
        stop_logging.assert_called_once()

    def test_failing_closer_does_not_abort_shutdown(self):
        second = Mock()
        with patch("autobackup.workers.shutdown_logger"):
            graceful_workers_shutdown(threading.Event(), [], closers=[
                Mock(side_effect=OSError("already closed")), second])
        second.assert_called_once()


def test_logger_writes_rotating_file(tmp_path):
    configure_logger(tmp_path / "logs", "DEBUG")
    try:
        logger.info("backup cycle test line")
    finally:
        shutdown_logger()

    content = (tmp_path / "logs" / "autobackup.log").read_text(encoding="utf-8")
    assert "backup cycle test line" in content
    assert "[INFO]" in content


def test_module_banners_carry_author_and_date():
    import pkgutil
    import importlib

    import autobackup

    modules = [autobackup] + [
        importlib.import_module(info.name)
        for info in pkgutil.walk_packages(autobackup.__path__, "autobackup.")
    ]
    for mod in modules:
        if mod.__doc__ and mod.__doc__.lstrip().startswith("="):
            assert "*Author: autobackup maintainers*" in mod.__doc__, mod.__name__
            assert "*Created: " in mod.__doc__, mod.__name__
