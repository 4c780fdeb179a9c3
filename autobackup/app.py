import signal
import sys
import threading

from autobackup.errors import ConfigLoadError
from autobackup.logger import configure_logger, logger
from autobackup.helpers.config import load_config, resolve_config_path
from autobackup.helpers.general import ensure_dirs
from autobackup.helpers.archive import SevenZipArchiver, archiver_exists
from autobackup.delivery import DeliveryClient, UploadRouter
from autobackup.workers import BackupWorker, graceful_workers_shutdown


def run_backup_service(config_path: str):
    """
    Main function to run the backup service.
    Loads the configuration, starts the backup worker thread, sets up signal handlers
    for graceful shutdown, and blocks until a stop signal arrives.

    Args:
        config_path (str): Path to the JSON config file.

    Raises:
        ConfigLoadError: If the configuration can't be loaded or the folders can't be created.
    """
    cfg = load_config(config_path)
    ensure_dirs(cfg)

    configure_logger(cfg.log_folder, cfg.log_level)

    if not archiver_exists(cfg.archiver):
        logger.warning(
            "%s not found in PATH. Every cycle will fail until it is installed.", cfg.archiver)

    stop_event = threading.Event()

    client = DeliveryClient(upload_timeout=cfg.upload_timeout,
                            json_timeout=cfg.webhook_timeout)
    router = UploadRouter(cfg.webhooks, client, attribution=cfg.attribution)
    archiver = SevenZipArchiver(binary=cfg.archiver,
                                level=cfg.compression_level, timeout=cfg.archive_timeout)

    backup_thread = BackupWorker(stop_event=stop_event, thread_name="BackupThread",
                                 cfg=cfg, archiver=archiver, router=router)
    backup_thread.start()

    signal.signal(signal.SIGINT, lambda *a: stop_event.set())
    signal.signal(signal.SIGTERM, lambda *a: stop_event.set())
    if hasattr(signal, "SIGUSR1"):
        signal.signal(signal.SIGUSR1, lambda *a: backup_thread.trigger_now())

    # signal handlers only run between waits
    while not stop_event.wait(1.0):
        pass

    graceful_workers_shutdown(stop_event, [backup_thread], closers=[
                              client.close])


def start_app(argv=None):
    """
    Entry point to start the backup service.
    Exits with code 1 when the configuration can't be loaded; otherwise runs until stopped.
    Handles exceptions and logs fatal errors.
    """
    argv = sys.argv if argv is None else argv
    config_path = resolve_config_path(argv)

    try:
        run_backup_service(config_path)
    except ConfigLoadError as e:
        logger.error("Failed to load configuration: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.exception("Fatal error in backup service: %s", e)
        raise
