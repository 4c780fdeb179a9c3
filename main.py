"""
===========================
APP: Webhook Auto Backup
===========================

What it does:
- Compresses a folder into a 7-Zip archive at a regular interval.
- Posts the archive to one of several webhooks, picked at random each cycle.
- Archives of 23 MB or more are uploaded to a temporary file host first and only the download link is posted.
- Runs headless until stopped (SIGINT/SIGTERM); SIGUSR1 triggers an extra backup right away.

Usage:
    python main.py [path/to/config.json]

Author: autobackup maintainers \n
License: GPLv3
"""
from autobackup import start_app


if __name__ == "__main__":
    start_app()
