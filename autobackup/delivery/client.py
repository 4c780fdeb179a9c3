"""
==========================
Delivery Client Module
==========================

This module performs the HTTP transfers of a backup cycle using `requests`.

Features:
- `upload_file`: multipart/form-data POST of a file under the field name `file`.
- `post_json`: JSON POST (`Content-Type: application/json`), response not parsed.
- Every request has an explicit timeout.
- Transport errors and non-2xx responses are raised as `UploadTransportError`.

Usage:
>>> from autobackup.delivery.client import DeliveryClient
>>> client = DeliveryClient(upload_timeout=900, json_timeout=30)
>>> body = client.upload_file("https://file.io/?expires=1w", "backups/backup.7z")
>>> client.post_json("https://discord.com/api/webhooks/...", {"content": "hello"})
>>> client.close()

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import os

import requests

from autobackup import __version__
from autobackup.errors import UploadTransportError
from autobackup.logger import logger


class DeliveryClient:
    """
    Thin wrapper over a `requests.Session` for the two kinds of POST a cycle makes.
    Both calls block until the exchange completes, fails, or times out.
    """

    def __init__(self, upload_timeout: float = 900, json_timeout: float = 30, session=None):
        """
        Args:
            upload_timeout (float, optional): Seconds allowed for a file upload. Defaults to 900.
            json_timeout (float, optional): Seconds allowed for a JSON post. Defaults to 30.
            session (requests.Session, optional): Session to use. A new one is created if omitted.
        """
        self.upload_timeout = upload_timeout
        self.json_timeout = json_timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": f"autobackup/{__version__}"})

    def _check(self, url: str, resp) -> None:
        if not 200 <= resp.status_code < 300:
            raise UploadTransportError(
                url, f"HTTP {resp.status_code}", status_code=resp.status_code)

    def upload_file(self, url: str, filepath) -> str:
        """
        POST a file as multipart/form-data under the field name `file`.
        The file is read from an open handle rather than loaded up front.

        Args:
            url (str): Target URL.
            filepath (str | Path): File to send.

        Raises:
            UploadTransportError: If the file can't be opened, the request fails, or the status is not 2xx.

        Returns:
            str: The response body.
        """
        name = os.path.basename(filepath)
        try:
            with open(filepath, "rb") as fh:
                resp = self.session.post(
                    url, files={"file": (name, fh)}, timeout=self.upload_timeout)
        except requests.RequestException as e:
            raise UploadTransportError(url, f"upload failed: {e}") from e
        except OSError as e:
            raise UploadTransportError(
                url, f"could not read {filepath}: {e}") from e

        self._check(url, resp)
        logger.debug("Uploaded %s to %s (HTTP %s)",
                     name, url, resp.status_code)
        return resp.text

    def post_json(self, url: str, body: dict) -> None:
        """
        POST a JSON body. The response content is not inspected beyond its status.

        Args:
            url (str): Target URL.
            body (dict): JSON-serialisable payload.

        Raises:
            UploadTransportError: If the request fails or the status is not 2xx.
        """
        try:
            resp = self.session.post(
                url, json=body, headers={"Content-Type": "application/json"},
                timeout=self.json_timeout)
        except requests.RequestException as e:
            raise UploadTransportError(url, f"post failed: {e}") from e

        self._check(url, resp)
        logger.debug("Posted JSON to %s (HTTP %s)", url, resp.status_code)

    def close(self) -> None:
        self.session.close()
