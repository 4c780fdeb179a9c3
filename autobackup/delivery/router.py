"""
==========================
Upload Router Module
==========================

This module decides how a freshly produced archive reaches a webhook and carries it there.

Features:
- `choose_strategy`: DirectUpload below 23 MiB, RelayedUpload at or above it.
- `UploadRouter.deliver`: picks one webhook per cycle and runs the chosen strategy.
- Direct upload posts the archive itself to the webhook.
- Relayed upload sends the archive to the temporary file host, then posts the download link to the webhook.
- Nothing is retried inside a cycle; the next scheduled tick is the retry.

Usage:
>>> from autobackup.delivery.router import UploadRouter
>>> router = UploadRouter(cfg.webhooks, client)
>>> result = router.deliver(cfg.archive_path, 4.2)
>>> result.ok

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""

import json
import random
from enum import Enum
from typing import Optional

from autobackup.errors import ConfigLoadError, UploadResponseParseError, UploadTransportError
from autobackup.helpers.config import DEFAULT_ATTRIBUTION, FILE_HOST_URL, MAX_DIRECT_UPLOAD_MB
from autobackup.logger import logger


class DeliveryStrategy(Enum):
    DIRECT = "direct"
    RELAYED = "relayed"


class CycleResult(Enum):
    """Terminal outcome of one backup cycle. Logged, never persisted."""

    SUCCESS = "success"
    ARCHIVE_FAILED = "archive_failed"
    UPLOAD_FAILED = "upload_failed"
    RELAY_FAILED = "relay_failed"

    @property
    def ok(self) -> bool:
        return self is CycleResult.SUCCESS


def choose_strategy(size_mb: float, threshold_mb: float = MAX_DIRECT_UPLOAD_MB) -> DeliveryStrategy:
    """
    Pick the delivery strategy from the archive size. The threshold itself is relayed.

    Args:
        size_mb (float): Archive size in MiB.
        threshold_mb (float, optional): Relay threshold. Defaults to 23.0.

    Returns:
        DeliveryStrategy: RELAYED when size_mb >= threshold_mb, DIRECT otherwise.
    """
    if size_mb >= threshold_mb:
        return DeliveryStrategy.RELAYED
    return DeliveryStrategy.DIRECT


def parse_file_host_link(body: str) -> str:
    """
    Extract the download link from the file host's JSON reply.

    Args:
        body (str): Raw response body.

    Raises:
        UploadResponseParseError: If the body isn't JSON or has no string `link`.

    Returns:
        str: The download link.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise UploadResponseParseError(
            f"file host reply is not JSON: {e}") from e
    link = data.get("link") if isinstance(data, dict) else None
    if not isinstance(link, str) or not link:
        raise UploadResponseParseError(
            f"file host reply has no usable 'link': {body[:200]!r}")
    return link


def build_link_message(link: str, artifact_path, attribution: str = DEFAULT_ATTRIBUTION) -> dict:
    """
    Webhook body announcing a relayed backup.
    """
    return {"content": f"autobackup by {attribution}\n({link})\n{artifact_path}"}


class UploadRouter:
    """
    Routes an archive to one of the configured webhooks.

    The random source is injected so endpoint selection can be made deterministic in tests.
    """

    def __init__(self, endpoints, client, rng: Optional[random.Random] = None,
                 threshold_mb: float = MAX_DIRECT_UPLOAD_MB,
                 file_host_url: str = FILE_HOST_URL,
                 attribution: str = DEFAULT_ATTRIBUTION):
        """
        Args:
            endpoints (Sequence[str]): Webhook URLs. Must not be empty.
            client (DeliveryClient): Performs the HTTP exchanges.
            rng (random.Random, optional): Random source for endpoint selection.
            threshold_mb (float, optional): Relay threshold in MiB. Defaults to 23.0.
            file_host_url (str, optional): Temporary file host upload URL.
            attribution (str, optional): Tag embedded in relayed-link messages.

        Raises:
            ConfigLoadError: If no endpoints are configured.
        """
        self.endpoints = tuple(endpoints)
        if not self.endpoints:
            raise ConfigLoadError("No webhook endpoints configured")
        self.client = client
        self.rng = rng or random.Random()
        self.threshold_mb = threshold_mb
        self.file_host_url = file_host_url
        self.attribution = attribution

    def select_endpoint(self) -> str:
        return self.rng.choice(self.endpoints)

    def deliver(self, artifact_path, size_mb: float) -> CycleResult:
        """
        Send the archive using the strategy its size calls for.
        One endpoint is chosen per call and used for every post in it.

        Args:
            artifact_path (str | Path): The archive to deliver.
            size_mb (float): Its size in MiB.

        Returns:
            CycleResult: SUCCESS, UPLOAD_FAILED or RELAY_FAILED.
        """
        strategy = choose_strategy(size_mb, self.threshold_mb)
        webhook = self.select_endpoint()
        logger.info("Delivering %s (%.2f MB) via %s upload",
                    artifact_path, size_mb, strategy.value)

        if strategy is DeliveryStrategy.RELAYED:
            return self._relay(artifact_path, webhook)
        return self._direct(artifact_path, webhook)

    def _direct(self, artifact_path, webhook: str) -> CycleResult:
        try:
            self.client.upload_file(webhook, artifact_path)
        except UploadTransportError as e:
            logger.error("Direct upload failed: %s", e)
            return CycleResult.UPLOAD_FAILED
        return CycleResult.SUCCESS

    def _relay(self, artifact_path, webhook: str) -> CycleResult:
        try:
            body = self.client.upload_file(self.file_host_url, artifact_path)
        except UploadTransportError as e:
            logger.error("File host upload failed: %s", e)
            return CycleResult.RELAY_FAILED

        try:
            link = parse_file_host_link(body)
        except UploadResponseParseError as e:
            logger.error("File host reply unusable: %s", e)
            return CycleResult.UPLOAD_FAILED

        logger.info("Archive relayed to %s", link)
        try:
            self.client.post_json(webhook, build_link_message(
                link, artifact_path, self.attribution))
        except UploadTransportError as e:
            logger.error("Webhook notification failed: %s", e)
            return CycleResult.UPLOAD_FAILED
        return CycleResult.SUCCESS
