"""
==========================
Delivery Module
==========================

This module moves a finished archive to one of the configured webhooks.

Features:
- `DeliveryClient`: multipart file uploads and JSON posts over a `requests.Session`.
- `UploadRouter`: picks a webhook and decides between a direct upload and a relay through the temporary file host.
- `CycleResult`: terminal outcome of a cycle.


Usage:
>>> from autobackup.delivery import DeliveryClient, UploadRouter
>>> router = UploadRouter(cfg.webhooks, DeliveryClient())
>>> router.deliver(cfg.archive_path, 12.5)

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""
from autobackup.delivery.client import DeliveryClient
from autobackup.delivery.router import CycleResult, DeliveryStrategy, UploadRouter, choose_strategy
