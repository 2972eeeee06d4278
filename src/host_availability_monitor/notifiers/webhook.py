"""Generic webhook notification handler."""

import logging

import httpx

from host_availability_monitor.digest import Digest
from host_availability_monitor.exceptions import DeliveryError
from host_availability_monitor.notifiers.base import BaseNotifier

logger = logging.getLogger(__name__)


class WebhookNotifier(BaseNotifier):
    """Post the digest as ``{"text": ...}`` to an incoming webhook."""

    def __init__(
        self,
        url: str,
        headers: dict | None = None,
        timeout: float = 10,
    ) -> None:
        """Initialize webhook notifier.

        Args:
            url: Webhook URL.
            headers: Optional headers to include.
            timeout: Request timeout in seconds.
        """
        self.url = url
        self.headers = headers or {}
        self.timeout = timeout

    def deliver(self, digest: Digest) -> bool:
        """Send the digest via webhook."""
        try:
            self._send_request({"text": self.format_digest(digest)})
        except DeliveryError as e:
            logger.error(f"Failed to send digest notification: {e}")
            return False
        return True

    def _send_request(self, payload: dict) -> None:
        """POST payload to the webhook, raising DeliveryError on failure."""
        try:
            response = httpx.post(
                self.url,
                json=payload,
                headers=self.headers,
                timeout=self.timeout,
            )
        except Exception as e:
            raise DeliveryError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise DeliveryError(f"Webhook error: {response.status_code}")
        logger.info(f"Digest notification sent to {self.url}")
