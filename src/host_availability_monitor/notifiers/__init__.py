"""Digest notification sinks."""

from host_availability_monitor.notifiers.base import BaseNotifier
from host_availability_monitor.notifiers.webhook import WebhookNotifier

__all__ = ["BaseNotifier", "WebhookNotifier"]
