"""Base notifier interface."""

from abc import ABC, abstractmethod

from host_availability_monitor.digest import Digest, format_digest_text


class BaseNotifier(ABC):
    """Abstract base class for digest notifiers."""

    @abstractmethod
    def deliver(self, digest: Digest) -> bool:
        """Deliver a digest once, without retrying.

        Args:
            digest: Digest to deliver.

        Returns:
            True if the endpoint accepted the notification.
        """
        ...

    def format_digest(self, digest: Digest) -> str:
        """Format the digest message.

        Override this method to customize message formatting.
        """
        return format_digest_text(digest)
