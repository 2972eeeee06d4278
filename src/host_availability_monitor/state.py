"""Durable storage for the notification state."""

import logging
from datetime import datetime
from pathlib import Path

from host_availability_monitor.exceptions import WriteError
from host_availability_monitor.models import DATE_FORMAT, NotificationState

logger = logging.getLogger(__name__)


class NotificationStateStore:
    """Keep the last-notified date in a single-line text file (``yyyy-MM-dd``)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> NotificationState:
        """Read the persisted state.

        A missing or empty file means no digest has been sent. Unparseable
        content is logged and treated the same way.
        """
        try:
            text = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return NotificationState()
        except OSError as e:
            logger.warning(f"Cannot read notification state {self.path}: {e}")
            return NotificationState()

        if not text:
            return NotificationState()

        try:
            last = datetime.strptime(text.splitlines()[0].strip(), DATE_FORMAT).date()
        except ValueError:
            logger.warning(f"Ignoring malformed notification state in {self.path}: {text!r}")
            return NotificationState()
        return NotificationState(last_notified=last)

    def save(self, state: NotificationState) -> None:
        """Persist the state.

        Raises:
            WriteError: If the file cannot be written.
        """
        content = state.last_notified.strftime(DATE_FORMAT) if state.last_notified else ""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise WriteError(f"Failed to save notification state to {self.path}: {e}") from e
        logger.debug(f"Notification state saved: {content or '<none>'}")
