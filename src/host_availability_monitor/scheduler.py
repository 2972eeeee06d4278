"""Once-a-day digest notification scheduling."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from host_availability_monitor.config import NotificationSettings
from host_availability_monitor.digest import Digest, render_digest_html
from host_availability_monitor.exceptions import DeliveryError, WriteError
from host_availability_monitor.models import DATE_FORMAT, NotificationState, Snapshot
from host_availability_monitor.notifiers.base import BaseNotifier
from host_availability_monitor.state import NotificationStateStore

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """Decide once per cycle whether the daily digest is due and send it.

    A digest is sent when notifications are enabled, today is an allowed
    weekday, the clock reads exactly the configured ``HH:MM`` and no digest
    has been sent today. The time check is an exact minute match: a cycle
    that never lands on that minute sends nothing that day.
    """

    def __init__(
        self,
        settings: NotificationSettings,
        notifier: BaseNotifier | None,
        store: NotificationStateStore,
        report_dir: str | Path | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the scheduler.

        Args:
            settings: Notification settings.
            notifier: Sink the digest is delivered to.
            store: Durable store for the last-notified date.
            report_dir: Directory for the HTML digest copy (None disables it).
            clock: Returns the current local time.
        """
        self.settings = settings
        self.notifier = notifier
        self.store = store
        self.report_dir = Path(report_dir) if report_dir is not None else None
        self.clock = clock

    def is_due(self, state: NotificationState, now: datetime) -> bool:
        """Check every gating condition for the given moment."""
        if not self.settings.enabled or self.notifier is None:
            return False
        if not self.settings.allows_day(now.strftime("%A")):
            return False
        if now.strftime("%H:%M") != self.settings.time:
            return False
        return not state.notified_on(now.date())

    def maybe_notify(self, snapshot: Snapshot, state: NotificationState) -> NotificationState:
        """Send the digest if due and return the resulting state.

        The state only advances after the notifier reports success. Delivery
        failures are logged and the unchanged state is returned.
        """
        now = self.clock()
        if not self.is_due(state, now):
            return state

        digest = Digest.from_snapshot(snapshot, now=now)
        logger.info(f"Sending daily digest: {digest.summary_line()}")
        self._write_report(digest)

        try:
            delivered = self.notifier.deliver(digest)
        except DeliveryError as e:
            logger.error(f"Digest delivery failed: {e}")
            return state
        except Exception:
            logger.exception("Unexpected error while delivering digest")
            return state

        if not delivered:
            logger.error("Digest delivery failed; notification state not updated")
            return state

        new_state = state.advance(now.date())
        try:
            self.store.save(new_state)
        except WriteError as e:
            logger.error(f"{e}; a restart today may send the digest again")
        return new_state

    def _write_report(self, digest: Digest) -> Path | None:
        """Write the HTML copy of the digest. Failures never block delivery."""
        if self.report_dir is None:
            return None

        path = self.report_dir / f"digest-{digest.generated_at.strftime(DATE_FORMAT)}.html"
        try:
            self.report_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(render_digest_html(digest), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write HTML digest {path}: {e}")
            return None

        logger.info(f"HTML digest written to {path}")
        return path
