"""Core monitoring loop."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol

from host_availability_monitor.config import Settings
from host_availability_monitor.exceptions import ConfigurationError, FatalWriteError, WriteError
from host_availability_monitor.models import Host, HostStatus, NotificationState, ProbeOutcome, Snapshot
from host_availability_monitor.notifiers import BaseNotifier, WebhookNotifier
from host_availability_monitor.probers import BaseProber, PingProber
from host_availability_monitor.registry import HostRegistry
from host_availability_monitor.scheduler import NotificationScheduler
from host_availability_monitor.state import NotificationStateStore
from host_availability_monitor.writer import SnapshotWriter

logger = logging.getLogger(__name__)


class Registry(Protocol):
    def load(self) -> list[Host]: ...


class HostMonitor:
    """Probe every registered host once per cycle and publish the snapshot."""

    def __init__(
        self,
        settings: Settings,
        registry: Registry,
        prober: BaseProber,
        writer: SnapshotWriter | None = None,
        scheduler: NotificationScheduler | None = None,
        status_file: str | Path | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the monitor.

        Args:
            settings: Validated settings.
            registry: Source of the host list, read at every cycle start.
            prober: Reachability prober.
            writer: Snapshot writer (None skips writing).
            scheduler: Digest scheduler (None disables notifications).
            status_file: Status file path, defaults to ``settings.output.status_file``.
            sleep: Called with the interval between cycles.
            clock: Returns the current local time.
        """
        self.settings = settings
        self.registry = registry
        self.prober = prober
        self.writer = writer
        self.scheduler = scheduler
        self.status_file = Path(status_file or settings.output.status_file)
        self._sleep = sleep
        self._clock = clock
        self._last_snapshot: Snapshot | None = None

    def check_host(self, host: Host) -> HostStatus | None:
        """Probe one host and classify it.

        Returns:
            The host's status, or None if it has no address.
        """
        if not host.has_address:
            logger.warning(f"Skipping host '{host.name}': no IP address configured")
            return None

        ping = self.settings.ping
        successes = self.prober.probe(host.address, ping.count, ping.timeout_ms, ping.payload_size)
        status = HostStatus.from_outcome(
            host, ProbeOutcome(successes=successes, attempts=ping.count), self._clock()
        )
        logger.info(
            f"{host.name} ({host.address}): {status.status.value.upper()} "
            f"{status.success_percentage}%"
        )
        return status

    def build_snapshot(self, hosts: list[Host]) -> Snapshot:
        """Probe all hosts and assemble the snapshot in registry order."""
        if self.settings.parallel_checks and len(hosts) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                futures = [executor.submit(self.check_host, host) for host in hosts]
                # Collect in submission order to keep registry order
                results = [future.result() for future in futures]
        else:
            results = [self.check_host(host) for host in hosts]

        return Snapshot(
            statuses=tuple(r for r in results if r is not None),
            taken_at=self._clock(),
        )

    def run_cycle(self, state: NotificationState) -> tuple[Snapshot | None, NotificationState]:
        """Run one full pass over the registry.

        Args:
            state: Notification state carried over from the previous cycle.

        Returns:
            The cycle's snapshot (None if it could not be built) and the
            notification state after the scheduler has run.

        Raises:
            FatalWriteError: If the status file destination is unusable.
            ConfigurationError: If the prober rejects the probe settings.
        """
        try:
            hosts = self.registry.load()
        except ConfigurationError as e:
            logger.error(f"Cannot load host registry: {e}")
            return None, state

        try:
            snapshot = self.build_snapshot(hosts)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception(f"Failed to build snapshot: {e}")
            return None, state

        self._last_snapshot = snapshot
        logger.info(
            f"Cycle complete: {len(snapshot)} hosts, {snapshot.online_count} online, "
            f"{snapshot.partial_count} partial, {snapshot.offline_count} offline"
        )

        if self.writer is not None:
            try:
                self.writer.write(snapshot, self.status_file)
            except FatalWriteError as e:
                logger.critical(str(e))
                raise
            except WriteError as e:
                logger.error(str(e))

        if self.scheduler is not None:
            state = self.scheduler.maybe_notify(snapshot, state)

        return snapshot, state

    def load_state(self) -> NotificationState:
        if self.scheduler is None:
            return NotificationState()
        return self.scheduler.store.load()

    def run_forever(self, max_cycles: int | None = None) -> NotificationState:
        """Run cycles until the process is terminated.

        Args:
            max_cycles: Stop after this many cycles (None runs forever).

        Returns:
            The notification state after the last cycle.
        """
        state = self.load_state()
        if state.last_notified:
            logger.info(f"Last digest sent on {state.last_notified.isoformat()}")

        cycles = 0
        while True:
            _, state = self.run_cycle(state)
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                return state
            logger.debug(f"Sleeping {self.settings.ping.interval}s until next cycle")
            self._sleep(self.settings.ping.interval)

    def get_last_snapshot(self) -> Snapshot | None:
        """Get the last built snapshot."""
        return self._last_snapshot


def create_monitor(
    settings: Settings,
    hosts_file: str | Path | None = None,
    prober: BaseProber | None = None,
    notifier: BaseNotifier | None = None,
) -> HostMonitor:
    """Wire a monitor from settings with the default collaborators.

    Args:
        settings: Validated settings.
        hosts_file: Overrides ``settings.hosts_file``.
        prober: Overrides the ICMP prober.
        notifier: Overrides the webhook notifier.
    """
    notifications = settings.notifications
    if notifier is None and notifications.enabled and notifications.webhook_url:
        notifier = WebhookNotifier(notifications.webhook_url)

    scheduler = NotificationScheduler(
        settings=notifications,
        notifier=notifier,
        store=NotificationStateStore(settings.output.state_file),
        report_dir=settings.output.report_dir,
    )

    return HostMonitor(
        settings=settings,
        registry=HostRegistry(hosts_file or settings.hosts_file),
        prober=prober or PingProber(),
        writer=SnapshotWriter(),
        scheduler=scheduler,
    )
