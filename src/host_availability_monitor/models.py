"""Data models for availability monitoring."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


class ProbeStatus(str, Enum):
    """Reachability classification of a host for one cycle."""

    ONLINE = "online"
    PARTIAL = "partial"
    OFFLINE = "offline"

    @classmethod
    def from_percentage(cls, percentage: float) -> "ProbeStatus":
        """Classify a success percentage (0-100)."""
        if percentage >= 100:
            return cls.ONLINE
        elif percentage <= 0:
            return cls.OFFLINE
        return cls.PARTIAL


def classify(successes: int, attempts: int) -> ProbeStatus:
    """Classify a probe result from raw counts.

    ONLINE when every attempt succeeded, OFFLINE when none did, PARTIAL
    otherwise. Counts are compared directly so rounding never moves a host
    between buckets.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")
    if successes >= attempts:
        return ProbeStatus.ONLINE
    elif successes <= 0:
        return ProbeStatus.OFFLINE
    return ProbeStatus.PARTIAL


@dataclass(frozen=True)
class Host:
    """A monitored target as listed in the host registry."""

    key: str
    name: str
    address: str | None
    application: str = ""
    environment: str = ""
    type: str = ""

    @property
    def has_address(self) -> bool:
        return self.address is not None

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any] | None) -> "Host":
        """Create from a registry entry.

        A missing, null or blank ``ip`` leaves the address unset.
        """
        data = data or {}
        raw_address = data.get("ip", data.get("address"))
        address = str(raw_address).strip() if raw_address is not None else None

        return cls(
            key=str(key),
            name=str(data.get("name") or key),
            address=address or None,
            application=str(data.get("application") or ""),
            environment=str(data.get("environment") or ""),
            type=str(data.get("type") or ""),
        )


@dataclass(frozen=True)
class ProbeOutcome:
    """Successful attempts out of the attempt budget for one host."""

    successes: int
    attempts: int

    @property
    def ratio(self) -> float:
        return round(self.successes / self.attempts, 2)

    @property
    def percentage(self) -> float:
        return round(self.successes / self.attempts * 100, 2)

    @property
    def status(self) -> ProbeStatus:
        return classify(self.successes, self.attempts)


@dataclass(frozen=True)
class HostStatus:
    """Evaluated state of one host in one cycle."""

    host: Host
    success_percentage: float
    status: ProbeStatus
    checked_at: datetime = field(default_factory=datetime.now)
    outcome: ProbeOutcome | None = None

    @classmethod
    def from_outcome(
        cls, host: Host, outcome: ProbeOutcome, checked_at: datetime | None = None
    ) -> "HostStatus":
        return cls(
            host=host,
            success_percentage=outcome.percentage,
            status=outcome.status,
            checked_at=checked_at or datetime.now(),
            outcome=outcome,
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to the status file record layout."""
        return {
            "Name": self.host.name,
            "IP": self.host.address or "",
            "Application": self.host.application,
            "Environment": self.host.environment,
            "Type": self.host.type,
            "SuccessPercentage": self.success_percentage,
            "LastChecked": self.checked_at.strftime(TIMESTAMP_FORMAT),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "HostStatus":
        """Rebuild from a status file record."""
        name = str(record.get("Name") or "")
        percentage = float(record.get("SuccessPercentage") or 0)
        host = Host(
            key=name,
            name=name,
            address=str(record.get("IP") or "") or None,
            application=str(record.get("Application") or ""),
            environment=str(record.get("Environment") or ""),
            type=str(record.get("Type") or ""),
        )
        last_checked = record.get("LastChecked")
        checked_at = (
            datetime.strptime(last_checked, TIMESTAMP_FORMAT) if last_checked else datetime.now()
        )
        return cls(
            host=host,
            success_percentage=percentage,
            status=ProbeStatus.from_percentage(percentage),
            checked_at=checked_at,
        )


@dataclass(frozen=True)
class Snapshot:
    """Ordered status of every probed host for one cycle."""

    statuses: tuple[HostStatus, ...] = ()
    taken_at: datetime = field(default_factory=datetime.now)

    def __len__(self) -> int:
        return len(self.statuses)

    def __iter__(self):
        return iter(self.statuses)

    def count(self, status: ProbeStatus) -> int:
        return sum(1 for s in self.statuses if s.status == status)

    @property
    def online_count(self) -> int:
        return self.count(ProbeStatus.ONLINE)

    @property
    def partial_count(self) -> int:
        return self.count(ProbeStatus.PARTIAL)

    @property
    def offline_count(self) -> int:
        return self.count(ProbeStatus.OFFLINE)

    def to_records(self) -> list[dict[str, Any]]:
        return [s.to_record() for s in self.statuses]

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> "Snapshot":
        return cls(statuses=tuple(HostStatus.from_record(r) for r in records))


@dataclass(frozen=True)
class NotificationState:
    """Calendar day of the last successfully dispatched digest."""

    last_notified: date | None = None

    def notified_on(self, day: date) -> bool:
        return self.last_notified == day

    def advance(self, day: date) -> "NotificationState":
        return NotificationState(last_notified=day)
