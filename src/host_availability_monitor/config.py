"""Configuration management for the availability monitor."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import yaml

from host_availability_monitor.exceptions import ConfigurationError

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def load_yaml_mapping(path: str | Path) -> dict[str, Any]:
    """Read a YAML file whose top level must be a mapping."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at top level")
    return data


def _as_int(data: dict[str, Any], key: str, default: int, section: str) -> int:
    value = data.get(key, default)
    if isinstance(value, bool):
        raise ConfigurationError(f"{section}.{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{section}.{key} must be an integer, got {value!r}") from None


def _as_bool(data: dict[str, Any], key: str, default: bool, section: str) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def _as_clock_time(value: Any) -> str:
    # YAML 1.1 reads an unquoted 10:30 as the base-60 integer 630
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value // 60:02d}:{value % 60:02d}"
    return str(value).strip()


@dataclass
class PingSettings:
    """Probe cadence and per-host attempt budget."""

    interval: int = 30  # seconds between cycles
    timeout_ms: int = 1000
    payload_size: int = 32  # bytes
    count: int = 4  # attempts per host

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PingSettings":
        return cls(
            interval=_as_int(data, "interval", 30, "ping"),
            timeout_ms=_as_int(data, "timeout_ms", 1000, "ping"),
            payload_size=_as_int(data, "payload_size", 32, "ping"),
            count=_as_int(data, "count", 4, "ping"),
        )

    def validate(self) -> None:
        if self.interval < 1:
            raise ConfigurationError(f"ping.interval must be >= 1, got {self.interval}")
        if self.timeout_ms < 1:
            raise ConfigurationError(f"ping.timeout_ms must be >= 1, got {self.timeout_ms}")
        if self.payload_size < 0:
            raise ConfigurationError(f"ping.payload_size must be >= 0, got {self.payload_size}")
        if self.count < 1:
            raise ConfigurationError(f"ping.count must be >= 1, got {self.count}")


def _check_webhook_url(url: Any) -> None:
    try:
        parsed = httpx.URL(str(url))
    except (httpx.InvalidURL, ValueError) as e:
        raise ConfigurationError(f"notifications.webhook_url is not a valid URL: {e}") from None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(
            f"notifications.webhook_url must be an http(s) URL, got {url!r}"
        )


@dataclass
class NotificationSettings:
    """Daily digest notification settings."""

    enabled: bool = False
    days: list[str] = field(default_factory=lambda: list(WEEKDAYS[:5]))
    time: str = "08:00"  # exact HH:MM match
    webhook_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationSettings":
        days = data.get("days", list(WEEKDAYS[:5]))
        if isinstance(days, str):
            days = [d.strip() for d in days.split(",") if d.strip()]
        return cls(
            enabled=_as_bool(data, "enabled", False, "notifications"),
            days=[str(d) for d in days or []],
            time=_as_clock_time(data.get("time", "08:00")),
            webhook_url=data.get("webhook_url"),
        )

    def validate(self) -> None:
        if not _TIME_PATTERN.match(self.time):
            raise ConfigurationError(
                f"notifications.time must be HH:MM (24h), got {self.time!r}"
            )
        known = {d.lower() for d in WEEKDAYS}
        for day in self.days:
            if day.lower() not in known:
                raise ConfigurationError(f"notifications.days: unknown weekday {day!r}")
        if self.enabled and not self.webhook_url:
            raise ConfigurationError("notifications.webhook_url is required when enabled")
        if self.webhook_url:
            _check_webhook_url(self.webhook_url)

    def allows_day(self, weekday: str) -> bool:
        """Check whether a weekday name is in the allow-list."""
        return weekday.lower() in {d.lower() for d in self.days}


@dataclass
class OutputSettings:
    """Locations of the files the monitor writes."""

    status_file: Path = Path("status.json")
    state_file: Path = Path("last_notified.txt")
    report_dir: Path = Path("reports")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutputSettings":
        return cls(
            status_file=Path(data.get("status_file", "status.json")),
            state_file=Path(data.get("state_file", "last_notified.txt")),
            report_dir=Path(data.get("report_dir", "reports")),
        )

    def resolve(self, base_dir: Path) -> "OutputSettings":
        """Return a copy with relative paths anchored at base_dir."""
        return OutputSettings(
            status_file=_anchor(self.status_file, base_dir),
            state_file=_anchor(self.state_file, base_dir),
            report_dir=_anchor(self.report_dir, base_dir),
        )


def _anchor(path: Path, base_dir: Path) -> Path:
    path = path.expanduser()
    return path if path.is_absolute() else base_dir / path


@dataclass
class Settings:
    """Main configuration for the availability monitor."""

    hosts_file: Path = Path("hosts.yaml")
    ping: PingSettings = field(default_factory=PingSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    parallel_checks: bool = False
    max_workers: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load and validate settings from a YAML file.

        Relative file locations are resolved against the settings file's
        directory.
        """
        path = Path(path)
        settings = cls.from_dict(load_yaml_mapping(path))
        base_dir = path.resolve().parent
        settings.hosts_file = _anchor(settings.hosts_file, base_dir)
        settings.output = settings.output.resolve(base_dir)
        settings.validate()
        return settings

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """Create settings from a dictionary."""
        for section in ("ping", "notifications", "output"):
            if not isinstance(data.get(section) or {}, dict):
                raise ConfigurationError(f"'{section}' must be a mapping")

        return cls(
            hosts_file=Path(data.get("hosts_file", "hosts.yaml")),
            ping=PingSettings.from_dict(data.get("ping") or {}),
            notifications=NotificationSettings.from_dict(data.get("notifications") or {}),
            output=OutputSettings.from_dict(data.get("output") or {}),
            parallel_checks=_as_bool(data, "parallel_checks", False, "settings"),
            max_workers=_as_int(data, "max_workers", 10, "settings"),
            log_level=str(data.get("log_level", "INFO")).upper(),
        )

    def validate(self) -> None:
        """Raise ConfigurationError if any value is out of range."""
        self.ping.validate()
        self.notifications.validate()
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    def to_yaml(self, path: str | Path) -> None:
        """Save settings to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self._to_dict(), f, default_flow_style=False, sort_keys=False)

    def _to_dict(self) -> dict[str, Any]:
        return {
            "hosts_file": str(self.hosts_file),
            "ping": {
                "interval": self.ping.interval,
                "timeout_ms": self.ping.timeout_ms,
                "payload_size": self.ping.payload_size,
                "count": self.ping.count,
            },
            "notifications": {
                "enabled": self.notifications.enabled,
                "days": list(self.notifications.days),
                "time": self.notifications.time,
                "webhook_url": self.notifications.webhook_url,
            },
            "output": {
                "status_file": str(self.output.status_file),
                "state_file": str(self.output.state_file),
                "report_dir": str(self.output.report_dir),
            },
            "parallel_checks": self.parallel_checks,
            "max_workers": self.max_workers,
            "log_level": self.log_level,
        }


def create_example_settings() -> Settings:
    """Create an example settings object for documentation."""
    return Settings(
        hosts_file=Path("hosts.yaml"),
        ping=PingSettings(interval=30, timeout_ms=1000, payload_size=32, count=4),
        notifications=NotificationSettings(
            enabled=False,
            days=list(WEEKDAYS[:5]),
            time="08:00",
            webhook_url="https://example.com/webhook",
        ),
    )
