"""Shared fixtures: fake probers, notifiers and a controllable clock."""

from datetime import datetime

import pytest

from host_availability_monitor.config import NotificationSettings, Settings
from host_availability_monitor.exceptions import ProbeFailure
from host_availability_monitor.models import Host
from host_availability_monitor.notifiers.base import BaseNotifier
from host_availability_monitor.probers.base import BaseProber

# 2024-06-03 is a Monday
MONDAY_0800 = datetime(2024, 6, 3, 8, 0, 30)


class FakeProber(BaseProber):
    """Succeeds a fixed number of times per address, then fails."""

    def __init__(self, successes: dict[str, int]) -> None:
        super().__init__(sleep=lambda seconds: None)
        self.successes = successes
        self.calls: dict[str, int] = {}

    def attempt(self, address: str, timeout_ms: int, payload_size: int) -> None:
        done = self.calls.get(address, 0)
        self.calls[address] = done + 1
        if done >= self.successes.get(address, 0):
            raise ProbeFailure(f"no reply from {address}")


class FakeNotifier(BaseNotifier):
    """Records digests and returns preset results."""

    def __init__(self, results: list[bool] | None = None) -> None:
        self.results = list(results or [])
        self.delivered = []

    def deliver(self, digest) -> bool:
        self.delivered.append(digest)
        return self.results.pop(0) if self.results else True


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(MONDAY_0800)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_prober():
    return FakeProber


@pytest.fixture
def notification_settings():
    return NotificationSettings(
        enabled=True,
        days=["Monday", "Wednesday"],
        time="08:00",
        webhook_url="https://hooks.example.com/digest",
    )


@pytest.fixture
def settings(tmp_path, notification_settings):
    s = Settings.from_dict({
        "ping": {"interval": 30, "timeout_ms": 500, "payload_size": 32, "count": 4},
        "output": {
            "status_file": str(tmp_path / "status.json"),
            "state_file": str(tmp_path / "last_notified.txt"),
            "report_dir": str(tmp_path / "reports"),
        },
    })
    s.notifications = notification_settings
    return s


@pytest.fixture
def hosts():
    return [
        Host(key="web", name="Web 01", address="192.168.1.10",
             application="Shop", environment="Production", type="VM"),
        Host(key="db", name="DB 01", address="192.168.1.20",
             application="Shop", environment="Production", type="Physical"),
        Host(key="legacy", name="Legacy", address=None,
             application="Archive", environment="Production", type="VM"),
    ]


@pytest.fixture
def make_notifier():
    return FakeNotifier
