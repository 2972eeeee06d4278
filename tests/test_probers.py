"""Tests for reachability probers."""

import subprocess

import pytest

from host_availability_monitor.exceptions import ConfigurationError, ProbeFailure
from host_availability_monitor.probers import base as probers_base
from host_availability_monitor.probers import ping as ping_module
from host_availability_monitor.probers.base import BaseProber
from host_availability_monitor.probers.ping import PingProber


class ScriptedProber(BaseProber):
    """Plays back a fixed sequence of attempt results."""

    def __init__(self, outcomes):
        self.sleeps = []
        super().__init__(sleep=self.sleeps.append)
        self.outcomes = list(outcomes)
        self.calls = []

    def attempt(self, address, timeout_ms, payload_size):
        self.calls.append((address, timeout_ms, payload_size))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome


class TestBaseProber:
    """Tests for the attempt loop."""

    def test_counts_successes(self):
        prober = ScriptedProber([None, ProbeFailure("timeout"), None, ProbeFailure("x")])
        assert prober.probe("10.0.0.1", 4, 1000, 32) == 2

    def test_exact_attempt_count_and_arguments(self):
        prober = ScriptedProber([None] * 3)
        prober.probe("10.0.0.1", 3, 750, 64)
        assert prober.calls == [("10.0.0.1", 750, 64)] * 3

    def test_delay_between_attempts(self):
        prober = ScriptedProber([None] * 4)
        prober.probe("10.0.0.1", 4, 1000, 32)
        assert prober.sleeps == [probers_base.ATTEMPT_DELAY_SECONDS] * 3
        assert probers_base.ATTEMPT_DELAY_SECONDS == 0.1

    def test_single_attempt_does_not_sleep(self):
        prober = ScriptedProber([None])
        assert prober.probe("10.0.0.1", 1, 1000, 32) == 1
        assert prober.sleeps == []

    def test_os_errors_count_as_failures(self):
        prober = ScriptedProber([OSError("network unreachable"), None])
        assert prober.probe("10.0.0.1", 2, 1000, 32) == 1

    def test_all_failures(self):
        prober = ScriptedProber([ProbeFailure("x")] * 4)
        assert prober.probe("10.0.0.1", 4, 1000, 32) == 0

    @pytest.mark.parametrize("attempts,timeout_ms,payload_size", [
        (0, 1000, 32),
        (-1, 1000, 32),
        (4, 0, 32),
        (4, 1000, -1),
    ])
    def test_invalid_configuration_is_fatal(self, attempts, timeout_ms, payload_size):
        prober = ScriptedProber([])
        with pytest.raises(ConfigurationError):
            prober.probe("10.0.0.1", attempts, timeout_ms, payload_size)
        assert prober.calls == []


class FakeCompleted:
    def __init__(self, returncode, stdout=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = ""


class TestPingProber:
    """Tests for the system ping prober."""

    def test_linux_command(self):
        prober = PingProber(system="Linux")
        assert prober.build_command("10.0.0.1", 1000, 32) == [
            "ping", "-c", "1", "-W", "1", "-s", "32", "10.0.0.1",
        ]

    def test_linux_timeout_rounds_up_to_seconds(self):
        prober = PingProber(system="Linux")
        assert prober.build_command("10.0.0.1", 1500, 32)[4] == "2"
        assert prober.build_command("10.0.0.1", 200, 32)[4] == "1"

    def test_windows_command(self):
        prober = PingProber(system="Windows")
        assert prober.build_command("10.0.0.1", 1000, 32) == [
            "ping", "-n", "1", "-w", "1000", "-l", "32", "10.0.0.1",
        ]

    def test_darwin_command(self):
        prober = PingProber(system="Darwin")
        assert prober.build_command("10.0.0.1", 800, 56) == [
            "ping", "-c", "1", "-W", "800", "-s", "56", "10.0.0.1",
        ]

    def test_successful_reply(self, monkeypatch):
        calls = []

        def fake_run(command, **kwargs):
            calls.append((command, kwargs))
            return FakeCompleted(0, "64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=0.5 ms")

        monkeypatch.setattr(ping_module.subprocess, "run", fake_run)
        prober = PingProber(sleep=lambda s: None, system="Linux")

        assert prober.probe("10.0.0.1", 4, 1000, 32) == 4
        assert len(calls) == 4
        assert calls[0][1]["timeout"] == 3.0

    def test_non_zero_exit(self, monkeypatch):
        monkeypatch.setattr(ping_module.subprocess, "run", lambda command, **kw: FakeCompleted(1))
        prober = PingProber(sleep=lambda s: None, system="Linux")

        with pytest.raises(ProbeFailure):
            prober.attempt("10.0.0.1", 1000, 32)
        assert prober.probe("10.0.0.1", 4, 1000, 32) == 0

    def test_subprocess_timeout(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr(ping_module.subprocess, "run", fake_run)
        prober = PingProber(sleep=lambda s: None, system="Linux")
        assert prober.probe("10.0.0.1", 2, 1000, 32) == 0

    def test_missing_ping_binary(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise FileNotFoundError("ping")

        monkeypatch.setattr(ping_module.subprocess, "run", fake_run)
        prober = PingProber(sleep=lambda s: None, system="Linux")
        assert prober.probe("10.0.0.1", 2, 1000, 32) == 0

    def test_windows_unreachable_reply(self, monkeypatch):
        output = "Reply from 10.0.0.254: Destination host unreachable."
        monkeypatch.setattr(
            ping_module.subprocess, "run", lambda command, **kw: FakeCompleted(0, output)
        )
        prober = PingProber(sleep=lambda s: None, system="Windows")
        assert prober.probe("10.0.0.1", 1, 1000, 32) == 0

    def test_windows_echo_reply(self, monkeypatch):
        output = "Reply from 10.0.0.1: bytes=32 time<1ms TTL=128"
        monkeypatch.setattr(
            ping_module.subprocess, "run", lambda command, **kw: FakeCompleted(0, output)
        )
        prober = PingProber(sleep=lambda s: None, system="Windows")
        assert prober.probe("10.0.0.1", 1, 1000, 32) == 1

    def test_option_like_address_is_never_run(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            ping_module.subprocess, "run", lambda command, **kw: calls.append(command)
        )
        prober = PingProber(sleep=lambda s: None, system="Linux")

        with pytest.raises(ProbeFailure):
            prober.attempt("-f", 1000, 32)
        assert prober.probe("--help", 2, 1000, 32) == 0
        assert calls == []
