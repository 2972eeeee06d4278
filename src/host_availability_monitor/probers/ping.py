"""ICMP prober using the system ping command."""

import logging
import math
import platform
import subprocess
import time
from typing import Callable

from host_availability_monitor.exceptions import ProbeFailure
from host_availability_monitor.probers.base import BaseProber

logger = logging.getLogger(__name__)


class PingProber(BaseProber):
    """Probe hosts with one ICMP echo request per attempt."""

    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        system: str | None = None,
    ) -> None:
        super().__init__(sleep=sleep)
        self.system = (system or platform.system()).lower()

    def build_command(self, address: str, timeout_ms: int, payload_size: int) -> list[str]:
        """Build the ping command line for the current platform."""
        if self.system == "windows":
            return ["ping", "-n", "1", "-w", str(timeout_ms), "-l", str(payload_size), address]
        if self.system == "darwin":
            # macOS takes -W in milliseconds
            return ["ping", "-c", "1", "-W", str(timeout_ms), "-s", str(payload_size), address]
        # iputils takes -W in whole seconds
        timeout_s = max(1, math.ceil(timeout_ms / 1000))
        return ["ping", "-c", "1", "-W", str(timeout_s), "-s", str(payload_size), address]

    def attempt(self, address: str, timeout_ms: int, payload_size: int) -> None:
        # ping would parse a leading dash as an option
        if address.startswith("-"):
            raise ProbeFailure(f"refusing to ping option-like address {address!r}")
        command =self.build_command(address, timeout_ms, payload_size)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout_ms / 1000 + 2,
                check=False,
            )
        except FileNotFoundError:
            logger.error("ping command not found")
            raise ProbeFailure("ping command not found") from None
        except subprocess.TimeoutExpired:
            raise ProbeFailure(f"ping to {address} timed out") from None

        if result.returncode != 0:
            raise ProbeFailure(f"ping to {address} exited with {result.returncode}")
        # Windows ping exits 0 on "Destination host unreachable"
        if self.system == "windows" and "TTL=" not in result.stdout.upper():
            raise ProbeFailure(f"no echo reply from {address}")
