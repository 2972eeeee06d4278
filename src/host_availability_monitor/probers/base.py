"""Base prober interface."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

from host_availability_monitor.exceptions import ConfigurationError, ProbeFailure

logger = logging.getLogger(__name__)

# Pause between two attempts against the same address.
ATTEMPT_DELAY_SECONDS = 0.1


class BaseProber(ABC):
    """Abstract base class for reachability probers.

    Subclasses implement a single ``attempt``; ``probe`` runs the attempt
    budget and counts successes.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep) -> None:
        self._sleep = sleep

    @abstractmethod
    def attempt(self, address: str, timeout_ms: int, payload_size: int) -> None:
        """Run one probe attempt.

        Args:
            address: Target address.
            timeout_ms: Timeout for this attempt in milliseconds.
            payload_size: Probe payload size in bytes.

        Raises:
            ProbeFailure: If the attempt did not succeed.
        """
        ...

    def probe(
        self,
        address: str,
        attempts: int,
        timeout_ms: int,
        payload_size: int,
    ) -> int:
        """Probe an address ``attempts`` times.

        Args:
            address: Target address.
            attempts: Number of independent attempts (must be >= 1).
            timeout_ms: Per-attempt timeout in milliseconds.
            payload_size: Probe payload size in bytes.

        Returns:
            Number of successful attempts.

        Raises:
            ConfigurationError: If the attempt budget, timeout or payload
                size is invalid.
        """
        if attempts < 1:
            raise ConfigurationError(f"Attempt budget must be >= 1, got {attempts}")
        if timeout_ms < 1:
            raise ConfigurationError(f"Timeout must be >= 1 ms, got {timeout_ms}")
        if payload_size < 0:
            raise ConfigurationError(f"Payload size must be >= 0, got {payload_size}")

        successes = 0
        for i in range(attempts):
            if i:
                self._sleep(ATTEMPT_DELAY_SECONDS)
            try:
                self.attempt(address, timeout_ms, payload_size)
            except (ProbeFailure, OSError) as e:
                logger.debug(f"Probe {i + 1}/{attempts} to {address} failed: {e}")
                continue
            successes += 1

        if successes < attempts:
            logger.warning(f"{address}: {successes}/{attempts} probes succeeded")
        return successes
