"""Reachability probers."""

from host_availability_monitor.probers.base import BaseProber
from host_availability_monitor.probers.ping import PingProber

__all__ = ["BaseProber", "PingProber"]
