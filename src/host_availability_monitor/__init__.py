"""Host Availability Monitor - periodic ping monitoring with a daily digest.

Probes a registry of servers on a fixed cadence, writes the per-host status
to a JSON file every cycle and posts a once-a-day digest to a webhook.
"""

__version__ = "1.0.0"

from host_availability_monitor.config import Settings
from host_availability_monitor.models import Host, HostStatus, ProbeStatus, Snapshot
from host_availability_monitor.monitor import HostMonitor, create_monitor

__all__ = [
    "Settings",
    "Host",
    "HostStatus",
    "ProbeStatus",
    "Snapshot",
    "HostMonitor",
    "create_monitor",
]
