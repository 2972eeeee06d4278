"""Host registry backed by a YAML file."""

import logging
from pathlib import Path
from typing import Any

import yaml

from host_availability_monitor.config import load_yaml_mapping
from host_availability_monitor.exceptions import ConfigurationError
from host_availability_monitor.models import Host

logger = logging.getLogger(__name__)


def hosts_from_dict(data: dict[str, Any]) -> list[Host]:
    """Build the ordered host list from a parsed registry document.

    ``hosts`` may be a mapping keyed by host identity or a list of entries
    carrying a ``name``. File order is kept either way.
    """
    entries = data.get("hosts") or {}
    hosts: list[Host] = []

    if isinstance(entries, dict):
        for key, entry in entries.items():
            if entry is not None and not isinstance(entry, dict):
                raise ConfigurationError(f"Host entry '{key}' must be a mapping")
            hosts.append(Host.from_dict(key, entry))
    elif isinstance(entries, list):
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ConfigurationError(f"Host entry #{index} must be a mapping")
            key = entry.get("key") or entry.get("name") or f"host-{index}"
            hosts.append(Host.from_dict(key, entry))
    else:
        raise ConfigurationError("'hosts' must be a mapping or a list")

    return hosts


class HostRegistry:
    """Static list of monitored targets.

    The file is read again on every ``load`` so edits are picked up at the
    next cycle start without restarting the process.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[Host]:
        hosts = hosts_from_dict(load_yaml_mapping(self.path))
        logger.debug(f"Loaded {len(hosts)} hosts from {self.path}")
        return hosts


class StaticRegistry:
    """In-memory registry, used by ``check`` previews and tests."""

    def __init__(self, hosts: list[Host]) -> None:
        self.hosts = list(hosts)

    def load(self) -> list[Host]:
        return list(self.hosts)


def save_registry(hosts: list[Host], path: str | Path) -> None:
    """Write hosts to a YAML registry file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {"hosts": {}}
    for host in hosts:
        entry: dict[str, Any] = {"name": host.name}
        if host.address is not None:
            entry["ip"] = host.address
        for attr in ("application", "environment", "type"):
            value = getattr(host, attr)
            if value:
                entry[attr] = value
        data["hosts"][host.key] = entry

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def create_example_registry() -> list[Host]:
    """Create example hosts for documentation."""
    return [
        Host(
            key="web-01",
            name="Web 01",
            address="192.168.1.10",
            application="Shop",
            environment="Production",
            type="VM",
        ),
        Host(
            key="db-01",
            name="DB 01",
            address="192.168.1.20",
            application="Shop",
            environment="Production",
            type="Physical",
        ),
        Host(
            key="build-agent",
            name="Build Agent",
            address="192.168.1.30",
            application="CI",
            environment="Staging",
            type="VM",
        ),
    ]
