"""Daily digest assembly and rendering."""

from dataclasses import dataclass, field
from datetime import datetime

from jinja2 import Environment, select_autoescape

from host_availability_monitor.models import DATE_FORMAT, HostStatus, ProbeStatus, Snapshot


def is_valid_ipv4(text: str | None) -> bool:
    """Strict dotted-quad IPv4 check.

    Four dot-separated groups of ASCII digits, each in 0-255, with no
    leading zero unless the group is exactly "0".
    """
    if not text:
        return False
    groups = text.split(".")
    if len(groups) != 4:
        return False
    for group in groups:
        if not group or not (group.isascii() and group.isdigit()):
            return False
        if len(group) > 1 and group[0] == "0":
            return False
        if int(group) > 255:
            return False
    return True


@dataclass(frozen=True)
class Digest:
    """Read-only summary of a snapshot for the daily notification."""

    online: int
    partial: int
    offline: int
    total: int
    offline_hosts: tuple[HostStatus, ...] = ()
    invalid_hosts: tuple[HostStatus, ...] = ()
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def invalid(self) -> int:
        return len(self.invalid_hosts)

    @property
    def has_problems(self) -> bool:
        return bool(self.partial or self.offline or self.invalid_hosts)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, now: datetime | None = None) -> "Digest":
        return cls(
            online=snapshot.count(ProbeStatus.ONLINE),
            partial=snapshot.count(ProbeStatus.PARTIAL),
            offline=snapshot.count(ProbeStatus.OFFLINE),
            total=len(snapshot),
            offline_hosts=tuple(s for s in snapshot if s.status == ProbeStatus.OFFLINE),
            invalid_hosts=tuple(s for s in snapshot if not is_valid_ipv4(s.host.address)),
            generated_at=now or datetime.now(),
        )

    def summary_line(self) -> str:
        return (
            f"Online: {self.online} | Partial: {self.partial} | "
            f"Offline: {self.offline} | Invalid IP: {self.invalid} | Total: {self.total}"
        )


def _describe(status: HostStatus) -> str:
    host = status.host
    meta = ", ".join(v for v in (host.application, host.environment, host.type) if v)
    line = f"{host.name} ({host.address or 'no address'})"
    return f"{line} - {meta}" if meta else line


def format_digest_text(digest: Digest) -> str:
    """Format the digest as the multi-line notification message."""
    lines = [
        f"Server availability digest - {digest.generated_at.strftime(DATE_FORMAT)}",
        "",
        digest.summary_line(),
    ]

    if digest.offline_hosts:
        lines.append("")
        lines.append(f"Offline hosts ({digest.offline}):")
        for status in digest.offline_hosts:
            lines.append(f"  - {_describe(status)}")

    if digest.invalid_hosts:
        lines.append("")
        lines.append(f"Hosts with invalid IP addresses ({digest.invalid}):")
        for status in digest.invalid_hosts:
            lines.append(f"  - {_describe(status)}")

    if not digest.has_problems:
        lines.append("")
        lines.append("All hosts are online.")

    return "\n".join(lines)


DIGEST_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Server availability digest - {{ day }}</title>
<style>
body { font-family: Segoe UI, Arial, sans-serif; margin: 2em; }
table { border-collapse: collapse; margin-bottom: 1.5em; }
th, td { border: 1px solid #ccc; padding: 4px 10px; text-align: left; }
th { background: #f0f0f0; }
.online { color: #2e7d32; } .partial { color: #f9a825; } .offline { color: #c62828; }
</style>
</head>
<body>
<h1>Server availability digest - {{ day }}</h1>
<p>{{ digest.summary_line() }}</p>
<table>
<tr><th>Online</th><th>Partial</th><th>Offline</th><th>Invalid IP</th><th>Total</th></tr>
<tr>
<td class="online">{{ digest.online }}</td>
<td class="partial">{{ digest.partial }}</td>
<td class="offline">{{ digest.offline }}</td>
<td>{{ digest.invalid }}</td>
<td>{{ digest.total }}</td>
</tr>
</table>
{% for title, rows in sections %}
{% if rows %}
<h2>{{ title }} ({{ rows|length }})</h2>
<table>
<tr><th>Name</th><th>IP</th><th>Application</th><th>Environment</th><th>Type</th><th>Success %</th></tr>
{% for s in rows %}
<tr>
<td>{{ s.host.name }}</td>
<td>{{ s.host.address or "" }}</td>
<td>{{ s.host.application }}</td>
<td>{{ s.host.environment }}</td>
<td>{{ s.host.type }}</td>
<td>{{ s.success_percentage }}</td>
</tr>
{% endfor %}
</table>
{% endif %}
{% endfor %}
{% if not digest.has_problems %}
<p class="online">All hosts are online.</p>
{% endif %}
<p><small>Generated {{ digest.generated_at.strftime("%Y-%m-%d %H:%M:%S") }}</small></p>
</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
_template = _env.from_string(DIGEST_TEMPLATE)


def render_digest_html(digest: Digest) -> str:
    """Render the digest as a static HTML page."""
    return _template.render(
        digest=digest,
        day=digest.generated_at.strftime(DATE_FORMAT),
        sections=[
            ("Offline hosts", digest.offline_hosts),
            ("Hosts with invalid IP addresses", digest.invalid_hosts),
        ],
    )
