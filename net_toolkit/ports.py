from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from .models import UNKNOWN_SERVICE

MIN_PORT = 1
MAX_PORT = 65535

# Read-only after import; shared by every worker thread.
COMMON_SERVICES: Mapping[int, str] = MappingProxyType({
    20: "FTP-DATA",
    21: "FTP",
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    80: "HTTP",
    110: "POP3",
    143: "IMAP",
    443: "HTTPS",
    445: "SMB",
    3306: "MySQL",
    3389: "RDP",
    5432: "PostgreSQL",
    5900: "VNC",
    6379: "Redis",
    8080: "HTTP-Proxy",
    8443: "HTTPS-Alt",
    27017: "MongoDB",
})

EXTRA_PORTS: Tuple[int, ...] = (8000, 8008, 8888, 9090, 9200, 9300)

PORT_BANDS: Tuple[Tuple[str, int, int], ...] = (
    ("well-known", 1, 1024),
    ("registered", 1025, 49151),
    ("dynamic", 49152, 65535),
)


def service_for_port(port: int) -> str:
    return COMMON_SERVICES.get(port, UNKNOWN_SERVICE)


def default_ports() -> List[int]:
    return sorted(set(COMMON_SERVICES) | set(EXTRA_PORTS))


def common_port_ranges() -> List[str]:
    """Port bands as "start-end" selectors, well-known first."""
    return [f"{start}-{end}" for _name, start, end in PORT_BANDS]


def _to_port(token: str) -> Optional[int]:
    try:
        port = int(token.strip())
    except ValueError:
        return None
    if MIN_PORT <= port <= MAX_PORT:
        return port
    return None


def parse_port_spec(spec: Optional[str]) -> List[int]:
    """
    Parses a port selector into an ordered list of unique ports.
    Supports:
    - "" or "all": curated common ports, ascending
    - Ranges: "1-1024" (inclusive, start <= end)
    - Comma-separated: "22,80,443" (input order kept, bad entries dropped)
    - Single ports: "80"
    Never raises; a malformed selector yields an empty list.
    """
    spec = (spec or "").strip()
    if not spec or spec.lower() == "all":
        return default_ports()

    if "-" in spec:
        parts = spec.split("-")
        if len(parts) != 2:
            return []
        try:
            start = int(parts[0].strip())
            end = int(parts[1].strip())
        except ValueError:
            return []
        if not (MIN_PORT <= start <= end <= MAX_PORT):
            return []
        return list(range(start, end + 1))

    if "," in spec:
        ports: List[int] = []
        seen = set()
        for part in spec.split(","):
            port = _to_port(part)
            if port is None or port in seen:
                continue
            seen.add(port)
            ports.append(port)
        return ports

    port = _to_port(spec)
    return [port] if port is not None else []
