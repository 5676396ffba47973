from __future__ import annotations

import ipaddress
import socket
from typing import List, Optional

from . import config
from .errors import ConfigurationError


def expand_cidr(cidr: str) -> List[str]:
    """
    Expands a network block into host addresses, in address order.
      - "10.0.0.0/30" -> ["10.0.0.1", "10.0.0.2"]
      - "10.0.0.5/31" -> ["10.0.0.4", "10.0.0.5"] (two addresses, kept as is)
      - "10.0.0.5/32" -> ["10.0.0.5"]
    Host bits are masked off, so "192.168.1.77/24" covers 192.168.1.0/24.
    """
    cidr = (cidr or "").strip()
    if "/" not in cidr:
        raise ConfigurationError(f"Invalid CIDR '{cidr}': expected address/prefix")

    try:
        net = ipaddress.ip_network(cidr, strict=False)
    except ValueError as e:
        raise ConfigurationError(f"Invalid CIDR '{cidr}': {e}") from e

    if net.num_addresses > config.MAX_NETWORK_ADDRESSES:
        raise ConfigurationError(
            f"Network '{cidr}' has {net.num_addresses} addresses; "
            f"at most {config.MAX_NETWORK_ADDRESSES} can be scanned"
        )

    hosts = [str(ip) for ip in net]
    # drop network + broadcast, but only when something is left afterwards
    if len(hosts) > 2:
        hosts = hosts[1:-1]
    return hosts


def validate_target_ip(target: str) -> str:
    """Returns the normalised address or raises ConfigurationError."""
    target = (target or "").strip()
    try:
        return str(ipaddress.ip_address(target))
    except ValueError as e:
        raise ConfigurationError(f"Invalid IP address: '{target}'") from e


def resolve_hostname(ip: str) -> Optional[str]:
    """Best-effort reverse lookup; None when the address has no PTR record."""
    try:
        name, _aliases, _addrs = socket.gethostbyaddr(ip)
    except (socket.herror, socket.gaierror, OSError):
        return None
    return name or None
