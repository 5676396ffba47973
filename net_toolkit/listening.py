from __future__ import annotations

import logging
from typing import List, Optional

import psutil

from .errors import IntrospectionError
from .models import UNKNOWN_SERVICE, ListeningPort

logger = logging.getLogger(__name__)


def _process_name(pid: Optional[int]) -> str:
    if not pid:
        return UNKNOWN_SERVICE
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return UNKNOWN_SERVICE


def list_listening_ports() -> List[ListeningPort]:
    """
    TCP endpoints in LISTEN state on this machine, read fresh on every call.
    Without elevated privileges some platforms hide other users' pids.
    """
    try:
        connections = psutil.net_connections(kind="tcp")
    except (psutil.AccessDenied, OSError) as e:
        raise IntrospectionError(f"Could not read TCP connection table: {e}") from e

    ports: List[ListeningPort] = []
    for conn in connections:
        if conn.status != psutil.CONN_LISTEN or not conn.laddr:
            continue
        ports.append(ListeningPort(
            address=conn.laddr.ip,
            port=conn.laddr.port,
            state=conn.status,
            pid=conn.pid,
            process_name=_process_name(conn.pid),
        ))

    logger.debug("found %d listening TCP endpoint(s)", len(ports))
    return ports


def listening_port_count() -> int:
    return len(list_listening_ports())


def is_port_listening(port: int) -> bool:
    return any(p.port == port for p in list_listening_ports())


def process_for_port(port: int) -> Optional[str]:
    """Name of the process listening on `port`, or None if nothing listens."""
    for p in list_listening_ports():
        if p.port == port:
            return p.process_name
    return None
