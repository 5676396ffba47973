from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from . import config

STATE_OPEN = "open"
STATE_CLOSED = "closed"
STATE_FILTERED = "filtered"
PORT_STATES = (STATE_OPEN, STATE_CLOSED, STATE_FILTERED)

# Scanner-style labels. Every probe is a full connect; "syn-ack" only names
# the successful handshake.
REASON_OPEN = "syn-ack"
REASON_REFUSED = "connection refused"
REASON_TIMEOUT = "no response (timeout)"
REASON_UNREACHABLE = "host unreachable"

UNKNOWN_SERVICE = "Unknown"


@dataclass(frozen=True)
class PortProbeOutcome:
    host: str
    port: int
    state: str
    service: str
    reason: str
    latency_s: float
    banner: Optional[str] = None
    version: Optional[str] = None

    @property
    def open(self) -> bool:
        return self.state == STATE_OPEN


@dataclass(frozen=True)
class HostScanResult:
    host: str
    alive: bool
    total_ports: int
    elapsed_s: float
    hostname: Optional[str] = None
    open_ports: Tuple[PortProbeOutcome, ...] = ()


@dataclass(frozen=True)
class StealthScanReport:
    target: str
    total_ports: int
    open_count: int
    closed_count: int
    filtered_count: int
    results: Tuple[PortProbeOutcome, ...]
    elapsed_s: float
    started_at: datetime
    hostname: Optional[str] = None

    @property
    def open_ports(self) -> Tuple[PortProbeOutcome, ...]:
        return tuple(r for r in self.results if r.state == STATE_OPEN)

    @property
    def filtered_ports(self) -> Tuple[PortProbeOutcome, ...]:
        return tuple(r for r in self.results if r.state == STATE_FILTERED)


@dataclass(frozen=True)
class ScanProgress:
    scanned: int
    total: int
    open_count: int

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return self.scanned / self.total * 100


@dataclass(frozen=True)
class ListeningPort:
    address: str
    port: int
    state: str
    pid: Optional[int]
    process_name: str


@dataclass(frozen=True)
class NetworkScanConfig:
    network: str
    port_range: str = config.DEFAULT_PORT_RANGE
    timeout: float = config.DEFAULT_TIMEOUT_S
    threads: int = config.DEFAULT_THREADS
    service_detection: bool = True
    # Accepted for compatibility; no OS fingerprinting is performed.
    os_detection: bool = False


@dataclass(frozen=True)
class StealthScanConfig:
    target_ip: str
    start_port: int = config.STEALTH_START_PORT
    end_port: int = config.STEALTH_END_PORT
    timeout: float = config.STEALTH_TIMEOUT_S
    threads: int = config.STEALTH_THREADS
    service_detection: bool = True
    aggressive_timing: bool = False

    @property
    def total_ports(self) -> int:
        return self.end_port - self.start_port + 1

    @property
    def timing_label(self) -> str:
        return "Aggressive (T4)" if self.aggressive_timing else "Normal (T3)"
