from __future__ import annotations

import errno
import logging
import socket
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from . import config
from .banner import grab_banner
from .errors import ConfigurationError
from .logger import log_event
from .models import (
    REASON_OPEN,
    REASON_REFUSED,
    REASON_TIMEOUT,
    REASON_UNREACHABLE,
    STATE_CLOSED,
    STATE_FILTERED,
    STATE_OPEN,
    HostScanResult,
    NetworkScanConfig,
    PortProbeOutcome,
)
from .ports import parse_port_spec, service_for_port
from .targets import expand_cidr, resolve_hostname

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Windows reports these through OSError.errno / winerror
_TIMEOUT_ERRNOS = {errno.ETIMEDOUT, 10060}
_REFUSED_ERRNOS = {errno.ECONNREFUSED, 10061}


def classify_connect_error(exc: OSError) -> Tuple[str, str]:
    """
    Maps a failed connect() to (state, reason).
    Exception type and errno are checked before falling back to the message
    text, which is locale and platform dependent.
    """
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return STATE_FILTERED, REASON_TIMEOUT
    if isinstance(exc, ConnectionRefusedError):
        return STATE_CLOSED, REASON_REFUSED

    code = getattr(exc, "winerror", None) or exc.errno
    if code in _TIMEOUT_ERRNOS:
        return STATE_FILTERED, REASON_TIMEOUT
    if code in _REFUSED_ERRNOS:
        return STATE_CLOSED, REASON_REFUSED

    text = str(exc).lower()
    if "timed out" in text or "timeout" in text:
        return STATE_FILTERED, REASON_TIMEOUT
    if "refused" in text:
        return STATE_CLOSED, REASON_REFUSED
    return STATE_FILTERED, REASON_UNREACHABLE


def probe_port(host: str, port: int, timeout: float,
               service_detection: bool = False) -> PortProbeOutcome:
    start = time.perf_counter()
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as e:
        elapsed = time.perf_counter() - start
        state, reason = classify_connect_error(e)
        logger.debug("%s:%d %s (%s)", host, port, state, e)
        return PortProbeOutcome(
            host=host,
            port=port,
            state=state,
            service=service_for_port(port),
            reason=reason,
            latency_s=round(elapsed, 4),
        )

    with sock:
        elapsed = time.perf_counter() - start
        service = service_for_port(port)
        banner = version = None
        if service_detection:
            service, banner, version = grab_banner(sock, timeout, service)

    logger.debug("%s:%d open service=%s", host, port, service)
    return PortProbeOutcome(
        host=host,
        port=port,
        state=STATE_OPEN,
        service=service,
        reason=REASON_OPEN,
        latency_s=round(elapsed, 4),
        banner=banner,
        version=version,
    )


def is_host_alive(host: str, timeout: float,
                  ports: Sequence[int] = config.LIVENESS_PORTS) -> bool:
    """
    TCP "ping": the host is alive if any of `ports` accepts a connection.
    A live host with all of them closed or filtered reports False.
    """
    for port in ports:
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            continue
    return False


def check_scan_params(timeout: float, threads: int) -> None:
    """Rejects settings that would fail or misbehave inside a worker."""
    if not timeout > 0:
        raise ConfigurationError(f"Timeout must be > 0 seconds (got {timeout})")
    if threads < 1:
        raise ConfigurationError(f"Threads must be >= 1 (got {threads})")


def run_worker_pool(func: Callable[[T], R], items: Iterable[T],
                    workers: int) -> Iterator[R]:
    """
    Runs func over items on exactly `workers` threads and yields results in
    completion order. Only a bounded window of futures is outstanding at any
    time, so large item sets are not materialised as futures up front.
    """
    if workers < 1:
        raise ConfigurationError(f"Worker count must be >= 1 (got {workers})")
    return _drain_pool(func, iter(items), workers)


def _drain_pool(func: Callable[[T], R], jobs: Iterator[T], workers: int) -> Iterator[R]:
    max_pending = workers * config.PENDING_PER_WORKER

    with ThreadPoolExecutor(max_workers=workers) as pool:
        pending = set()

        def submit_next() -> bool:
            try:
                item = next(jobs)
            except StopIteration:
                return False
            pending.add(pool.submit(func, item))
            return True

        # Prime the queue
        while len(pending) < max_pending and submit_next():
            pass

        while pending:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                yield fut.result()

            # Refill queue
            while len(pending) < max_pending and submit_next():
                pass


def scan_host(host: str, ports: Sequence[int], cfg: NetworkScanConfig) -> HostScanResult:
    """Liveness check, then a fan-out over `ports` keeping open ports only."""
    check_scan_params(cfg.timeout, cfg.threads)
    start = time.perf_counter()

    if not is_host_alive(host, cfg.timeout):
        logger.debug("%s did not answer on any liveness port", host)
        return HostScanResult(
            host=host,
            alive=False,
            total_ports=len(ports),
            elapsed_s=round(time.perf_counter() - start, 4),
        )

    hostname = resolve_hostname(host)

    def probe(port: int) -> PortProbeOutcome:
        return probe_port(host, port, cfg.timeout, cfg.service_detection)

    open_ports = [r for r in run_worker_pool(probe, ports, cfg.threads) if r.open]
    open_ports.sort(key=lambda r: r.port)

    return HostScanResult(
        host=host,
        alive=True,
        hostname=hostname,
        open_ports=tuple(open_ports),
        total_ports=len(ports),
        elapsed_s=round(time.perf_counter() - start, 4),
    )


def scan_network(cfg: NetworkScanConfig,
                 on_host: Optional[Callable[[HostScanResult], None]] = None) -> List[HostScanResult]:
    """
    Scans every host of cfg.network, at most HOST_CONCURRENCY at a time.
    Returns alive hosts in completion order.
    """
    hosts = expand_cidr(cfg.network)
    ports = parse_port_spec(cfg.port_range)
    if not ports:
        raise ConfigurationError(f"No valid ports in selector '{cfg.port_range}'")
    check_scan_params(cfg.timeout, cfg.threads)
    if cfg.os_detection:
        logger.info("OS detection requested but not supported; ignoring")

    log_event(logger, "network_scan_started", {
        "network": cfg.network,
        "hosts": len(hosts),
        "ports_per_host": len(ports),
        "threads": cfg.threads,
        "timeout_s": cfg.timeout,
    })
    start = time.perf_counter()

    def scan_one(host: str) -> HostScanResult:
        return scan_host(host, ports, cfg)

    results: List[HostScanResult] = []
    for result in run_worker_pool(scan_one, hosts, config.HOST_CONCURRENCY):
        if not result.alive:
            continue
        results.append(result)
        logger.info("%s - %d open port(s)", result.host, len(result.open_ports))
        if on_host is not None:
            on_host(result)

    log_event(logger, "network_scan_completed", {
        "network": cfg.network,
        "alive_hosts": len(results),
        "open_ports": sum(len(r.open_ports) for r in results),
        "elapsed_s": round(time.perf_counter() - start, 4),
    })
    return results
