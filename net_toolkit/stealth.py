"""
Single-host scanning that keeps every port state.

"Stealth" follows scanner naming for a detailed per-host sweep. Probes are
ordinary full TCP connects and need no privileges.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from . import config
from .errors import ConfigurationError
from .logger import log_event
from .models import (
    PORT_STATES,
    STATE_CLOSED,
    STATE_FILTERED,
    STATE_OPEN,
    PortProbeOutcome,
    ScanProgress,
    StealthScanConfig,
    StealthScanReport,
)
from .ports import MAX_PORT, MIN_PORT
from .scanner import check_scan_params, probe_port, run_worker_pool
from .targets import resolve_hostname, validate_target_ip

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], None]
OpenPortCallback = Callable[[PortProbeOutcome], None]


def progress_interval(total: int) -> int:
    """Every 5% of the ports, but never fewer than PROGRESS_MIN_BATCH."""
    return max(total // 20, config.PROGRESS_MIN_BATCH)


def _validate(cfg: StealthScanConfig) -> str:
    target = validate_target_ip(cfg.target_ip)
    if not (MIN_PORT <= cfg.start_port <= cfg.end_port <= MAX_PORT):
        raise ConfigurationError(
            f"Invalid port range {cfg.start_port}-{cfg.end_port}: "
            f"need {MIN_PORT} <= start <= end <= {MAX_PORT}"
        )
    check_scan_params(cfg.timeout, cfg.threads)
    return target


def scan_host_stealthy(cfg: StealthScanConfig,
                       on_progress: Optional[ProgressCallback] = None,
                       on_open: Optional[OpenPortCallback] = None) -> StealthScanReport:
    target = _validate(cfg)
    started_at = datetime.now(timezone.utc)
    hostname = resolve_hostname(target)
    total = cfg.total_ports

    log_event(logger, "stealth_scan_started", {
        "target": target,
        "hostname": hostname,
        "ports": f"{cfg.start_port}-{cfg.end_port}",
        "threads": cfg.threads,
        "timeout_s": cfg.timeout,
        "timing": cfg.timing_label,
    })
    start = time.perf_counter()

    def probe(port: int) -> PortProbeOutcome:
        return probe_port(target, port, cfg.timeout, cfg.service_detection)

    counts = dict.fromkeys(PORT_STATES, 0)
    results: List[PortProbeOutcome] = []
    interval = progress_interval(total)

    for result in run_worker_pool(probe, range(cfg.start_port, cfg.end_port + 1), cfg.threads):
        results.append(result)
        counts[result.state] += 1

        if result.open and on_open is not None:
            on_open(result)

        if len(results) % interval == 0:
            progress = ScanProgress(scanned=len(results), total=total,
                                    open_count=counts[STATE_OPEN])
            logger.debug("progress %.0f%% (%d/%d)", progress.percent, progress.scanned, total)
            if on_progress is not None:
                on_progress(progress)

    results.sort(key=lambda r: r.port)
    elapsed = round(time.perf_counter() - start, 4)

    log_event(logger, "stealth_scan_completed", {
        "target": target,
        "open": counts[STATE_OPEN],
        "closed": counts[STATE_CLOSED],
        "filtered": counts[STATE_FILTERED],
        "elapsed_s": elapsed,
    })

    return StealthScanReport(
        target=target,
        hostname=hostname,
        total_ports=total,
        open_count=counts[STATE_OPEN],
        closed_count=counts[STATE_CLOSED],
        filtered_count=counts[STATE_FILTERED],
        results=tuple(results),
        elapsed_s=elapsed,
        started_at=started_at,
    )


def quick_scan_config(target_ip: str) -> StealthScanConfig:
    """Well-known ports only, aggressive timing."""
    return StealthScanConfig(
        target_ip=target_ip,
        start_port=1,
        end_port=1024,
        timeout=1.0,
        threads=50,
        service_detection=True,
        aggressive_timing=True,
    )


def full_scan_config(target_ip: str, threads: int) -> StealthScanConfig:
    return StealthScanConfig(
        target_ip=target_ip,
        start_port=MIN_PORT,
        end_port=MAX_PORT,
        timeout=1.0,
        threads=threads,
        service_detection=True,
        aggressive_timing=True,
    )


def quick_scan_host(target_ip: str, **callbacks) -> StealthScanReport:
    return scan_host_stealthy(quick_scan_config(target_ip), **callbacks)


def full_scan_host(target_ip: str, threads: int, **callbacks) -> StealthScanReport:
    return scan_host_stealthy(full_scan_config(target_ip, threads), **callbacks)
