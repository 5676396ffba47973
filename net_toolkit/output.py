from __future__ import annotations

import csv
import html
import json
import os
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from . import config
from .models import (
    STATE_CLOSED,
    HostScanResult,
    ListeningPort,
    PortProbeOutcome,
    ScanProgress,
    StealthScanConfig,
    StealthScanReport,
)

WIDE = 90
NARROW = 80


def _truncate(s: Optional[str], width: int = 28) -> str:
    s = (s or "").replace("\r", " ").replace("\n", " ")
    if len(s) > width:
        return s[:width - 3] + "..."
    return s


def format_row(r: PortProbeOutcome) -> str:
    banner = r.banner or "null"
    return (
        f"Target: {r.host} | Port {r.port}: {r.state} ({r.latency_s:.4f}s) | "
        f"Service: {r.service} | Reason: {r.reason} | Banner: {_truncate(banner, 60)}"
    )


def print_progress(p: ScanProgress) -> None:
    print(f"[*] Progress: {p.percent:.0f}% ({p.scanned}/{p.total} ports scanned)", flush=True)


def print_open_port(r: PortProbeOutcome) -> None:
    print(f"[+] Port {r.port}/tcp\t{r.state}\t{r.service}", flush=True)


def print_host_found(r: HostScanResult) -> None:
    print(f"[+] {r.host} - {len(r.open_ports)} open port(s)", flush=True)


def print_network_results(results: Sequence[HostScanResult]) -> None:
    if not results:
        print("\nNo live hosts found on the network.")
        return

    print("\n" + "=" * NARROW)
    print("NETWORK SCAN REPORT")
    print("=" * NARROW + "\n")

    total_open = 0
    for host in results:
        name = f" ({host.hostname})" if host.hostname else ""
        print(f"HOST: {host.host}{name}")
        print(f"   Scan time: {host.elapsed_s:.3f}s")

        if not host.open_ports:
            print("   No open ports found\n")
            continue

        print(f"   Open ports: {len(host.open_ports)}\n")
        print(f"   {'PORT':<10} {'SERVICE':<20} {'BANNER':<30}")
        print("   " + "-" * 70)
        for port in host.open_ports:
            print(f"   {port.port:<10} {port.service:<20} {_truncate(port.banner):<30}")
            total_open += 1
        print()

    print("=" * NARROW)
    print("SUMMARY:")
    print(f"   Live hosts: {len(results)}")
    print(f"   Total open ports: {total_open}")
    print("=" * NARROW + "\n")


def print_stealth_header(cfg: StealthScanConfig) -> None:
    print(f"\nTARGET: {cfg.target_ip}")
    print(f"Scanning {cfg.total_ports} ports (range: {cfg.start_port}-{cfg.end_port})")
    print(f"Threads: {cfg.threads} | Timeout: {cfg.timeout}s | Timing: {cfg.timing_label}\n")


def print_stealth_report(report: StealthScanReport, show_closed: bool = False) -> None:
    print("\n" + "=" * WIDE)
    print("STEALTH SCAN REPORT")
    print("=" * WIDE)

    name = f" ({report.hostname})" if report.hostname else ""
    print(f"\nTARGET: {report.target}{name}")
    print(f"Scan date: {report.started_at.strftime('%Y-%m-%d %H:%M:%S %Z')}")
    print(f"Duration: {report.elapsed_s:.3f}s")

    print("\n" + "-" * WIDE)
    print("STATISTICS")
    print("-" * WIDE)
    print(f"Total ports scanned: {report.total_ports}")
    print(f"   Open:     {report.open_count}")
    print(f"   Closed:   {report.closed_count}")
    print(f"   Filtered: {report.filtered_count}")

    if report.open_count:
        print("\n" + "-" * WIDE)
        print("OPEN PORTS")
        print("-" * WIDE)
        print(f"{'PORT':<10} {'STATE':<10} {'SERVICE':<15} {'REASON':<24} {'VERSION/BANNER':<30}")
        print("-" * WIDE)
        for r in report.open_ports:
            version = r.version or r.banner
            print(f"{r.port:<10} {r.state:<10} {r.service:<15} {r.reason:<24} {_truncate(version):<30}")

    # A long filtered list usually means a firewall dropping everything
    if 0 < report.filtered_count <= 50:
        print("\n" + "-" * WIDE)
        print("FILTERED PORTS (possible firewall)")
        print("-" * WIDE)
        print(f"{'PORT':<10} {'STATE':<10} {'REASON':<24}")
        print("-" * WIDE)
        for r in report.filtered_ports[:20]:
            print(f"{r.port:<10} {r.state:<10} {r.reason:<24}")
        if report.filtered_count > 20:
            print(f"\n... and {report.filtered_count - 20} more filtered port(s)")

    if show_closed:
        closed = [r.port for r in report.results if r.state == STATE_CLOSED]
        if closed:
            print("\nClosed: " + ", ".join(str(p) for p in closed))

    print("\n" + "=" * WIDE)
    print("Scan complete.")
    print("=" * WIDE + "\n")


def print_listening_ports(ports: Sequence[ListeningPort]) -> None:
    if not ports:
        print("\nNo listening ports found.")
        return

    print("\n=== LISTENING PORTS ===")
    print(f"{'ADDRESS':<20} {'PORT':<10} {'STATE':<15} {'PID':<10} PROCESS")
    print("-" * 92)
    for p in ports:
        pid = p.pid if p.pid is not None else "-"
        print(f"{p.address:<20} {p.port:<10} {p.state:<15} {pid!s:<10} {p.process_name}")
    print(f"\nTotal: {len(ports)} listening port(s)")


def _as_dict(r: PortProbeOutcome) -> dict:
    return {
        "target": r.host,
        "port": r.port,
        "state": r.state,
        "service": r.service,
        "reason": r.reason,
        "latency_s": r.latency_s,
        "banner": r.banner,
        "version": r.version,
    }


def collect_outcomes(results: Iterable[HostScanResult]) -> List[PortProbeOutcome]:
    return [p for host in results for p in host.open_ports]


def save_results(
    results: Iterable[PortProbeOutcome],
    fmt: str,
    out_dir: str = config.DEFAULT_OUT_DIR,
    open_only: bool = False,
) -> str:
    os.makedirs(out_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(out_dir, f"{ts}_port_scan.{fmt}")

    rows = sorted(
        (r for r in results if r.open or not open_only),
        key=lambda x: (x.host, x.port),
    )
    open_count = sum(1 for r in rows if r.open)

    if fmt == "txt":
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"Found {open_count} open ports\n")
            for r in rows:
                f.write(format_row(r) + "\n")

    elif fmt == "csv":
        fields = ["target", "port", "state", "service", "reason", "latency_s", "banner", "version"]
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=fields)
            w.writeheader()
            for r in rows:
                w.writerow({k: ("" if v is None else v) for k, v in _as_dict(r).items()})

    elif fmt == "json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump([_as_dict(r) for r in rows], f, indent=2)

    elif fmt == "html":
        with open(path, "w", encoding="utf-8") as f:
            f.write("<html><body>\n")
            f.write("<h1>Port Scan Results</h1>\n")
            f.write(f"<p>Open ports: {open_count}</p>\n")
            f.write("<ul>\n")
            for r in rows:
                f.write(f"<li>{html.escape(format_row(r))}</li>\n")
            f.write("</ul>\n</body></html>\n")

    else:
        raise ValueError(f"Unsupported format: {fmt}")

    return path
