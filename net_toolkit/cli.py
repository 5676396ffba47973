from __future__ import annotations

import argparse
import sys

from . import config
from .errors import ConfigurationError, IntrospectionError
from .listening import list_listening_ports
from .logger import create_logger
from .models import NetworkScanConfig, StealthScanConfig
from .output import (
    collect_outcomes,
    print_host_found,
    print_listening_ports,
    print_network_results,
    print_open_port,
    print_progress,
    print_stealth_header,
    print_stealth_report,
    save_results,
)
from .scanner import scan_network
from .stealth import full_scan_config, quick_scan_config, scan_host_stealthy

FORMATS = ["txt", "csv", "json", "html"]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="net-toolkit", description="Network Toolkit - TCP reconnaissance")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    p.add_argument("--log-file", help="Also write logs to this file")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("listening", help="List local listening TCP ports (like netstat -tln)")

    net = sub.add_parser("network", help="Sweep a CIDR block for live hosts and open ports")
    net.add_argument("network", help="CIDR block, e.g. 192.168.1.0/24")
    net.add_argument("--ports", default=config.DEFAULT_PORT_RANGE,
                     help="Port spec: all, 1-1024 or 22,80,443 (default: all)")
    net.add_argument("--threads", type=int, default=config.DEFAULT_THREADS,
                     help=f"Workers per host (default: {config.DEFAULT_THREADS})")
    net.add_argument("--timeout", type=float, default=config.DEFAULT_TIMEOUT_S,
                     help=f"Connect timeout seconds (default: {config.DEFAULT_TIMEOUT_S})")
    net.add_argument("--no-service-detection", action="store_true", help="Skip banner grabbing")
    net.add_argument("--format", choices=FORMATS, help="Save results to file")
    net.add_argument("--out-dir", default=config.DEFAULT_OUT_DIR, help="Output directory for saved files")

    st = sub.add_parser("stealth", help="Detailed open/closed/filtered scan of one host")
    st.add_argument("target", help="Target IP address")
    st.add_argument("--start", type=int, default=config.STEALTH_START_PORT, help="First port (inclusive)")
    st.add_argument("--end", type=int, default=config.STEALTH_END_PORT, help="Last port (inclusive)")
    st.add_argument("--threads", type=int, default=config.STEALTH_THREADS,
                    help=f"Thread count (default: {config.STEALTH_THREADS})")
    st.add_argument("--timeout", type=float, default=config.STEALTH_TIMEOUT_S,
                    help=f"Connect timeout seconds (default: {config.STEALTH_TIMEOUT_S})")
    st.add_argument("--no-service-detection", action="store_true", help="Skip banner grabbing")
    st.add_argument("--aggressive", action="store_true", help="Label the run as aggressive (T4) timing")
    preset = st.add_mutually_exclusive_group()
    preset.add_argument("--quick", action="store_true", help="Preset: ports 1-1024, 50 threads")
    preset.add_argument("--full", action="store_true", help="Preset: ports 1-65535")
    st.add_argument("--show-closed", action="store_true", help="List closed ports in the report")
    st.add_argument("--format", choices=FORMATS, help="Save results to file")
    st.add_argument("--out-dir", default=config.DEFAULT_OUT_DIR, help="Output directory for saved files")
    return p


def _run_listening(args: argparse.Namespace) -> int:
    print("[*] Looking up listening ports (run as administrator to see every process)")
    print_listening_ports(list_listening_ports())
    return 0


def _run_network(args: argparse.Namespace) -> int:
    cfg = NetworkScanConfig(
        network=args.network,
        port_range=args.ports,
        timeout=args.timeout,
        threads=args.threads,
        service_detection=not args.no_service_detection,
    )
    print(f"[*] Network: {cfg.network} | Ports: {cfg.port_range} | Threads: {cfg.threads} | Timeout: {cfg.timeout}s")
    results = scan_network(cfg, on_host=print_host_found)
    print_network_results(results)

    if args.format:
        path = save_results(collect_outcomes(results), fmt=args.format, out_dir=args.out_dir)
        print(f"Saved results to {path}")
    return 0


def _run_stealth(args: argparse.Namespace) -> int:
    if args.quick:
        cfg = quick_scan_config(args.target)
    elif args.full:
        cfg = full_scan_config(args.target, args.threads)
    else:
        cfg = StealthScanConfig(
            target_ip=args.target,
            start_port=args.start,
            end_port=args.end,
            timeout=args.timeout,
            threads=args.threads,
            service_detection=not args.no_service_detection,
            aggressive_timing=args.aggressive,
        )

    print_stealth_header(cfg)
    report = scan_host_stealthy(cfg, on_progress=print_progress, on_open=print_open_port)
    print_stealth_report(report, show_closed=args.show_closed)

    if args.format:
        path = save_results(report.results, fmt=args.format, out_dir=args.out_dir)
        print(f"Saved results to {path}")
    return 0


COMMANDS = {
    "listening": _run_listening,
    "network": _run_network,
    "stealth": _run_stealth,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    create_logger(args.log_level, args.log_file)

    try:
        return COMMANDS[args.command](args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except IntrospectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
