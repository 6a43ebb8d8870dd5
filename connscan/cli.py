from __future__ import annotations

import argparse
import logging
import sys

from .config import build_config
from .errors import ConfigError, ParseError
from .logger import setup_logging
from .output import START_LINE, print_open_port, print_results
from .ports import parse_ports
from .scanner import scan
from .targets import resolve_target

TRACE_VERBOSITY = 3


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors exit 1 like every other configuration error
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(prog="connscan", description="TCP connect port scanner")
    p.add_argument("host", help="Target hostname or IP")
    p.add_argument("-p", dest="ports", help="Port spec: 1-1024 or 22,80,443 or mixed (default: 1-65535)")
    p.add_argument("--min-packet-rate", help="Minimum packets per second per worker (default: 10000)")
    p.add_argument("--delay", help="Extra delay per job, e.g. 50ms or 1s (default: 0)")
    p.add_argument("--threads", help="Worker count (default: number of CPUs)")
    p.add_argument("--timeout", help="Connect timeout, e.g. 300ms (default: 300ms)")
    p.add_argument(
        "-v", dest="verbose", action="count", default=0,
        help="-v info logs, -vv debug logs, -vvv print each open port as found",
    )
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = build_config(
            min_packet_rate=args.min_packet_rate,
            delay=args.delay,
            threads=args.threads,
            timeout=args.timeout,
        )
        ports = parse_ports(args.ports or "", scan_all=not args.ports)
        host = resolve_target(args.host)
    except (ConfigError, ParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.getLogger(__name__).debug("config: %s", config)
    print(START_LINE, flush=True)

    trace = args.verbose >= TRACE_VERBOSITY
    open_ports = scan(host, ports, config, on_open=print_open_port if trace else None)

    if not trace:
        print_results(open_ports)
    return 0
