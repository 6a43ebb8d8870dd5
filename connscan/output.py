from __future__ import annotations

from typing import Iterable, List

START_LINE = "Checking for available ports..."


def format_open_port(port: int) -> str:
    return f"Port {port} is open"


def format_results(open_ports: Iterable[int]) -> List[str]:
    ports = sorted(set(open_ports))
    return [
        f"Found {len(ports)} open ports",
        f"Ports available: [{', '.join(str(p) for p in ports)}]",
    ]


def print_open_port(port: int) -> None:
    print(format_open_port(port), flush=True)


def print_results(open_ports: Iterable[int]) -> None:
    for line in format_results(open_ports):
        print(line)
