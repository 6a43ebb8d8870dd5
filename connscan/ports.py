from __future__ import annotations

import re
from typing import List

from .errors import ParseError
from .models import MAX_PORT, MIN_PORT

_NUMBER = re.compile(r"[0-9]+")


def _to_port(text: str, what: str, token: str) -> int:
    text = text.strip()
    if not _NUMBER.fullmatch(text):
        raise ParseError(f"invalid {what}: {text!r} in {token!r}", token=token)
    port = int(text)
    if port < MIN_PORT or port > MAX_PORT:
        raise ParseError(f"port out of range: {port} in {token!r}", token=token)
    return port


def parse_ports(spec: str, scan_all: bool = False) -> List[int]:
    """
    Parses a port specification string into a list of ports.
    Supports:
    - Single ports: "80"
    - Ranges: "1-1024" (inclusive; a reversed range expands to nothing)
    - Comma-separated: "22,80,443"
    - Mixed: "1-1024,8080,9000-9005"

    Token order is preserved and duplicates are kept. With scan_all the
    spec is ignored and every port from 1 to 65535 is returned.
    """
    if scan_all:
        return list(range(MIN_PORT, MAX_PORT + 1))

    ports: List[int] = []
    for token in spec.split(","):
        if "-" in token:
            parts = token.split("-")
            if len(parts) != 2:
                raise ParseError(f"invalid port range format: {token!r}", token=token)
            start = _to_port(parts[0], "start of port range", token)
            end = _to_port(parts[1], "end of port range", token)
            ports.extend(range(start, end + 1))
        else:
            ports.append(_to_port(token, "port number", token))

    return ports
