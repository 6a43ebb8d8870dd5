from __future__ import annotations

import ipaddress
import socket

from .errors import ConfigError


def resolve_target(target: str) -> str:
    """
    Supports:
      - IPv4 / IPv6 literal: "172.20.0.10", "::1"
      - Hostname: "webapp" (resolved once, first address wins)
    """
    target = target.strip()
    if not target:
        raise ConfigError("empty target")

    try:
        return str(ipaddress.ip_address(target))
    except ValueError:
        pass

    try:
        infos = socket.getaddrinfo(target, None, type=socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ConfigError(f"could not resolve target {target!r}: {e}") from e
    if not infos:
        raise ConfigError(f"could not resolve target {target!r}")
    return infos[0][4][0]
