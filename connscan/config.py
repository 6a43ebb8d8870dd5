"""
Turns raw command-line strings into a ScanConfig.

Durations follow the Go time.ParseDuration syntax the scanner has always
accepted on the command line: "0", "300ms", "1.5s", "1m30s", "2h".
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import ConfigError
from .models import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MIN_PACKET_RATE,
    ScanConfig,
    default_worker_count,
)

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# longest unit first so "ms" wins over "m"
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Returns the duration in seconds."""
    s = text.strip()
    if not s:
        raise ConfigError("invalid duration: empty")

    sign = 1.0
    if s[0] in "+-":
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]

    if s == "0":
        return 0.0

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _COMPONENT.match(s, pos)
        if not m:
            raise ConfigError(f"invalid duration: {text!r}")
        total += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()

    if pos == 0:
        raise ConfigError(f"invalid duration: {text!r}")
    return sign * total


def _parse_positive_int(raw: str, what: str) -> int:
    try:
        value = int(raw.strip())
    except (AttributeError, ValueError):
        raise ConfigError(f"invalid {what}: {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"invalid {what}: {raw!r}")
    return value


def build_config(
    min_packet_rate: Optional[str] = None,
    delay: Optional[str] = None,
    threads: Optional[str] = None,
    timeout: Optional[str] = None,
) -> ScanConfig:
    rate = DEFAULT_MIN_PACKET_RATE
    if min_packet_rate is not None:
        rate = _parse_positive_int(min_packet_rate, "minimum packet rate")

    inter_job_delay = 0.0
    if delay is not None:
        inter_job_delay = parse_duration(delay)
        if inter_job_delay < 0:
            raise ConfigError(f"invalid delay duration: {delay!r}")

    workers = default_worker_count()
    if threads is not None:
        workers = _parse_positive_int(threads, "number of threads")

    connect_timeout = DEFAULT_CONNECT_TIMEOUT
    if timeout is not None:
        connect_timeout = parse_duration(timeout)
        if connect_timeout <= 0:
            raise ConfigError(f"invalid connect timeout: {timeout!r}")

    return ScanConfig(
        min_packet_rate=rate,
        inter_job_delay=inter_job_delay,
        worker_count=workers,
        connect_timeout=connect_timeout,
    )
