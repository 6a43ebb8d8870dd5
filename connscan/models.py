from __future__ import annotations

import os
from dataclasses import dataclass, field

from .errors import ConfigError

MIN_PORT = 1
MAX_PORT = 65535

DEFAULT_MIN_PACKET_RATE = 10000
DEFAULT_CONNECT_TIMEOUT = 0.3


def default_worker_count() -> int:
    return os.cpu_count() or 1


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class Job:
    host: str
    port: int

    def __post_init__(self):
        # the socket layer wraps out-of-range ports instead of rejecting them
        if not _is_positive_int(self.port) or self.port > MAX_PORT:
            raise ValueError(f"invalid port: {self.port!r}")


@dataclass(frozen=True)
class ScanConfig:
    """
    Read-only settings shared by every worker.
    Delays and timeouts are in seconds.
    """

    min_packet_rate: int = DEFAULT_MIN_PACKET_RATE
    inter_job_delay: float = 0.0
    worker_count: int = field(default_factory=default_worker_count)
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    def __post_init__(self):
        if not _is_positive_int(self.min_packet_rate):
            raise ConfigError(f"invalid minimum packet rate: {self.min_packet_rate!r}")
        if not _is_positive_int(self.worker_count):
            raise ConfigError(f"invalid number of threads: {self.worker_count!r}")
        if self.inter_job_delay < 0:
            raise ConfigError(f"invalid delay duration: {self.inter_job_delay!r}")
        if self.connect_timeout <= 0:
            raise ConfigError(f"invalid connect timeout: {self.connect_timeout!r}")

    @property
    def packet_delay(self) -> float:
        return 1.0 / self.min_packet_rate
