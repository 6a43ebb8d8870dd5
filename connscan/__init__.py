"""TCP connect scanner with a fixed worker pool and per-worker rate limiting."""

from .errors import ConfigError, ParseError, ScanError
from .models import Job, ScanConfig
from .ports import parse_ports
from .scanner import ScanController, ScanState, scan

__all__ = [
    "ConfigError",
    "Job",
    "ParseError",
    "ScanConfig",
    "ScanController",
    "ScanError",
    "ScanState",
    "parse_ports",
    "scan",
]

__version__ = "0.1.0"
