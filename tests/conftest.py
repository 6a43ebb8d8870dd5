import logging
import socket

import pytest

from connscan.logger import LOGGER_NAME


@pytest.fixture
def listener():
    """A listening TCP socket on loopback; yields its port."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind(("127.0.0.1", 0))
    srv.listen(128)
    try:
        yield srv.getsockname()[1]
    finally:
        srv.close()


@pytest.fixture
def refused_ports():
    """
    Ports held by bound but non-listening sockets, so a connect to any
    of them is refused for as long as the test runs.
    """
    held = []

    def _make(n):
        for _ in range(n):
            s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            s.bind(("127.0.0.1", 0))
            held.append(s)
        return [s.getsockname()[1] for s in held[-n:]]

    yield _make
    for s in held:
        s.close()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
