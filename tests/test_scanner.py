import collections
import queue
import threading
import time

import pytest

from connscan.aggregator import ResultAggregator
from connscan.dispatcher import JobDispatcher, build_jobs
from connscan.errors import ScanError
from connscan.models import Job, ScanConfig
from connscan.scanner import ScanController, ScanState, ScanWorkerPool, probe_port, scan

FAST = 1_000_000


class RecordingProbe:
    """Fake connect: records every call, ports divisible by 7 are open."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, host, port, timeout_s):
        with self._lock:
            self.calls.append((host, port))
        return port % 7 == 0


def fast_config(workers, **kwargs):
    kwargs.setdefault("min_packet_rate", FAST)
    kwargs.setdefault("connect_timeout", 0.5)
    return ScanConfig(worker_count=workers, **kwargs)


def test_build_jobs_one_per_port_in_order():
    assert build_jobs("h", [80, 22, 80]) == [Job("h", 80), Job("h", 22), Job("h", 80)]


def test_dispatch_blocks_when_queue_is_full():
    q = queue.Queue(maxsize=2)
    dispatcher = JobDispatcher(q)
    done = threading.Event()

    def run():
        dispatcher.dispatch(build_jobs("h", [1, 2, 3]))
        done.set()

    t = threading.Thread(target=run, daemon=True)
    t.start()
    assert not done.wait(0.2)
    assert q.qsize() == 2

    q.get()
    assert done.wait(2)
    assert q.unfinished_tasks == 3
    t.join()


@pytest.mark.parametrize("n, workers", [
    (0, 1), (0, 4), (1, 1), (5, 16), (100, 1), (100, 4), (500, 64),
])
def test_every_job_completes_exactly_once(n, workers):
    probe = RecordingProbe()
    ports = list(range(1, n + 1))
    controller = ScanController(fast_config(workers), probe=probe)

    result = controller.run("h", ports)

    assert controller.dispatched == n
    assert controller.results.scanned == n
    assert collections.Counter(p for _, p in probe.calls) == collections.Counter(ports)
    assert result == [p for p in ports if p % 7 == 0]


def test_controller_walks_states_and_runs_once():
    controller = ScanController(fast_config(2), probe=RecordingProbe())
    assert controller.state is ScanState.IDLE
    controller.run("h", [7, 8])
    assert controller.state is ScanState.COMPLETED
    with pytest.raises(RuntimeError):
        controller.run("h", [7])


def test_on_open_called_for_each_open_port():
    seen = []
    lock = threading.Lock()

    def on_open(port):
        with lock:
            seen.append(port)

    result = scan("h", range(1, 50), fast_config(4), on_open=on_open, probe=RecordingProbe())
    assert sorted(seen) == result == [7, 14, 21, 28, 35, 42, 49]


def test_unexpected_probe_error_raises_after_drain():
    def broken(host, port, timeout_s):
        if port == 3:
            raise OverflowError("bad port")
        return False

    controller = ScanController(fast_config(2), probe=broken)
    with pytest.raises(ScanError):
        controller.run("h", [1, 2, 3, 4, 5])
    assert controller.state is ScanState.COMPLETED
    assert controller.results.scanned == 4


def test_rate_limit_applies_per_job():
    n, workers = 20, 4
    config = ScanConfig(
        min_packet_rate=100, inter_job_delay=0.02, worker_count=workers, connect_timeout=0.5,
    )
    start = time.perf_counter()
    scan("h", range(1, n + 1), config, probe=lambda h, p, t: False)
    elapsed = time.perf_counter() - start

    lower = (n / workers) * (config.packet_delay + config.inter_job_delay)
    assert elapsed >= lower * 0.95


def test_pool_start_twice_raises():
    q = queue.Queue(maxsize=1)
    pool = ScanWorkerPool(fast_config(1), q, ResultAggregator(), probe=RecordingProbe())
    pool.start()
    try:
        with pytest.raises(RuntimeError):
            pool.start()
    finally:
        pool.close()


def test_probe_port_open_and_refused(listener, refused_ports):
    assert probe_port("127.0.0.1", listener, 1.0) is True
    (closed,) = refused_ports(1)
    assert probe_port("127.0.0.1", closed, 1.0) is False


def test_all_refused_host_yields_nothing(refused_ports):
    ports = refused_ports(20)
    assert scan("127.0.0.1", ports, fast_config(4)) == []


@pytest.mark.parametrize("workers", [1, 4, 64])
def test_single_listener_found_regardless_of_workers(listener, refused_ports, workers):
    ports = refused_ports(30)
    ports.insert(len(ports) // 2, listener)
    assert scan("127.0.0.1", ports, fast_config(workers)) == [listener]


@pytest.mark.parametrize("port", [0, 70000, -1, True])
def test_job_rejects_invalid_port(port):
    with pytest.raises(ValueError):
        Job("h", port)


@pytest.mark.parametrize("port", [0, 70000])
def test_out_of_range_port_fails_before_any_probe(port):
    probe = RecordingProbe()
    controller = ScanController(fast_config(2), probe=probe)
    with pytest.raises(ValueError):
        controller.run("h", [22, port])
    assert probe.calls == []
    assert controller.state is ScanState.IDLE


def test_rate_limit_applies_when_on_open_fails():
    def on_open(port):
        raise BrokenPipeError("stdout closed")

    config = ScanConfig(min_packet_rate=20, worker_count=1, connect_timeout=0.5)
    start = time.perf_counter()
    with pytest.raises(ScanError):
        scan("h", [7, 14, 21, 28], config, on_open=on_open, probe=RecordingProbe())
    elapsed = time.perf_counter() - start

    assert elapsed >= 4 * config.packet_delay * 0.95


def test_all_workers_consume_at_once():
    workers = 4
    barrier = threading.Barrier(workers, timeout=5)

    def rendezvous(host, port, timeout_s):
        # only returns once every worker holds a job
        barrier.wait()
        return True

    result = scan("h", range(1, workers + 1), fast_config(workers), probe=rendezvous)
    assert result == [1, 2, 3, 4]
