from __future__ import annotations

import enum
import logging
import queue
import socket
import threading
import time
from typing import Callable, Iterable, List, Optional

from .aggregator import ResultAggregator
from .dispatcher import JobDispatcher, build_jobs
from .errors import ScanError
from .models import Job, ScanConfig

logger = logging.getLogger(__name__)

Probe = Callable[[str, int, float], bool]
OpenCallback = Callable[[int], None]

DEFAULT_PROGRESS_EVERY = 5000


def probe_port(host: str, port: int, timeout_s: float) -> bool:
    """Full TCP handshake, no payload. Any socket error means not open."""
    try:
        sock = socket.create_connection((host, port), timeout=timeout_s)
    except OSError as e:
        logger.debug("%s:%d not open (%s)", host, port, e)
        return False
    sock.close()
    return True


class ScanWorkerPool:
    """
    Fixed set of worker threads draining the shared job queue.

    Each job costs a connect attempt, then 1/min_packet_rate seconds, then
    inter_job_delay seconds, whatever the outcome. The delay is per worker,
    so the aggregate rate is worker_count / (packet_delay + inter_job_delay).
    """

    def __init__(
        self,
        config: ScanConfig,
        work_queue: "queue.Queue[Optional[Job]]",
        results: ResultAggregator,
        probe: Probe = probe_port,
        on_open: Optional[OpenCallback] = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        total: int = 0,
    ):
        self.config = config
        self.queue = work_queue
        self.results = results
        self.probe = probe
        self.on_open = on_open
        self.progress_every = progress_every
        self.total = total
        self.errors: List[BaseException] = []
        self._errors_lock = threading.Lock()
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for i in range(self.config.worker_count):
            t = threading.Thread(target=self._work, name=f"scan-worker-{i}", daemon=True)
            t.start()
            self._threads.append(t)

    def close(self) -> None:
        # one sentinel per worker; a worker exits when it takes one
        for _ in self._threads:
            self.queue.put(None)
        for t in self._threads:
            t.join()
        self._threads = []

    def _work(self) -> None:
        packet_delay = self.config.packet_delay
        delay = self.config.inter_job_delay

        while True:
            job = self.queue.get()
            if job is None:
                self.queue.task_done()
                return

            try:
                try:
                    self._handle(job)
                finally:
                    time.sleep(packet_delay)
                    if delay > 0:
                        time.sleep(delay)
            except Exception as e:
                logger.exception("worker failed on %s:%d", job.host, job.port)
                with self._errors_lock:
                    self.errors.append(e)
            finally:
                self.queue.task_done()

    def _handle(self, job: Job) -> None:
        if self.probe(job.host, job.port, self.config.connect_timeout):
            self.results.record_open(job.port)
            logger.debug("port %d is open", job.port)
            if self.on_open is not None:
                self.on_open(job.port)

        scanned = self.results.record_scanned()
        if self.progress_every > 0 and (scanned % self.progress_every == 0 or scanned == self.total):
            logger.info("scanned %d/%d ports", scanned, self.total)


class ScanState(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    COMPLETED = "completed"


class ScanController:
    """
    Runs exactly one scan: start the pool, publish every job, wait for the
    queue to drain, shut the pool down and hand back the open ports.
    """

    def __init__(
        self,
        config: ScanConfig,
        probe: Probe = probe_port,
        on_open: Optional[OpenCallback] = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
    ):
        self.config = config
        self.probe = probe
        self.on_open = on_open
        self.progress_every = progress_every
        self.state = ScanState.IDLE
        self.results = ResultAggregator()
        self.dispatched = 0

    def run(self, host: str, ports: Iterable[int]) -> List[int]:
        if self.state is not ScanState.IDLE:
            raise RuntimeError(f"controller already used (state={self.state.value})")

        jobs = build_jobs(host, ports)
        work_queue: "queue.Queue[Optional[Job]]" = queue.Queue(maxsize=self.config.worker_count)
        pool = ScanWorkerPool(
            self.config,
            work_queue,
            self.results,
            probe=self.probe,
            on_open=self.on_open,
            progress_every=self.progress_every,
            total=len(jobs),
        )

        logger.info(
            "scanning %s: %d ports, %d workers, %d pkt/s per worker, delay %.3fs",
            host, len(jobs), self.config.worker_count,
            self.config.min_packet_rate, self.config.inter_job_delay,
        )
        start = time.perf_counter()

        pool.start()
        self.state = ScanState.DISPATCHING
        self.dispatched = JobDispatcher(work_queue).dispatch(jobs)

        self.state = ScanState.DRAINING
        work_queue.join()
        pool.close()

        self.results.freeze()
        self.state = ScanState.COMPLETED

        if pool.errors:
            raise ScanError(f"{len(pool.errors)} job(s) failed unexpectedly") from pool.errors[0]

        open_ports = self.results.snapshot()
        logger.info(
            "scan of %s finished in %.2fs: %d/%d open",
            host, time.perf_counter() - start, len(open_ports), self.dispatched,
        )
        return open_ports


def scan(
    host: str,
    ports: Iterable[int],
    config: ScanConfig,
    on_open: Optional[OpenCallback] = None,
    probe: Probe = probe_port,
) -> List[int]:
    return ScanController(config, probe=probe, on_open=on_open).run(host, ports)
