from __future__ import annotations

import logging
import queue
from typing import Iterable, List, Optional

from .models import Job

logger = logging.getLogger(__name__)


def build_jobs(host: str, ports: Iterable[int]) -> List[Job]:
    return [Job(host=host, port=p) for p in ports]


class JobDispatcher:
    """
    Feeds jobs into the bounded work queue shared with the worker pool.

    Queue.put() bumps the queue's unfinished-task counter before the job is
    visible to any worker, so Queue.join() returns only after the last
    dispatched job has been marked done. put() blocks while the queue is full.
    """

    def __init__(self, work_queue: "queue.Queue[Optional[Job]]"):
        self.queue = work_queue

    def dispatch(self, jobs: Iterable[Job]) -> int:
        count = 0
        for job in jobs:
            self.queue.put(job)
            count += 1
        logger.debug("dispatched %d jobs", count)
        return count
