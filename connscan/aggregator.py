from __future__ import annotations

import threading
from typing import List, Set


class ResultAggregator:
    """
    Collects open ports reported by concurrent workers.
    Every mutation goes through one lock; the snapshot is only
    available once the controller has frozen the set.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._open: Set[int] = set()
        self._scanned = 0
        self._frozen = False

    def record_open(self, port: int) -> None:
        with self._lock:
            if self._frozen:
                raise RuntimeError("result set is finalized")
            self._open.add(port)

    def record_scanned(self) -> int:
        with self._lock:
            self._scanned += 1
            return self._scanned

    @property
    def scanned(self) -> int:
        with self._lock:
            return self._scanned

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def snapshot(self) -> List[int]:
        with self._lock:
            if not self._frozen:
                raise RuntimeError("snapshot requested before all jobs drained")
            return sorted(self._open)
