"""In-memory score storage.

Scores live only for the lifetime of the process. The table is guarded by a
reader/writer lock: any number of lookups run together, while a write
excludes readers and other writers.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .models import ScoreRecord

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many-readers / single-writer lock.

    Waiting writers take priority over new readers so a steady stream of
    lookups cannot starve a submission.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_lock(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def _new_id() -> str:
    return str(uuid.uuid4())


class ScoreStore:
    """Maps generated receipt ids to their points."""

    def __init__(self, id_factory: Callable[[], str] = _new_id):
        self._points: dict[str, int] = {}
        self._lock = ReadWriteLock()
        self._id_factory = id_factory

    def put(self, points: int) -> str:
        """Store a score under a freshly generated id and return the id."""
        with self._lock.write_lock():
            receipt_id = self._id_factory()
            while receipt_id in self._points:
                logger.warning("Generated receipt id %s already in use, regenerating", receipt_id)
                receipt_id = self._id_factory()
            self._points[receipt_id] = points
        return receipt_id

    def get(self, receipt_id: str) -> Optional[int]:
        """Return the score stored under ``receipt_id``, or None."""
        with self._lock.read_lock():
            return self._points.get(receipt_id)

    def record(self, receipt_id: str) -> Optional[ScoreRecord]:
        points = self.get(receipt_id)
        if points is None:
            return None
        return ScoreRecord(id=receipt_id, points=points)

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._points)

    def __contains__(self, receipt_id: object) -> bool:
        with self._lock.read_lock():
            return receipt_id in self._points
