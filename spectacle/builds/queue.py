"""Bounded handoff between webhook handlers and the build worker.

Many request handlers submit concurrently; exactly one worker takes jobs off
the queue in arrival order. Submission never blocks: when the queue is full
the job is refused with :class:`BuildQueueFullError` so the caller can answer
"busy" straight away.
"""

from __future__ import annotations

import queue
import typing as typ

from .errors import BuildQueueFullError

if typ.TYPE_CHECKING:
    from .models import BuildJob

DEFAULT_CAPACITY = 8


class _Stop:
    """Sentinel placed on the queue by :meth:`BuildQueue.close`."""


_STOP = _Stop()


class BuildQueue:
    """FIFO of pending build jobs with a fixed capacity."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Create an empty queue holding at most *capacity* jobs."""
        if capacity < 1:
            msg = f"queue capacity must be positive, got: {capacity}"
            raise ValueError(msg)
        self.capacity = capacity
        self._queue: queue.Queue[BuildJob | _Stop] = queue.Queue()
        self._slots = queue.Queue[None](maxsize=capacity)

    @property
    def depth(self) -> int:
        """Return the number of jobs waiting to be taken."""
        return self._slots.qsize()

    def submit(self, job: BuildJob) -> None:
        """Append *job* without blocking.

        Raises
        ------
        BuildQueueFullError
            If *capacity* jobs are already waiting.

        """
        try:
            self._slots.put_nowait(None)
        except queue.Full as exc:
            raise BuildQueueFullError(self.capacity) from exc
        self._queue.put(job)

    def take(self, timeout: float | None = None) -> BuildJob | None:
        """Remove and return the oldest job, blocking until one arrives.

        Returns ``None`` once the queue has been closed, or when *timeout*
        elapses with nothing to take. Every job returned must be
        acknowledged with :meth:`task_done`.
        """
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(item, _Stop):
            self._queue.task_done()
            return None
        self._slots.get_nowait()
        return item

    def task_done(self) -> None:
        """Mark the most recently taken job as finished."""
        self._queue.task_done()

    def join(self) -> None:
        """Block until every submitted job has been taken and finished."""
        self._queue.join()

    def close(self) -> None:
        """Wake the consumer so it stops after the jobs already queued."""
        self._queue.put(_STOP)
