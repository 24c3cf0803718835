"""
Outstanding-work bookkeeping and crawl termination.
"""

import threading

from second_order.config import WORKER_POLL_INTERVAL


class WorkTracker:
    """Counts jobs submitted but not yet completed.

    Workers must call :meth:`add` for every child *before* calling
    :meth:`done` for the parent that produced it, so the counter can
    only reach zero once no job is queued or running.

    :meth:`stop` is the early-exit path: it wakes :meth:`wait` at once
    and tells workers to stop accepting work.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._outstanding = 0
        self._submitted = 0
        self._completed = 0
        self._stopped = threading.Event()

    def add(self, n: int = 1) -> None:
        with self._cond:
            self._outstanding += n
            self._submitted += n

    def done(self) -> None:
        with self._cond:
            if self._outstanding <= 0:
                raise RuntimeError("done() called more times than add()")
            self._outstanding -= 1
            self._completed += 1
            if self._outstanding == 0:
                self._cond.notify_all()

    def stop(self) -> None:
        """Request early termination."""
        self._stopped.set()
        with self._cond:
            self._cond.notify_all()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def outstanding(self) -> int:
        with self._cond:
            return self._outstanding

    @property
    def submitted(self) -> int:
        with self._cond:
            return self._submitted

    @property
    def completed(self) -> int:
        with self._cond:
            return self._completed

    def wait(self, timeout: float | None = None) -> bool:
        """Block until outstanding work reaches zero or :meth:`stop` is
        called.

        Waits in short slices so the main thread stays responsive to
        signals.  Returns True when all work completed, False when
        stopped early or *timeout* expired.
        """
        remaining = timeout
        with self._cond:
            while self._outstanding > 0 and not self._stopped.is_set():
                slice_ = WORKER_POLL_INTERVAL
                if remaining is not None:
                    if remaining <= 0:
                        return False
                    slice_ = min(slice_, remaining)
                    remaining -= slice_
                self._cond.wait(slice_)
            return self._outstanding == 0 and not self._stopped.is_set()
