"""Bounded-parallelism scheduler for heterogeneous tasks."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from types import TracebackType
from typing import Protocol

from jar_compat.config import normalize_thread_count

logger = logging.getLogger(__name__)


class Task(Protocol):
    """Unit of work run once by the scheduler."""

    @property
    def name(self) -> str: ...

    def execute(self) -> None: ...


@dataclass(slots=True, frozen=True)
class TaskOutcome:
    """Completion record for one executed task."""

    name: str
    ok: bool
    error: str | None
    duration_seconds: float


def _run_task(task: Task) -> TaskOutcome:
    started = time.perf_counter()
    try:
        task.execute()
    except Exception as error:
        logger.exception("task %s failed", task.name)
        return TaskOutcome(
            name=task.name,
            ok=False,
            error=f"{type(error).__name__}: {error}",
            duration_seconds=time.perf_counter() - started,
        )
    return TaskOutcome(
        name=task.name,
        ok=True,
        error=None,
        duration_seconds=time.perf_counter() - started,
    )


class TaskScheduler:
    """Runs queued tasks with at most ``max_parallel`` of them active at once.

    Tasks start in enqueue order; completion order is whatever the work
    dictates. A failing task is recorded in its outcome and never stops its
    siblings. State shared between tasks is the tasks' own responsibility.
    """

    def __init__(self, max_parallel: object = 1) -> None:
        self._max_parallel = normalize_thread_count(max_parallel)
        self._queue: deque[Task] = deque()
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=self._max_parallel,
            thread_name_prefix="jar-compat",
        )

    @property
    def max_parallel(self) -> int:
        """Return the effective concurrency bound."""
        return self._max_parallel

    @property
    def pending_count(self) -> int:
        """Return the number of queued tasks not yet started."""
        with self._lock:
            return len(self._queue)

    def add_task(self, task: Task) -> None:
        """Append a task to the ready queue."""
        with self._lock:
            if self._executor is None:
                raise RuntimeError("Scheduler has been finalized.")
            self._queue.append(task)

    def execute_all(self) -> list[TaskOutcome]:
        """Run every queued task and block until all of them have finished.

        Returns outcomes in completion order.
        """
        with self._lock:
            executor = self._executor
            if executor is None:
                raise RuntimeError("Scheduler has been finalized.")
            batch = list(self._queue)
            self._queue.clear()

        logger.debug("executing %d task(s) with parallelism %d", len(batch), self._max_parallel)
        futures: list[Future[TaskOutcome]] = [executor.submit(_run_task, task) for task in batch]
        return [future.result() for future in as_completed(futures)]

    def finalize(self) -> None:
        """Release the worker pool; the scheduler accepts no work afterwards."""
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> TaskScheduler:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.finalize()
