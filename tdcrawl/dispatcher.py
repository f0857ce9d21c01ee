"""Bounded thread-pool dispatch for independent crawl tasks."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Tuple

from .logging import get_logger

logger = get_logger("dispatcher")


@dataclass(frozen=True)
class Task:
    """A named unit of work whose results go to a shared collaborator."""

    name: str
    fn: Callable[[], object]


@dataclass
class BatchResult:
    """Outcome of one ``run_all`` batch."""

    submitted: int = 0
    failures: List[Tuple[str, BaseException]] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.submitted - len(self.failures)


class TaskDispatcher:
    """Runs batches of tasks on a fixed-size worker pool.

    A failing task is logged and recorded; it never cancels its siblings, and
    ``run_all`` returns only once every submitted task has finished.
    """

    def __init__(self, max_workers: int, *, name: str = "tdcrawl") -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.max_workers = max_workers
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)

    def run_all(self, tasks: Iterable[Task]) -> BatchResult:
        """Submit every task and block until the whole batch has completed."""
        futures: Dict[Future[object], Task] = {}
        for task in tasks:
            futures[self._executor.submit(task.fn)] = task

        result = BatchResult(submitted=len(futures))
        if not futures:
            return result

        done, _ = wait(futures)
        for future in done:
            error = future.exception()
            if error is None:
                continue
            task = futures[future]
            logger.warning("Task %s failed: %s", task.name, error)
            logger.debug("Task %s traceback", task.name, exc_info=error)
            result.failures.append((task.name, error))

        result.failures.sort(key=lambda failure: failure[0])
        return result

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "TaskDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        self.shutdown()


__all__ = ["BatchResult", "Task", "TaskDispatcher"]
