"""Run independent per-key tasks concurrently and report partial results.

Used for bulk operations over independent keys (zeroing allocation records,
per-batch health). Each task runs in a worker thread with its own database
session; the caller waits for all of them. A failed task never cancels or rolls
back its siblings: it is logged with its key and returned in ``failures``.
"""

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from stockline.config import FANOUT_CONCURRENCY
from stockline.models.results import TaskFailure
from stockline.utils.logger import get_logger

logger = get_logger("stockline.services.fanout")

T = TypeVar("T")


@dataclass
class FanOutResult(Generic[T]):
    """Results of the tasks that succeeded (by key) plus the ones that failed."""

    results: dict[str, T] = field(default_factory=dict)
    failures: list[TaskFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results)


async def run_independent(
    tasks: Mapping[str, Callable[[], T]],
    *,
    operation: str,
    concurrency: int = FANOUT_CONCURRENCY,
) -> FanOutResult[T]:
    """Run each zero-argument callable in a thread, at most `concurrency` at a time."""
    semaphore = asyncio.Semaphore(max(1, concurrency))
    log = logger.bind(operation=operation)

    async def _run(fn: Callable[[], T]) -> T:
        async with semaphore:
            return await asyncio.to_thread(fn)

    keys = list(tasks)
    outcomes = await asyncio.gather(*(_run(tasks[k]) for k in keys), return_exceptions=True)

    report: FanOutResult[T] = FanOutResult()
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            log.error("fanout.task_failed", key=key, error=str(outcome), exc_info=outcome)
            report.failures.append(TaskFailure(key=key, error=str(outcome)))
        else:
            report.results[key] = outcome
    log.debug("fanout.complete", tasks=len(keys), succeeded=report.succeeded, failed=len(report.failures))
    return report
