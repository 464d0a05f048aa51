"""
Bounded Runner

Explicit bounded-concurrency primitive for the per-key loops of the
scheduled jobs. The archive host and the live API are rate limited, so the
loops default to one worker; raising the cap is a deliberate configuration
change, not a side effect of switching runtimes.

Design:
- max_workers == 1 runs items inline, in order, on the calling thread
- max_workers > 1 uses a ThreadPoolExecutor; results still come back in
  input order
- An exception raised by the task function propagates out of map() and
  cancels items that have not started. Tasks that want per-item tolerance
  catch their own errors.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

from logging_config import setup_logging

logger = setup_logging(__name__, log_file="bounded_runner.log")

T = TypeVar("T")
R = TypeVar("R")


class BoundedRunner:
    """Run a function over items with at most ``max_workers`` in flight."""

    def __init__(self, max_workers: int = 1, max_cap: int | None = None):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_cap is not None and max_workers > max_cap:
            logger.warning(f"Clamping max_workers {max_workers} to cap {max_cap}")
            max_workers = max_cap
        self.max_workers = max_workers

    @property
    def is_sequential(self) -> bool:
        return self.max_workers == 1

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        items = list(items)
        if self.is_sequential or len(items) <= 1:
            return [fn(item) for item in items]

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = [executor.submit(fn, item) for item in items]
            results = [f.result() for f in futures]
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results


def sequential_runner() -> BoundedRunner:
    """The default runner: one item at a time."""
    return BoundedRunner(max_workers=1)
