"""Run a handful of independent store calls on a short-lived thread pool."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Sequence

DEFAULT_MAX_WORKERS = 4


def run_concurrently(calls: Sequence[Callable[[], Any]], max_workers: int = DEFAULT_MAX_WORKERS) -> List[Any]:
    """Invoke every callable and wait for all of them.

    Results come back in the order of ``calls``. If a call raises, the first
    failing call (in that order) re-raises its exception here.
    """
    if not calls:
        return []
    workers = max(1, min(max_workers, len(calls)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(call) for call in calls]
        return [future.result() for future in futures]
