"""Fixed-arity parallel join over backend calls."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)


def fork_join(
    calls: Mapping[str, Callable[[], Any]],
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run named calls concurrently and wait for all of them.

    All-or-nothing: the first failure cancels the calls that have not
    started yet and is re-raised; no partial result is returned. There is
    no timeout here beyond the one each call applies itself.

    Args:
        calls: Mapping of result name to zero-argument callable.
        max_workers: Thread pool size. Defaults to one thread per call.

    Returns:
        Dict[str, Any]: Results keyed by the same names, in the input order.
    """
    if not calls:
        return {}

    pool = ThreadPoolExecutor(max_workers=max_workers or len(calls))
    futures: Dict[Future, str] = {pool.submit(fn): name for name, fn in calls.items()}
    results: Dict[str, Any] = {}

    try:
        for future in as_completed(futures):
            name = futures[future]
            results[name] = future.result()
    except Exception as e:
        logger.warning("fork_join_failed", failed_call=name, error=str(e))
        pool.shutdown(wait=False, cancel_futures=True)
        raise

    pool.shutdown(wait=True)
    return {name: results[name] for name in calls}
