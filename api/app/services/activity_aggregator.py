"""Bounded worker pool that fetches metrics for a roster and ranks the results.

Workers pull identities from a shared queue until it is empty, so every
identity is dispatched exactly once. Completion order is not deterministic;
only the final sort by score is. A RemoteQueryError for one identity drops
that identity and the run carries on.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable

from app.models.activity import AggregationResult, Identity, MemberMetrics
from app.services.activity_config import DEFAULT_CONCURRENCY
from app.services.activity_errors import RemoteQueryError
from app.services.activity_scoring import sanitize_score

log = logging.getLogger(__name__)

FetchMetrics = Callable[[Identity], MemberMetrics]


class RunPhase(str, Enum):
    RESOLVING = "resolving"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    SORTED = "sorted"


def log_phase(phase: RunPhase, **fields: object) -> None:
    detail = " ".join(f"{key}={value}" for key, value in fields.items())
    log.debug("activity_run_phase phase=%s %s", phase.value, detail)


def rank(members: list[MemberMetrics]) -> list[MemberMetrics]:
    """Sanitize scores, then sort descending. Ties keep their incoming order."""
    cleaned = [m.model_copy(update={"score": sanitize_score(m.score)}) for m in members]
    return sorted(cleaned, key=lambda m: m.score, reverse=True)


def aggregate(
    identities: list[Identity],
    fetch: FetchMetrics,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> AggregationResult:
    if not identities:
        return AggregationResult()

    work: queue.Queue[Identity] = queue.Queue()
    for identity in identities:
        work.put(identity)

    lock = threading.Lock()
    results: list[MemberMetrics] = []
    dropped: list[str] = []

    def worker() -> None:
        while True:
            try:
                identity = work.get_nowait()
            except queue.Empty:
                return
            try:
                metrics = fetch(identity)
            except RemoteQueryError as exc:
                log.debug("activity_member_dropped login=%s error=%s", identity.login, exc)
                with lock:
                    dropped.append(identity.login)
                continue
            with lock:
                results.append(metrics)

    workers = max(1, min(concurrency, len(identities)))
    log_phase(RunPhase.DISPATCHING, roster=len(identities), workers=workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="activity-worker") as ex:
        futures = [ex.submit(worker) for _ in range(workers)]
        log_phase(RunPhase.DRAINING, workers=workers)
        for future in futures:
            future.result()

    ranked = rank(results)
    log_phase(RunPhase.SORTED, members=len(ranked), dropped=len(dropped))
    return AggregationResult(members=ranked, dropped=dropped)
