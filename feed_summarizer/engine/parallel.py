"""Bounded concurrent fetching of many resources under one global deadline."""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Iterable

import structlog

from ..errors import AggregatedError, DeadlineExceeded, FetchFailure

ResourceFetcher = Callable[[str], str]

DEFAULT_MAX_CONCURRENCY = 10
DEFAULT_DEADLINE_SECONDS = 180.0


@dataclass(slots=True)
class FetchOutcome:
    """Pages that were fetched in time plus the failures of everything else."""

    pages: dict[str, str] = field(default_factory=dict)
    error: AggregatedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class _FetchLedger:
    """Shared result state. Each identifier is settled exactly once."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._pages: dict[str, str] = {}
        self._failures: dict[str, FetchFailure] = {}

    def _is_settled(self, identifier: str) -> bool:
        return identifier in self._pages or identifier in self._failures

    def succeed(self, identifier: str, content: str) -> bool:
        with self._lock:
            if self._is_settled(identifier):
                return False
            self._pages[identifier] = content
            return True

    def fail(self, failure: FetchFailure) -> bool:
        with self._lock:
            if self._is_settled(failure.identifier):
                return False
            self._failures[failure.identifier] = failure
            return True

    def expire(self, identifiers: Iterable[str]) -> list[str]:
        expired: list[str] = []
        with self._lock:
            for identifier in identifiers:
                if self._is_settled(identifier):
                    continue
                self._failures[identifier] = DeadlineExceeded(identifier)
                expired.append(identifier)
        return expired

    def snapshot(self) -> FetchOutcome:
        with self._lock:
            pages = dict(self._pages)
            causes = list(self._failures.values())
        if not causes:
            return FetchOutcome(pages=pages)
        error = AggregatedError(causes, "some URLs may not have been fetched successfully")
        return FetchOutcome(pages=pages, error=error)


def fetch_all(
    identifiers: Iterable[str],
    fetch: ResourceFetcher,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    deadline: float = DEFAULT_DEADLINE_SECONDS,
    logger: structlog.BoundLogger | None = None,
) -> FetchOutcome:
    """Fetch every identifier with at most ``max_concurrency`` calls in flight.

    ``deadline`` is a wall-clock budget in seconds for the whole call. Anything
    not finished by then is reported as :class:`DeadlineExceeded`; fetches that
    are still running keep their worker thread until they return, but their
    results are discarded. Per-identifier errors never abort the batch, they
    are collected into ``FetchOutcome.error``.
    """

    if max_concurrency < 1:
        raise ValueError("max_concurrency must be >= 1")
    if deadline <= 0:
        raise ValueError("deadline must be > 0")
    log = logger or structlog.get_logger("feed_summarizer.fetcher")
    unique = list(dict.fromkeys(identifiers))
    if not unique:
        return FetchOutcome()

    ledger = _FetchLedger()
    deadline_at = time.monotonic() + deadline

    def _run(identifier: str) -> None:
        if time.monotonic() >= deadline_at:
            ledger.expire([identifier])
            return
        try:
            content = fetch(identifier)
        except FetchFailure as exc:
            failure = exc if exc.identifier == identifier else FetchFailure(identifier, exc)
        except Exception as exc:  # noqa: BLE001
            failure = FetchFailure(identifier, exc)
        else:
            if time.monotonic() > deadline_at:
                ledger.expire([identifier])
            elif not ledger.succeed(identifier, content):
                log.debug("late_fetch_ignored", url=identifier)
            return
        if ledger.fail(failure):
            log.warning("page_fetch_failed", url=identifier, error=str(failure))

    executor = ThreadPoolExecutor(
        max_workers=min(max_concurrency, len(unique)), thread_name_prefix="fetch"
    )
    try:
        futures: dict[Future[None], str] = {
            executor.submit(_run, identifier): identifier for identifier in unique
        }
        done, pending = wait(futures, timeout=max(0.0, deadline_at - time.monotonic()))
        for future in done:
            future.result()
        if pending:
            expired = ledger.expire(futures[future] for future in pending)
            log.warning("fetch_deadline_exceeded", deadline=deadline, expired=len(expired))
    finally:
        # In-flight fetches are not interruptible; queued ones are dropped.
        executor.shutdown(wait=False, cancel_futures=True)

    outcome = ledger.snapshot()
    log.info(
        "fetch_completed",
        total=len(unique),
        succeeded=len(outcome.pages),
        failed=len(outcome.error) if outcome.error else 0,
    )
    return outcome


__all__ = [
    "DEFAULT_DEADLINE_SECONDS",
    "DEFAULT_MAX_CONCURRENCY",
    "FetchOutcome",
    "ResourceFetcher",
    "fetch_all",
]
