from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable

from ..core.errors import SyncCancelled, SyncTimeout
from ..core.time_ranges import window_last_days
from .fetcher import PageFetcher
from .filtering import dedupe_by_id, filter_by_window, sort_by_date_desc
from .models import NotReady, SyncResult, TransactionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    delay_seconds: float = 2.0
    max_not_ready_attempts: int = 30
    timeout_seconds: float | None = 120.0

    def __post_init__(self) -> None:
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        if self.max_not_ready_attempts < 1:
            raise ValueError("max_not_ready_attempts must be >= 1")


class SyncEngine:
    """
    Drives a PageFetcher through the cursor protocol until has_more is false,
    then filters the accumulated records to the last `days` days and sorts
    them newest first.

    An empty cursor from upstream ("not ready") and has_more=false ("done")
    are separate signals: the first waits and retries the same cursor, the
    second ends the loop.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        policy: RetryPolicy | None = None,
        *,
        dedupe: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetcher = fetcher
        self.policy = policy or RetryPolicy()
        self.dedupe = dedupe
        self._sleep = sleep
        self._clock = clock

    def fetch_all(self, credential: str, cancel: threading.Event | None = None) -> tuple[list[TransactionRecord], int]:
        """Run the cursor loop; returns (accumulated added records, pages fetched)."""
        cursor: str | None = None
        accumulated: list[TransactionRecord] = []
        more = True
        pages = 0
        not_ready_streak = 0
        started = self._clock()

        while more:
            self._check_cancel(cancel)
            self._check_deadline(started)

            logger.debug("Fetching transactions page (cursor: %s)", cursor or "initial")
            result = self._fetcher.fetch(credential, cursor)

            if isinstance(result, NotReady):
                not_ready_streak += 1
                if not_ready_streak >= self.policy.max_not_ready_attempts:
                    raise SyncTimeout(
                        f"Upstream still not ready after {not_ready_streak} attempts (cursor: {cursor or 'initial'})"
                    )
                logger.info(
                    "Transactions not ready yet, retrying in %.1fs (attempt %d/%d)",
                    self.policy.delay_seconds,
                    not_ready_streak,
                    self.policy.max_not_ready_attempts,
                )
                self._wait(cancel)
                continue

            not_ready_streak = 0
            pages += 1
            accumulated.extend(result.added)
            cursor = result.next_cursor
            more = result.has_more

            logger.info(
                "Fetched %d added, %d modified, %d removed (page %d). Has more: %s",
                len(result.added),
                len(result.modified),
                len(result.removed),
                pages,
                more,
            )

        return accumulated, pages

    def sync_recent(
        self,
        credential: str,
        days: int,
        *,
        today: date | None = None,
        cancel: threading.Event | None = None,
    ) -> SyncResult:
        window = window_last_days(days, today=today)
        logger.info("Syncing transactions from %s to %s", window.start, window.end)

        accumulated, pages = self.fetch_all(credential, cancel=cancel)
        fetched_count = len(accumulated)

        if self.dedupe:
            accumulated = dedupe_by_id(accumulated)

        records = sort_by_date_desc(filter_by_window(accumulated, window.start, window.end))
        logger.info("Total transactions in last %d days: %d (of %d fetched)", days, len(records), fetched_count)

        return SyncResult(records=records, window=window, pages_fetched=pages, fetched_count=fetched_count)

    def _wait(self, cancel: threading.Event | None) -> None:
        if cancel is None:
            self._sleep(self.policy.delay_seconds)
            return
        if cancel.wait(self.policy.delay_seconds):
            raise SyncCancelled("Sync cancelled while waiting for upstream")

    def _check_cancel(self, cancel: threading.Event | None) -> None:
        if cancel is not None and cancel.is_set():
            raise SyncCancelled("Sync cancelled")

    def _check_deadline(self, started: float) -> None:
        timeout = self.policy.timeout_seconds
        if timeout is None:
            return
        elapsed = self._clock() - started
        if elapsed > timeout:
            raise SyncTimeout(f"Sync exceeded {timeout:.0f}s (elapsed {elapsed:.1f}s)")
