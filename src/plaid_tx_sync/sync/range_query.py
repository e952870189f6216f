from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from ..core.time_ranges import window_last_days
from .filtering import filter_by_window, sort_by_date_desc
from .models import RangeQueryResult, TransactionRecord

if TYPE_CHECKING:
    from ..plaid.client import PlaidClient

logger = logging.getLogger(__name__)


class RangeQuery:
    """
    Direct date-range mode: enumerate the item's accounts, then page through
    /transactions/get by offset until total_transactions have been read.
    """

    PAGE_SIZE = 500

    def __init__(self, client: PlaidClient, page_size: int = PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._client = client
        self._page_size = page_size

    def fetch_range(self, credential: str, start: date, end: date) -> tuple[list[TransactionRecord], int, list[str]]:
        accounts = self._client.accounts_get(credential)
        account_ids = [a.account_id for a in accounts.accounts]

        out: list[TransactionRecord] = []
        total = 0
        offset = 0
        while True:
            resp = self._client.transactions_get(
                credential,
                start,
                end,
                account_ids=account_ids,
                count=self._page_size,
                offset=offset,
            )
            total = resp.total_transactions
            out.extend(resp.transactions)
            offset += len(resp.transactions)

            if not resp.transactions or offset >= total:
                break

        return out, total, account_ids

    def query_recent(self, credential: str, days: int, *, today: date | None = None) -> RangeQueryResult:
        window = window_last_days(days, today=today)
        logger.info("Fetching transactions from %s to %s", window.start, window.end)

        records, total, account_ids = self.fetch_range(credential, window.start, window.end)
        records = sort_by_date_desc(filter_by_window(records, window.start, window.end))

        logger.info("Total transactions in last %d days: %d", days, len(records))
        return RangeQueryResult(
            records=records,
            window=window,
            total_transactions=total,
            account_ids=account_ids,
        )
