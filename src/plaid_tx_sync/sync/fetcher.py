from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .models import NotReady, Page

if TYPE_CHECKING:
    from ..plaid.client import PlaidClient


class PageFetcher(Protocol):
    def fetch(self, credential: str, cursor: str | None) -> Page | NotReady: ...


class PlaidPageFetcher:
    """One /transactions/sync call per fetch."""

    def __init__(self, client: PlaidClient, page_size: int | None = None):
        self._client = client
        self._page_size = page_size

    def fetch(self, credential: str, cursor: str | None) -> Page | NotReady:
        resp = self._client.transactions_sync(credential, cursor=cursor, count=self._page_size)

        # a successful call with an empty cursor means Plaid is still
        # computing the history; same cursor must be retried
        if resp.next_cursor == "":
            return NotReady(cursor=cursor)

        return Page(
            added=resp.added,
            modified=resp.modified,
            removed=resp.removed,
            next_cursor=resp.next_cursor,
            has_more=resp.has_more,
        )
