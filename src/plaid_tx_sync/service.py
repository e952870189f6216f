from __future__ import annotations

import logging
import threading
import time

from .config import Settings
from .core.session import SessionState
from .core.time_ranges import today_in
from .plaid.client import PlaidClient
from .sync.engine import RetryPolicy, SyncEngine
from .sync.fetcher import PlaidPageFetcher
from .sync.models import RangeQueryResult, SyncResult
from .sync.range_query import RangeQuery

logger = logging.getLogger(__name__)


class TransactionsService:
    """Wires the session, the Plaid client and both fetch modes together."""

    def __init__(
        self,
        client: PlaidClient,
        session: SessionState,
        engine: SyncEngine,
        range_query: RangeQuery,
        *,
        environment: str = "sandbox",
        products: list[str] | None = None,
        country_codes: list[str] | None = None,
        timezone: str | None = None,
    ):
        self.client = client
        self.session = session
        self.engine = engine
        self.range_query = range_query
        self.environment = environment
        self.products = products or ["transactions"]
        self.country_codes = country_codes or ["US"]
        self.timezone = timezone

    @classmethod
    def from_settings(cls, settings: Settings, client: PlaidClient | None = None) -> TransactionsService:
        client = client or PlaidClient(
            settings.plaid_client_id,
            settings.plaid_secret,
            settings.plaid_env,
            client_name=settings.client_name,
        )
        session = SessionState()
        if settings.plaid_access_token:
            session.set_credential(settings.plaid_access_token, settings.plaid_item_id or "")

        policy = RetryPolicy(
            delay_seconds=settings.sync_retry_delay_seconds,
            max_not_ready_attempts=settings.sync_max_not_ready_attempts,
            timeout_seconds=settings.sync_timeout_seconds,
        )
        engine = SyncEngine(PlaidPageFetcher(client), policy, dedupe=settings.sync_dedupe)

        return cls(
            client,
            session,
            engine,
            RangeQuery(client),
            environment=settings.plaid_env,
            products=settings.products,
            country_codes=settings.country_codes,
            timezone=settings.sync_timezone,
        )

    def close(self) -> None:
        self.client.close()

    def info(self) -> dict:
        return self.session.status(self.environment, self.products)

    def create_link_token(self, client_user_id: str | None = None) -> dict:
        resp = self.client.link_token_create(
            client_user_id or f"user-{int(time.time() * 1000)}",
            products=self.products,
            country_codes=self.country_codes,
        )
        return resp.model_dump(mode="json")

    def exchange_public_token(self, public_token: str) -> str:
        resp = self.client.item_public_token_exchange(public_token)
        self.session.set_credential(resp.access_token, resp.item_id)
        logger.info("Access token stored for item %s", resp.item_id)
        return resp.item_id

    def sync_recent(self, days: int, cancel: threading.Event | None = None) -> SyncResult:
        # credential is read once so a concurrent exchange cannot split a run
        credential = self.session.get_credential()
        return self.engine.sync_recent(credential, days, today=today_in(self.timezone), cancel=cancel)

    def query_recent(self, days: int) -> RangeQueryResult:
        credential = self.session.get_credential()
        return self.range_query.query_recent(credential, days, today=today_in(self.timezone))
