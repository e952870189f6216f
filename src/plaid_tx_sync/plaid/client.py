from __future__ import annotations

import logging
from datetime import date
from typing import Any, Literal

import httpx

from ..core.errors import RemoteError, TransportError
from .models import (
    AccountsGetResponse,
    LinkTokenCreateResponse,
    PublicTokenExchangeResponse,
    TransactionsGetResponse,
    TransactionsSyncResponse,
)

logger = logging.getLogger(__name__)

PlaidEnv = Literal["sandbox", "development", "production"]

PLAID_ENV_URLS: dict[str, str] = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}

PLAID_API_VERSION = "2020-09-14"


def _remote_error(resp: httpx.Response) -> RemoteError:
    try:
        body = resp.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        return RemoteError(
            "HTTP_ERROR",
            f"Plaid API error: {resp.status_code} {resp.reason_phrase}. Response: {resp.text}",
            status_code=resp.status_code,
        )

    return RemoteError(
        str(body.get("error_code") or "HTTP_ERROR"),
        str(body.get("error_message") or f"{resp.status_code} {resp.reason_phrase}"),
        display_message=body.get("display_message"),
        error_type=body.get("error_type"),
        status_code=resp.status_code,
        request_id=body.get("request_id"),
    )


class PlaidClient:
    """
    Thin synchronous client for the handful of Plaid endpoints we need.

    No retries happen here: transport failures surface as TransportError and
    Plaid error bodies as RemoteError. The only retry in the system is the
    sync engine's wait on an empty cursor.
    """

    TIMEOUT_SECONDS = 20.0

    def __init__(
        self,
        client_id: str,
        secret: str,
        env: PlaidEnv = "sandbox",
        *,
        client_name: str = "plaid-tx-sync",
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        if env not in PLAID_ENV_URLS and base_url is None:
            raise ValueError(f"Unknown Plaid environment: {env}")

        self.env = env
        self.client_name = client_name
        self._base_url = (base_url or PLAID_ENV_URLS[env]).rstrip("/")

        self._client = httpx.Client(
            base_url=self._base_url,
            headers={
                "PLAID-CLIENT-ID": client_id,
                "PLAID-SECRET": secret,
                "Plaid-Version": PLAID_API_VERSION,
                "User-Agent": "plaid-tx-sync/0.1.0",
            },
            timeout=httpx.Timeout(self.TIMEOUT_SECONDS),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> PlaidClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _post_json(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self._client.post(path, json=body)
        except httpx.TransportError as e:
            raise TransportError(f"Plaid request failed: {path}. {e}") from e

        if resp.status_code >= 400:
            err = _remote_error(resp)
            logger.warning("Plaid %s failed: %s %s", path, err.code, err.message)
            raise err

        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteError("INVALID_RESPONSE", f"Plaid response is not JSON: {path}") from e

        if not isinstance(data, dict):
            raise RemoteError("INVALID_RESPONSE", f"Plaid response is not an object: {path}")
        return data

    def link_token_create(
        self,
        client_user_id: str,
        *,
        products: list[str],
        country_codes: list[str],
        language: str = "en",
    ) -> LinkTokenCreateResponse:
        data = self._post_json(
            "/link/token/create",
            {
                "user": {"client_user_id": client_user_id},
                "client_name": self.client_name,
                "products": products,
                "country_codes": country_codes,
                "language": language,
            },
        )
        return LinkTokenCreateResponse.model_validate(data)

    def item_public_token_exchange(self, public_token: str) -> PublicTokenExchangeResponse:
        data = self._post_json("/item/public_token/exchange", {"public_token": public_token})
        return PublicTokenExchangeResponse.model_validate(data)

    def accounts_get(self, access_token: str) -> AccountsGetResponse:
        data = self._post_json("/accounts/get", {"access_token": access_token})
        return AccountsGetResponse.model_validate(data)

    def transactions_sync(
        self,
        access_token: str,
        cursor: str | None = None,
        count: int | None = None,
    ) -> TransactionsSyncResponse:
        body: dict[str, Any] = {"access_token": access_token}
        if cursor is not None:
            body["cursor"] = cursor
        if count is not None:
            body["count"] = count
        data = self._post_json("/transactions/sync", body)
        return TransactionsSyncResponse.model_validate(data)

    def transactions_get(
        self,
        access_token: str,
        start_date: date,
        end_date: date,
        *,
        account_ids: list[str] | None = None,
        count: int = 500,
        offset: int = 0,
    ) -> TransactionsGetResponse:
        options: dict[str, Any] = {"count": count, "offset": offset}
        if account_ids:
            options["account_ids"] = account_ids
        data = self._post_json(
            "/transactions/get",
            {
                "access_token": access_token,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "options": options,
            },
        )
        return TransactionsGetResponse.model_validate(data)
