from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from plaid_tx_sync.core.errors import RemoteError, TransportError
from plaid_tx_sync.plaid.client import PlaidClient
from plaid_tx_sync.sync.fetcher import PlaidPageFetcher
from plaid_tx_sync.sync.models import NotReady, Page


def _client(handler) -> PlaidClient:
    return PlaidClient("cid", "secret", "sandbox", transport=httpx.MockTransport(handler))


def test_transactions_sync_sends_credentials_and_omits_initial_cursor():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "added": [{"transaction_id": "t1", "date": "2024-01-02", "amount": 4.5, "name": "Cafe"}],
                "modified": [],
                "removed": [{"transaction_id": "old"}],
                "next_cursor": "c1",
                "has_more": True,
                "request_id": "r1",
            },
        )

    pc = _client(handler)
    resp = pc.transactions_sync("access-tok")
    pc.close()

    req = seen[0]
    assert req.url.path == "/transactions/sync"
    assert req.headers["PLAID-CLIENT-ID"] == "cid"
    assert req.headers["PLAID-SECRET"] == "secret"
    assert json.loads(req.content) == {"access_token": "access-tok"}

    assert resp.next_cursor == "c1"
    assert resp.has_more is True
    assert resp.added[0].id == "t1"
    assert resp.added[0].extra_fields["name"] == "Cafe"


def test_fetcher_maps_empty_cursor_to_not_ready_with_same_cursor():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"added": [], "next_cursor": "", "has_more": False})

    pc = _client(handler)
    res = PlaidPageFetcher(pc).fetch("tok", "c7")
    pc.close()

    assert res == NotReady(cursor="c7")


def test_fetcher_returns_page_for_non_empty_cursor():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"added": [{"transaction_id": "t1", "date": "2024-01-02"}], "next_cursor": "c2", "has_more": False},
        )

    pc = _client(handler)
    res = PlaidPageFetcher(pc, page_size=100).fetch("tok", "c1")
    pc.close()

    assert isinstance(res, Page)
    assert res.next_cursor == "c2"
    assert res.has_more is False
    assert [r.id for r in res.added] == ["t1"]
    assert bodies == [{"access_token": "tok", "cursor": "c1", "count": 100}]


def test_plaid_error_body_becomes_remote_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "error_type": "INVALID_INPUT",
                "error_code": "INVALID_ACCESS_TOKEN",
                "error_message": "provided access token is in an invalid format",
                "display_message": None,
                "request_id": "req-1",
            },
        )

    pc = _client(handler)
    with pytest.raises(RemoteError) as ei:
        pc.transactions_sync("bad")
    pc.close()

    err = ei.value
    assert err.code == "INVALID_ACCESS_TOKEN"
    assert err.error_type == "INVALID_INPUT"
    assert err.status_code == 400
    assert err.request_id == "req-1"
    assert err.to_payload() == {
        "error_code": "INVALID_ACCESS_TOKEN",
        "error_message": "provided access token is in an invalid format",
        "display_message": None,
    }


def test_non_json_error_still_becomes_remote_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    pc = _client(handler)
    with pytest.raises(RemoteError) as ei:
        pc.accounts_get("tok")
    pc.close()

    assert ei.value.code == "HTTP_ERROR"
    assert ei.value.status_code == 502


def test_network_failure_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    pc = _client(handler)
    with pytest.raises(TransportError):
        pc.transactions_sync("tok")
    pc.close()


def test_transactions_get_request_shape():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"transactions": [], "total_transactions": 0, "accounts": []})

    pc = _client(handler)
    pc.transactions_get("tok", date(2024, 1, 1), date(2024, 1, 8), account_ids=["a1"], count=50, offset=100)
    pc.close()

    assert bodies == [
        {
            "access_token": "tok",
            "start_date": "2024-01-01",
            "end_date": "2024-01-08",
            "options": {"count": 50, "offset": 100, "account_ids": ["a1"]},
        }
    ]


def test_exchange_and_link_token():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/item/public_token/exchange":
            return httpx.Response(200, json={"access_token": "access-1", "item_id": "item-1", "request_id": "r"})
        body = json.loads(request.content)
        assert body["client_name"] == "plaid-tx-sync"
        assert body["products"] == ["transactions"]
        return httpx.Response(200, json={"link_token": "link-1", "expiration": "2024-01-01T00:00:00Z"})

    pc = _client(handler)
    ex = pc.item_public_token_exchange("public-1")
    lt = pc.link_token_create("user-1", products=["transactions"], country_codes=["US"])
    pc.close()

    assert (ex.access_token, ex.item_id) == ("access-1", "item-1")
    assert lt.link_token == "link-1"


def test_unknown_env_rejected():
    with pytest.raises(ValueError):
        PlaidClient("cid", "secret", "staging")


def test_sync_drops_record_with_non_string_date_instead_of_failing():
    from plaid_tx_sync.sync.engine import SyncEngine

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "added": [
                    {"transaction_id": "ok", "date": "2024-03-14", "amount": 1.0},
                    {"transaction_id": "bad", "date": 20240314, "amount": 2.0},
                ],
                "next_cursor": "c1",
                "has_more": False,
            },
        )

    pc = _client(handler)
    res = SyncEngine(PlaidPageFetcher(pc)).sync_recent("tok", 7, today=date(2024, 3, 15))
    pc.close()

    assert [r.id for r in res.records] == ["ok"]
    assert res.fetched_count == 2
