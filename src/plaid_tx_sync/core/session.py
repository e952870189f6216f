from __future__ import annotations

import threading

from .errors import NotConnected


class SessionState:
    """
    Process-wide holder of the single active access token and its item id.

    Both values are written together by the public-token exchange and read by
    every sync run. Reads go through `snapshot()` / `get_credential()` under the
    same lock as writes, so a run never observes a half-rotated pair.
    """

    def __init__(self, credential: str | None = None, item_id: str | None = None):
        self._lock = threading.RLock()
        self._credential: str | None = None
        self._item_id: str | None = None
        if credential is not None or item_id is not None:
            self.set_credential(credential or "", item_id or "")

    def set_credential(self, credential: str, item_id: str) -> None:
        if not credential or not item_id:
            raise ValueError("credential and item_id must both be non-empty")
        with self._lock:
            self._credential = credential
            self._item_id = item_id

    def is_connected(self) -> bool:
        with self._lock:
            return bool(self._credential)

    def get_credential(self) -> str:
        with self._lock:
            if not self._credential:
                raise NotConnected()
            return self._credential

    @property
    def item_id(self) -> str | None:
        with self._lock:
            return self._item_id

    def snapshot(self) -> tuple[str | None, str | None]:
        with self._lock:
            return self._credential, self._item_id

    def status(self, environment: str, products: list[str]) -> dict:
        credential, item_id = self.snapshot()
        return {
            "item_id": item_id,
            "access_token": "***" if credential else None,
            "connected": bool(credential),
            "environment": environment,
            "products": list(products),
        }
