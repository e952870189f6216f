from __future__ import annotations


class SyncError(Exception):
    """Base error for everything the sync core lets escape to the caller."""


class NotConnected(SyncError):
    def __init__(self, message: str = "No access token. Please connect a bank account first."):
        super().__init__(message)
        self.message = message


class RemoteError(SyncError):
    """
    Upstream answered at the transport level but reported a business error
    (invalid credential, rate limit, product not ready, ...).
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        display_message: str | None = None,
        error_type: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
    ):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.display_message = display_message
        self.error_type = error_type
        self.status_code = status_code
        self.request_id = request_id

    def to_payload(self) -> dict:
        return {
            "error_code": self.code,
            "error_message": self.message,
            "display_message": self.display_message,
        }


class TransportError(SyncError):
    pass


class SyncTimeout(SyncError):
    pass


class SyncCancelled(SyncError):
    pass
