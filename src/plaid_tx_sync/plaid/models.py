from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..sync.models import TransactionRecord


class PlaidResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    request_id: str | None = None


class LinkTokenCreateResponse(PlaidResponse):
    link_token: str
    expiration: str | None = None


class PublicTokenExchangeResponse(PlaidResponse):
    access_token: str
    item_id: str


class PlaidAccount(BaseModel):
    model_config = ConfigDict(extra="allow")

    account_id: str
    name: str | None = None
    mask: str | None = None
    type: str | None = None
    subtype: str | None = None


class AccountsGetResponse(PlaidResponse):
    accounts: list[PlaidAccount] = Field(default_factory=list)


class TransactionsSyncResponse(PlaidResponse):
    added: list[TransactionRecord] = Field(default_factory=list)
    modified: list[TransactionRecord] = Field(default_factory=list)
    removed: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: str = ""
    has_more: bool = False

    @field_validator("next_cursor", mode="before")
    @classmethod
    def _null_cursor(cls, v: Any) -> Any:
        return "" if v is None else v


class TransactionsGetResponse(PlaidResponse):
    accounts: list[PlaidAccount] = Field(default_factory=list)
    transactions: list[TransactionRecord] = Field(default_factory=list)
    total_transactions: int = 0
