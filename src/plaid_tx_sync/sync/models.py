from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.time_ranges import DateWindow, parse_date


class TransactionRecord(BaseModel):
    """
    One upstream transaction. Only the typed core is inspected; every other
    field Plaid sends is kept as an extra and returned untouched.
    """

    model_config = ConfigDict(extra="allow")

    transaction_id: str | None = None
    date: str | None = None
    amount: float | None = None
    iso_currency_code: str | None = None

    # upstream is not trusted to keep the core fields well typed; a bad value
    # becomes None so the record is dropped by the window filter, not the run
    @field_validator("date", mode="before")
    @classmethod
    def _lenient_date(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v
        parsed = parse_date(v)
        return parsed.isoformat() if parsed is not None else None

    @field_validator("transaction_id", "iso_currency_code", mode="before")
    @classmethod
    def _lenient_str(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("amount", mode="before")
    @classmethod
    def _lenient_amount(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return v
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return None
        return None

    @property
    def id(self) -> str | None:
        return self.transaction_id

    @property
    def currency(self) -> str | None:
        return self.iso_currency_code

    @property
    def parsed_date(self) -> date | None:
        return parse_date(self.date)

    @property
    def extra_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Page(BaseModel):
    added: list[TransactionRecord] = Field(default_factory=list)
    modified: list[TransactionRecord] = Field(default_factory=list)
    removed: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: str = ""
    has_more: bool = False


@dataclass(frozen=True)
class NotReady:
    """Upstream is still materialising data; retry later with `cursor`."""

    cursor: str | None


@dataclass(frozen=True)
class SyncResult:
    records: list[TransactionRecord]
    window: DateWindow
    pages_fetched: int = 0
    fetched_count: int = 0

    @property
    def window_start(self) -> date:
        return self.window.start

    @property
    def window_end(self) -> date:
        return self.window.end

    @property
    def count(self) -> int:
        return len(self.records)

    def to_payload(self) -> dict[str, Any]:
        return {
            "transactions": [r.to_payload() for r in self.records],
            "count": self.count,
            "date_range": self.window.to_payload(),
            "error": None,
        }


@dataclass(frozen=True)
class RangeQueryResult:
    records: list[TransactionRecord]
    window: DateWindow
    total_transactions: int
    account_ids: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    def to_payload(self) -> dict[str, Any]:
        return {
            "transactions": [r.to_payload() for r in self.records],
            "count": self.count,
            "date_range": self.window.to_payload(),
            "total_transactions": self.total_transactions,
            "error": None,
        }
