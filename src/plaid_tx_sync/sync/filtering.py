from __future__ import annotations

from datetime import date
from typing import Iterable

from .models import TransactionRecord


def filter_by_window(records: Iterable[TransactionRecord], start: date, end: date) -> list[TransactionRecord]:
    """Keep records dated within [start, end]; missing or unparseable dates are dropped."""
    out: list[TransactionRecord] = []
    for r in records:
        d = r.parsed_date
        if d is None:
            continue
        if start <= d <= end:
            out.append(r)
    return out


def sort_by_date_desc(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    # stable: equal dates keep arrival order, undated records sink to the end
    return sorted(records, key=lambda r: (r.parsed_date is not None, r.parsed_date or date.min), reverse=True)


def dedupe_by_id(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    out: list[TransactionRecord] = []
    seen: set[str] = set()
    for r in records:
        tx_id = r.id
        if tx_id is None:
            out.append(r)
            continue
        if tx_id in seen:
            continue
        seen.add(tx_id)
        out.append(r)
    return out
