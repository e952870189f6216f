from .engine import RetryPolicy, SyncEngine
from .filtering import dedupe_by_id, filter_by_window, sort_by_date_desc
from .models import NotReady, Page, RangeQueryResult, SyncResult, TransactionRecord

__all__ = [
    "SyncEngine",
    "RetryPolicy",
    "NotReady",
    "Page",
    "SyncResult",
    "RangeQueryResult",
    "TransactionRecord",
    "filter_by_window",
    "sort_by_date_desc",
    "dedupe_by_id",
]
