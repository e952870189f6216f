from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class DateWindow:
    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def to_payload(self) -> dict[str, str]:
        return {
            "start_date": self.start.strftime(DATE_FORMAT),
            "end_date": self.end.strftime(DATE_FORMAT),
        }


def today_in(tz_name: str | None = None) -> date:
    """
    Calendar date "now". Without a timezone this is the host's local date,
    so two hosts in different zones may disagree around midnight.
    """
    if not tz_name:
        return date.today()
    return datetime.now(tz=ZoneInfo(tz_name)).date()


def window_last_days(days: int, today: date | None = None) -> DateWindow:
    if days < 0:
        raise ValueError("days must be >= 0")
    end = today or date.today()
    return DateWindow(start=end - timedelta(days=days), end=end)


def parse_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    value = value.strip()
    try:
        if "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None
