"""
Cron schedule helpers.

Schedules are standard five-field cron expressions (or the @hourly style
nicknames) evaluated in UTC.
"""

from datetime import datetime, timezone
from typing import Optional

from croniter import croniter


def validate_schedule(expression: str) -> None:
    if not croniter.is_valid(expression):
        raise ValueError(f"Invalid cron expression: {expression}")


def next_run(expression: str, now: Optional[datetime] = None) -> datetime:
    """Return the first trigger instant strictly after ``now`` (UTC, also for naive ``now``)."""
    start = now or datetime.now(timezone.utc)
    # Naive datetimes are UTC wall-clock times.
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    start = start.astimezone(timezone.utc)
    return croniter(expression, start).get_next(datetime)
