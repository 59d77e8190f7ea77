from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a UTC-naive datetime, the form stored in the DB."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    """Convert an incoming timestamp to the UTC-naive form kept in
    `transactions.date` and the created/updated columns.

    Naive input is taken to be UTC already, matching how the API emits dates.
    """

    if dt.tzinfo is None:
        return dt

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to a stored timestamp so JSON output carries an explicit offset."""

    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc)

    return dt.replace(tzinfo=timezone.utc)
