"""Central time utilities for the application.

Database columns are naive UTC (TIMESTAMP WITHOUT TIME ZONE). Query records
also carry display strings (`date`, `timestamp`, `editedAt`) that are stored
verbatim, so the helpers for producing them live here too.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as a naive datetime object.

    Replaces datetime.utcnow() while staying compatible with the naive
    DateTime columns in the database.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 string (UTC, seconds precision) for record fields such as lastEdited."""
    moment = moment or utc_now()
    return moment.replace(microsecond=0).isoformat() + "Z"


def iso_date(moment: datetime | None = None) -> str:
    """Calendar date (YYYY-MM-DD) used for a query's `date` field."""
    return (moment or utc_now()).date().isoformat()
