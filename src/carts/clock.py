"""Wall clock for the cart lifecycle.

Timestamps are stored as naive UTC so that stored values and sweep cutoffs
always compare cleanly, whatever the persistence provider does with tzinfo.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(moment: datetime | None) -> datetime:
    """Normalise an optional ``as_of`` override; ``None`` means now."""
    if moment is None:
        return utcnow()
    if moment.tzinfo is not None:
        return moment.astimezone(UTC).replace(tzinfo=None)
    return moment
