from datetime import datetime, timezone
from math import ceil
from typing import Optional


def utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise to naive UTC so stored and embedded timestamps compare cleanly."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso(raw) -> Optional[datetime]:
    """Parse an ISO timestamp from a JSON document; None when missing or malformed."""
    if isinstance(raw, datetime):
        return utc_naive(raw)
    if not raw:
        return None
    try:
        return utc_naive(datetime.fromisoformat(str(raw)))
    except ValueError:
        return None


def total_pages(total: int, limit: int) -> int:
    return ceil(total / limit) if limit else 0
