"""Time utilities (UTC now, compact signing timestamps, elapsed milliseconds)."""
from __future__ import annotations
import time
from datetime import datetime, timezone

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def amz_timestamp(moment: datetime | None = None) -> str:
    """Compact ISO-8601 UTC timestamp without punctuation or sub-seconds, e.g. ``20240101T120000Z``."""
    moment = moment or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y%m%dT%H%M%SZ")

def elapsed_ms(start: float) -> float:
    """Milliseconds since ``start`` (a ``time.time()`` value)."""
    return (time.time() - start) * 1000

__all__ = ["utc_now", "amz_timestamp", "elapsed_ms"]
