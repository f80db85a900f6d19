# venue_pricing/core/clock.py
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from venue_pricing.core.config import settings


def venue_zone() -> ZoneInfo:
    return ZoneInfo(settings.VENUE_TIMEZONE)


def to_venue_local(at: Optional[datetime] = None) -> datetime:
    """
    Naive venue-local wall time for ``at``.

    - aware datetimes are converted to the venue zone
    - naive datetimes are assumed to be venue-local already
    - None means "now" in the venue zone

    This is the only timezone conversion in the service; the pricing engine
    works on the result as-is.
    """
    if at is None:
        return datetime.now(venue_zone()).replace(tzinfo=None)
    if at.tzinfo is None:
        return at
    return at.astimezone(venue_zone()).replace(tzinfo=None)
