from datetime import datetime, time

from venue_pricing.enums.weekday import Weekday
from venue_pricing.services.pricing_engine.rules import PricingRule


def _runs_on(rule: PricingRule, day: Weekday) -> bool:
    # empty set = every day
    return not rule.days_of_week or day in rule.days_of_week


def crosses_midnight(rule: PricingRule) -> bool:
    return (
        rule.time_start is not None
        and rule.time_end is not None
        and rule.time_end < rule.time_start
    )


def in_window(rule: PricingRule, now_local: datetime) -> bool:
    """
    Is ``now_local`` inside the rule's recurring weekly window?

    ``now_local`` must already be venue-local wall time; no timezone
    conversion happens here.

    - no bounds, or start == end: the whole day
    - only a start: start -> end of day
    - only an end: start of day -> end (exclusive)
    - end < start: the window opens on a listed day and closes on the
      following calendar day, so the early-morning half is checked against
      *yesterday's* weekday.
    """
    today = Weekday(now_local.weekday())
    t = now_local.time()
    start, end = rule.time_start, rule.time_end

    if crosses_midnight(rule):
        if t >= start and _runs_on(rule, today):
            return True
        return t < end and _runs_on(rule, today.previous)

    if not _runs_on(rule, today):
        return False

    if start is None and end is None:
        return True
    if start is not None and end is not None and start == end:
        return True

    lower = start if start is not None else time.min
    if end is None:
        return t >= lower
    return lower <= t < end
