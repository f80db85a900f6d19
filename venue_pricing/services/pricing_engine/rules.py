from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal, InvalidOperation
from typing import FrozenSet, Iterable, Optional

from venue_pricing.enums.rule_priority import RulePriority
from venue_pricing.enums.weekday import Weekday


class InvalidRuleError(ValueError):
    """A pricing rule breaks one of its invariants."""

    def __init__(self, message: str, rule_id: Optional[int] = None):
        super().__init__(message)
        self.rule_id = rule_id


class AmbiguousScopeError(Exception):
    """Two active rules tie on priority and specificity (strict mode only)."""

    def __init__(self, rule_ids: Iterable[int]):
        self.rule_ids = tuple(rule_ids)
        super().__init__(
            f"Rules {list(self.rule_ids)} tie on priority and scope specificity"
        )


def to_decimal(value) -> Decimal:
    """
    Decimal from int/str/float/Decimal. Floats go through ``str`` so
    0.85 stays 0.85 instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a decimal value: {value!r}") from exc


@dataclass(frozen=True)
class PricingRule:
    """
    Read-only snapshot of a pricing rule as the engine sees it.

    All instants and times of day are venue-local wall time. ``scope=None``
    means the rule covers every item.
    """

    id: int
    name: str
    multiplier: Decimal
    enabled: bool = True
    priority: RulePriority = RulePriority.medium
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    days_of_week: FrozenSet[Weekday] = field(default_factory=frozenset)
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    scope: Optional[str] = None

    def validate(self) -> "PricingRule":
        if isinstance(self.multiplier, bool) or not isinstance(
            self.multiplier, (Decimal, int, float)
        ):
            raise InvalidRuleError(
                f"multiplier must be numeric, got {self.multiplier!r}", self.id
            )
        multiplier = to_decimal(self.multiplier)
        if not multiplier.is_finite() or not (0 < multiplier <= 1):
            raise InvalidRuleError(
                f"multiplier must be in (0, 1], got {self.multiplier}", self.id
            )

        if not isinstance(self.priority, RulePriority):
            raise InvalidRuleError(f"unknown priority {self.priority!r}", self.id)

        if (
            self.valid_from is not None
            and self.valid_to is not None
            and self.valid_from > self.valid_to
        ):
            raise InvalidRuleError("valid_from is after valid_to", self.id)

        for day in self.days_of_week:
            if not isinstance(day, Weekday):
                raise InvalidRuleError(f"invalid weekday {day!r}", self.id)

        for bound in (self.time_start, self.time_end):
            if bound is not None and not isinstance(bound, time):
                raise InvalidRuleError(f"invalid time of day {bound!r}", self.id)

        return self


def build_rule(
    id: int,
    name: str,
    multiplier,
    enabled: bool = True,
    priority=RulePriority.medium,
    valid_from: Optional[datetime] = None,
    valid_to: Optional[datetime] = None,
    days_of_week: Iterable = (),
    time_start: Optional[time] = None,
    time_end: Optional[time] = None,
    scope: Optional[str] = None,
) -> PricingRule:
    """
    Coerce loose inputs (strings, ints, floats) into a validated PricingRule.
    Raises InvalidRuleError if anything can't be coerced or an invariant fails.
    """
    try:
        days = frozenset(Weekday.parse(d) for d in (days_of_week or ()))
        prio = priority if isinstance(priority, RulePriority) else RulePriority(priority)
        mult = to_decimal(multiplier)
    except (ValueError, TypeError) as exc:
        raise InvalidRuleError(str(exc), id) from exc

    rule = PricingRule(
        id=id,
        name=name,
        multiplier=mult,
        enabled=bool(enabled),
        priority=prio,
        valid_from=valid_from,
        valid_to=valid_to,
        days_of_week=days,
        time_start=time_start,
        time_end=time_end,
        scope=scope,
    )
    return rule.validate()


@dataclass(frozen=True)
class ResolvedPrice:
    base_price: Decimal
    final_price: Decimal
    applied_rule_id: Optional[int]
    discount_percent: int
