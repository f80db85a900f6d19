from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from venue_pricing.services.pricing_engine.conflict import resolve
from venue_pricing.services.pricing_engine.rules import (
    PricingRule,
    ResolvedPrice,
    to_decimal,
)

MONEY_PLACES = Decimal("0.01")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def round_money(value) -> Decimal:
    """Round half up to cents (never banker's rounding)."""
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _round_percent(value: Decimal) -> int:
    return int(value.quantize(ONE, rounding=ROUND_HALF_UP))


# Percent <-> multiplier: the only conversion point between what the API
# speaks (whole percentages) and what the engine stores (multipliers).


def percent_to_multiplier(percent: int) -> Decimal:
    if isinstance(percent, bool) or not isinstance(percent, int):
        raise ValueError(f"discount percent must be an integer, got {percent!r}")
    if not 0 <= percent <= 100:
        raise ValueError(f"discount percent must be within 0-100, got {percent}")
    return (HUNDRED - percent) / HUNDRED


def multiplier_to_percent(multiplier) -> int:
    percent = _round_percent(HUNDRED * (ONE - to_decimal(multiplier)))
    return max(0, min(100, percent))


def price(base_price, rule: Optional[PricingRule]) -> ResolvedPrice:
    """
    Final price for ``base_price`` under ``rule`` (or no rule).

    price(100.00, rule(multiplier=0.85)) -> final 85.00, discount 15
    """
    base = to_decimal(base_price)
    if base < 0:
        raise ValueError(f"base price must be non-negative, got {base_price}")

    if rule is None:
        return ResolvedPrice(
            base_price=round_money(base),
            final_price=round_money(base),
            applied_rule_id=None,
            discount_percent=0,
        )

    multiplier = to_decimal(rule.multiplier)
    return ResolvedPrice(
        base_price=round_money(base),
        final_price=round_money(base * multiplier),
        applied_rule_id=rule.id,
        discount_percent=multiplier_to_percent(multiplier),
    )


def quote_price(
    rules: Iterable[PricingRule],
    scope_tag: Optional[str],
    base_price,
    now: datetime,
    strict: bool = False,
) -> ResolvedPrice:
    winner = resolve(rules, scope_tag, now, strict=strict)
    return price(base_price, winner)
