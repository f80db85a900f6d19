from datetime import datetime
from typing import Iterable, List, Tuple

from venue_pricing.enums.rule_status import RuleStatus
from venue_pricing.services.pricing_engine.rules import PricingRule
from venue_pricing.services.pricing_engine.time_window import in_window


def resolve_status(rule: PricingRule, now: datetime) -> RuleStatus:
    """
    Lifecycle state of ``rule`` at ``now`` (venue-local).

    Disabled rules are inactive no matter what. A rule whose validity hasn't
    started yet is scheduled, one whose validity ended is inactive. Inside
    the validity range the weekly window decides between active and
    scheduled. ``valid_to`` itself still counts as valid.
    """
    if not rule.enabled:
        return RuleStatus.inactive
    if rule.valid_from is not None and now < rule.valid_from:
        return RuleStatus.scheduled
    if rule.valid_to is not None and now > rule.valid_to:
        return RuleStatus.inactive
    if in_window(rule, now):
        return RuleStatus.active
    return RuleStatus.scheduled


def rule_statuses(
    rules: Iterable[PricingRule], now: datetime
) -> List[Tuple[int, RuleStatus]]:
    return [(rule.id, resolve_status(rule, now)) for rule in rules]
