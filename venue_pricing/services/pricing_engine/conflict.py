import logging
from datetime import datetime
from typing import Iterable, List, Optional

from venue_pricing.enums.rule_status import RuleStatus
from venue_pricing.services.pricing_engine.rules import (
    AmbiguousScopeError,
    InvalidRuleError,
    PricingRule,
)
from venue_pricing.services.pricing_engine.scope import matches, specificity
from venue_pricing.services.pricing_engine.status import resolve_status

logger = logging.getLogger(__name__)


def _precedence(rule: PricingRule):
    # smallest key wins
    return (-rule.priority.rank, -specificity(rule.scope), rule.id)


def active_candidates(
    candidates: Iterable[PricingRule],
    scope_tag: Optional[str],
    now: datetime,
) -> List[PricingRule]:
    """
    Rules that cover ``scope_tag`` and are active at ``now``.
    Rules failing their invariants are logged and skipped.
    """
    eligible: List[PricingRule] = []
    for rule in candidates:
        try:
            rule.validate()
            if not matches(rule.scope, scope_tag):
                continue
            if resolve_status(rule, now) is not RuleStatus.active:
                continue
        except (InvalidRuleError, TypeError) as exc:
            logger.warning(
                "Skipping pricing rule %s: %s", getattr(rule, "id", "?"), exc
            )
            continue
        eligible.append(rule)
    return eligible


def resolve(
    candidates: Iterable[PricingRule],
    scope_tag: Optional[str],
    now: datetime,
    strict: bool = False,
) -> Optional[PricingRule]:
    """
    Pick the single rule to apply to an item at ``now``.

    Order: priority (high first), then specificity (named scope beats
    "all items"), then lowest id. Rules never stack.

    When the top two tie on priority and specificity the lowest id wins,
    unless ``strict`` is set, in which case AmbiguousScopeError is raised.
    """
    eligible = active_candidates(candidates, scope_tag, now)
    if not eligible:
        return None
    if len(eligible) == 1:
        return eligible[0]

    ranked = sorted(eligible, key=_precedence)
    winner, runner_up = ranked[0], ranked[1]
    if _precedence(winner)[:2] == _precedence(runner_up)[:2]:
        tied = [r.id for r in ranked if _precedence(r)[:2] == _precedence(winner)[:2]]
        if strict:
            raise AmbiguousScopeError(tied)
        logger.debug("Rules %s tied for %r, picked lowest id %s", tied, scope_tag, winner.id)
    return winner
