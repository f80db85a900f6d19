import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from venue_pricing.core.clock import to_venue_local
from venue_pricing.enums.rule_status import RuleStatus
from venue_pricing.enums.weekday import Weekday
from venue_pricing.models.pricing_rule import PricingRule
from venue_pricing.schemas.pricing_rule import (
    PricingRuleCreate,
    PricingRuleResponse,
    PricingRuleUpdate,
)
from venue_pricing.services.pricing_engine import rules as engine
from venue_pricing.services.pricing_engine.calculator import (
    multiplier_to_percent,
    percent_to_multiplier,
)
from venue_pricing.services.pricing_engine.scope import normalize_tag
from venue_pricing.services.pricing_engine.status import resolve_status, rule_statuses

logger = logging.getLogger(__name__)


# --------------------------
# ROW <-> ENGINE
# --------------------------
def to_engine_rule(row: PricingRule) -> engine.PricingRule:
    """Validated engine snapshot of a stored rule. Raises InvalidRuleError."""
    return engine.build_rule(
        id=row.id,
        name=row.name,
        multiplier=row.multiplier,
        enabled=row.enabled,
        priority=row.priority,
        valid_from=row.valid_from,
        valid_to=row.valid_to,
        days_of_week=row.days_of_week or [],
        time_start=row.time_start,
        time_end=row.time_end,
        scope=row.scope,
    )


def to_engine_rules(rows: List[PricingRule]) -> List[engine.PricingRule]:
    """Convert rows, skipping (and logging) any that break rule invariants."""
    result: List[engine.PricingRule] = []
    for row in rows:
        try:
            result.append(to_engine_rule(row))
        except engine.InvalidRuleError as exc:
            logger.warning("Skipping stored pricing rule %s: %s", row.id, exc)
    return result


def status_of(row: PricingRule, now: datetime) -> RuleStatus:
    try:
        return resolve_status(to_engine_rule(row), now)
    except engine.InvalidRuleError as exc:
        logger.warning("Pricing rule %s is invalid, reported as inactive: %s", row.id, exc)
        return RuleStatus.inactive


def _stored_percent(multiplier) -> Optional[int]:
    if multiplier is None:
        return None
    try:
        return multiplier_to_percent(multiplier)
    except ValueError:
        return None


def _stored_days(days) -> list:
    # JSON column: keep ints/strings as stored, anything else shown as text
    if not isinstance(days, list):
        return []
    return [day if isinstance(day, (int, str)) and not isinstance(day, bool) else str(day) for day in days]


def to_response(
    row: PricingRule, now: datetime, status: Optional[RuleStatus] = None
) -> PricingRuleResponse:
    """
    Response for a stored row. Never fails on bad stored data: an invalid
    rule is reported as inactive with its raw values.
    """
    return PricingRuleResponse(
        id=row.id,
        name=row.name or "",
        description=row.description,
        enabled=bool(row.enabled),
        priority=str(row.priority),
        discount_percent=_stored_percent(row.multiplier),
        valid_from=row.valid_from,
        valid_to=row.valid_to,
        days_of_week=_stored_days(row.days_of_week),
        time_start=row.time_start,
        time_end=row.time_end,
        scope=row.scope,
        status=status if status is not None else status_of(row, now),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _check(row: PricingRule) -> None:
    # write-time validation; rule id may still be None for new rows
    to_engine_rule(row)


REQUIRED_FIELDS = ("name", "enabled", "priority", "discount_percent")


def _apply_fields(row: PricingRule, data: dict) -> None:
    # explicit nulls on required columns mean "leave as is"
    for key in REQUIRED_FIELDS:
        if key in data and data[key] is None:
            del data[key]
    if "discount_percent" in data:
        row.multiplier = percent_to_multiplier(data.pop("discount_percent"))
    if "days_of_week" in data:
        row.days_of_week = [int(Weekday.parse(day)) for day in data.pop("days_of_week") or []]
    for key in ("valid_from", "valid_to"):
        if data.get(key) is not None:
            data[key] = to_venue_local(data[key])
    if "priority" in data:
        data["priority"] = getattr(data["priority"], "value", data["priority"])
    for key, value in data.items():
        setattr(row, key, value)


# --------------------------
# CREATE
# --------------------------
def create_pricing_rule(db: Session, rule: PricingRuleCreate) -> PricingRule:
    db_rule = PricingRule()
    _apply_fields(db_rule, rule.model_dump())
    _check(db_rule)

    db.add(db_rule)
    db.commit()
    db.refresh(db_rule)
    logger.info("Created pricing rule %s (%s)", db_rule.id, db_rule.name)
    return db_rule


# --------------------------
# READ
# --------------------------
def get_pricing_rule(db: Session, rule_id: int) -> Optional[PricingRule]:
    return db.query(PricingRule).filter(PricingRule.id == rule_id).first()


def get_pricing_rules(
    db: Session,
    now: datetime,
    page: int = 1,
    per_page: int = 10,
    search: Optional[str] = None,
    enabled: Optional[bool] = None,
    status: Optional[RuleStatus] = None,
    order_dir: str = "asc",
    max_page_size: int = 100,
) -> Tuple[List[Tuple[PricingRule, RuleStatus]], int]:
    """
    Returns ([(row, status), ...], total) for one page. page is 1-based.

    Status is derived at ``now``, so the status filter runs in Python
    after the SQL filters.
    """
    page = max(page, 1)
    per_page = min(max(per_page, 1), max_page_size)

    query = db.query(PricingRule)
    if search:
        query = query.filter(PricingRule.name.ilike(f"%{search.strip()}%"))
    if enabled is not None:
        query = query.filter(PricingRule.enabled == enabled)

    order = PricingRule.name.desc() if order_dir == "desc" else PricingRule.name.asc()
    rows = query.order_by(order, PricingRule.id.asc()).all()

    # rows that fail conversion are logged by to_engine_rules and shown as inactive
    statuses = dict(rule_statuses(to_engine_rules(rows), now))
    with_status = [(row, statuses.get(row.id, RuleStatus.inactive)) for row in rows]
    if status is not None:
        with_status = [item for item in with_status if item[1] is status]

    total = len(with_status)
    offset = (page - 1) * per_page
    return with_status[offset:offset + per_page], total


def get_candidate_rules(db: Session, scope_tag: Optional[str]) -> List[engine.PricingRule]:
    """
    Enabled rules that could cover an item with ``scope_tag``.

    An untagged item can only be covered by "all items" rules. Named scopes
    are compared by the engine (SQL lower() is ASCII-only on SQLite).
    """
    query = db.query(PricingRule).filter(PricingRule.enabled.is_(True))
    if normalize_tag(scope_tag) is None:
        query = query.filter(PricingRule.scope.is_(None))
    return to_engine_rules(query.order_by(PricingRule.id.asc()).all())


# --------------------------
# UPDATE
# --------------------------
def update_pricing_rule(db: Session, rule_id: int, rule_update: PricingRuleUpdate) -> Optional[PricingRule]:
    db_rule = get_pricing_rule(db, rule_id)
    if not db_rule:
        return None

    _apply_fields(db_rule, rule_update.model_dump(exclude_unset=True))
    try:
        _check(db_rule)
    except engine.InvalidRuleError:
        db.rollback()
        raise

    db.commit()
    db.refresh(db_rule)
    logger.info("Updated pricing rule %s", db_rule.id)
    return db_rule


def _set_enabled(db: Session, rule_id: int, enabled: bool) -> Optional[PricingRule]:
    db_rule = get_pricing_rule(db, rule_id)
    if not db_rule:
        return None
    db_rule.enabled = enabled
    db.commit()
    db.refresh(db_rule)
    logger.info("Pricing rule %s %s", rule_id, "enabled" if enabled else "disabled")
    return db_rule


def activate_pricing_rule(db: Session, rule_id: int) -> Optional[PricingRule]:
    return _set_enabled(db, rule_id, True)


def deactivate_pricing_rule(db: Session, rule_id: int) -> Optional[PricingRule]:
    return _set_enabled(db, rule_id, False)


# --------------------------
# DELETE
# --------------------------
def delete_pricing_rule(db: Session, rule_id: int) -> bool:
    db_rule = get_pricing_rule(db, rule_id)
    if not db_rule:
        return False
    db.delete(db_rule)
    db.commit()
    logger.info("Deleted pricing rule %s", rule_id)
    return True
