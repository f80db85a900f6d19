from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from venue_pricing.core.clock import to_venue_local
from venue_pricing.core.config import settings
from venue_pricing.database.connection import get_db
from venue_pricing.enums.rule_status import RuleStatus
from venue_pricing.schemas.pricing_rule import (
    PricingRuleCreate,
    PricingRuleListResponse,
    PricingRuleResponse,
    PricingRuleUpdate,
)
from venue_pricing.services.pricing_engine.rules import InvalidRuleError
from venue_pricing.services.pricing_service.pricing_service import (
    create_pricing_rule, get_pricing_rules, get_pricing_rule, update_pricing_rule,
    delete_pricing_rule, deactivate_pricing_rule, activate_pricing_rule, to_response,
)


router = APIRouter(prefix="/pricing-rules", tags=["Pricing Rules"])


@router.post("/", response_model=PricingRuleResponse)
def create_rule(rule: PricingRuleCreate, db: Session = Depends(get_db)):
    try:
        created = create_pricing_rule(db, rule)
    except InvalidRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return to_response(created, to_venue_local())


@router.get("/", response_model=PricingRuleListResponse)
def list_rules(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    search: Optional[str] = None,
    enabled: Optional[bool] = None,
    status: Optional[RuleStatus] = None,
    order_dir: Literal["asc", "desc"] = "asc",
    at: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    """
    Paginated rules, each with its status at ``at`` (default: now at the
    venue). Status is never stored; it is worked out on every call.
    """
    now = to_venue_local(at)
    per_page = min(per_page, settings.RULES_MAX_PAGE_SIZE)
    items, total = get_pricing_rules(
        db,
        now=now,
        page=page,
        per_page=per_page,
        search=search,
        enabled=enabled,
        status=status,
        order_dir=order_dir,
        max_page_size=settings.RULES_MAX_PAGE_SIZE,
    )
    return PricingRuleListResponse(
        rules=[to_response(row, now, status) for row, status in items],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{rule_id}", response_model=PricingRuleResponse)
def get_rule(rule_id: int, at: Optional[datetime] = None, db: Session = Depends(get_db)):
    rule = get_pricing_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")
    return to_response(rule, to_venue_local(at))


@router.patch("/{rule_id}", response_model=PricingRuleResponse)
def update_rule(rule_id: int, rule: PricingRuleUpdate, db: Session = Depends(get_db)):
    try:
        updated = update_pricing_rule(db, rule_id, rule)
    except InvalidRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not updated:
        raise HTTPException(status_code=404, detail="Rule not found")
    return to_response(updated, to_venue_local())


@router.delete("/{rule_id}")
def delete_rule(rule_id: int, db: Session = Depends(get_db)):
    if not delete_pricing_rule(db, rule_id):
        raise HTTPException(status_code=404, detail="Rule not found")
    return {"message": "Rule deleted"}


@router.post("/{rule_id}/activate", response_model=PricingRuleResponse)
def activate_rule(rule_id: int, db: Session = Depends(get_db)):
    rule = activate_pricing_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")
    return to_response(rule, to_venue_local())


@router.post("/{rule_id}/deactivate", response_model=PricingRuleResponse)
def deactivate_rule(rule_id: int, db: Session = Depends(get_db)):
    rule = deactivate_pricing_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")
    return to_response(rule, to_venue_local())
