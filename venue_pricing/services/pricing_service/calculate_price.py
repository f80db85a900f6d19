from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from venue_pricing.models.product import Product
from venue_pricing.services.pricing_engine.calculator import quote_price
from venue_pricing.services.pricing_service.pricing_service import get_candidate_rules


def get_product(db: Session, product_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.product_id == product_id).first()


def calculate_final_price(
    db: Session,
    product: Product,
    now: datetime,
    quantity: int = 1,
) -> Dict[str, Any]:
    """
    Price one product at venue-local ``now``.

    Business rules:
    - At most one pricing rule applies (see the conflict resolver).
    - No applicable rule means the base price, unchanged.
    - The line total is the rounded unit price times quantity.
    """
    rules = get_candidate_rules(db, product.style)
    resolved = quote_price(rules, product.style, product.base_price, now)

    applied = None
    if resolved.applied_rule_id is not None:
        applied = next(rule for rule in rules if rule.id == resolved.applied_rule_id)

    return {
        "base_price": resolved.base_price,
        "final_price": resolved.final_price,
        "discount_percent": resolved.discount_percent,
        "applied_rule_id": resolved.applied_rule_id,
        "applied_rule_name": applied.name if applied else None,
        "quantity": quantity,
        "total_price": resolved.final_price * quantity,
    }
