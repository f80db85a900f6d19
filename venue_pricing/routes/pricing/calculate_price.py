import logging
from datetime import datetime
from typing import Optional
from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from venue_pricing.core.clock import to_venue_local
from venue_pricing.core.config import settings
from venue_pricing.database.connection import get_db
from venue_pricing.schemas.price_quote import PriceQuoteResponse
from venue_pricing.services.pricing_service.calculate_price import (
    calculate_final_price,
    get_product,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pricing & Calculation"])


@router.get(
    "/products/{product_id}/calculate-price",
    response_model=PriceQuoteResponse,
)
def calculate_price(
    product_id: str,
    quantity: int = 1,
    at: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    """
    Price a product at ``at`` (default: now at the venue).

    The winning rule is picked by priority, then scope specificity, then
    lowest rule id. Without an active rule the base price is returned.
    """

    if quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be positive")

    product = get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    now = to_venue_local(at)

    # ---- measure calculation time ----
    start = perf_counter()
    result = calculate_final_price(db=db, product=product, now=now, quantity=quantity)
    duration_ms = (perf_counter() - start) * 1000.0

    if duration_ms > settings.PRICE_CALC_WARN_MS:
        logger.warning(
            "Price calculation for product %s took %.2f ms (quantity=%s)",
            product_id, duration_ms, quantity,
        )

    return PriceQuoteResponse(
        product_id=product.product_id,
        name=product.name,
        style=product.style,
        currency=product.currency or "USD",
        evaluated_at=now,
        calculated_in_ms=duration_ms,
        **result,
    )
