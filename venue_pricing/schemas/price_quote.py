from decimal import Decimal
from pydantic import BaseModel, field_serializer
from typing import Optional
from datetime import datetime


class PriceQuoteResponse(BaseModel):
    product_id: str
    name: str
    style: Optional[str] = None
    currency: str

    base_price: Decimal
    final_price: Decimal
    discount_percent: int
    applied_rule_id: Optional[int] = None
    applied_rule_name: Optional[str] = None

    quantity: int
    total_price: Decimal

    # venue-local instant the rules were evaluated at
    evaluated_at: datetime
    calculated_in_ms: float

    @field_serializer("base_price", "final_price", "total_price")
    def money(self, value: Decimal) -> str:
        return f"{value:.2f}"
