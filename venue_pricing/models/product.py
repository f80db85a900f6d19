from sqlalchemy import Column, String, Numeric, DateTime
from datetime import datetime
from venue_pricing.database.connection import Base

class Product(Base):
    __tablename__ = "products"

    product_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # beer style, matched against pricing rule scopes
    style = Column(String, nullable=True, index=True)

    base_price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String, default="USD")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)
