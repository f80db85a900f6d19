from sqlalchemy import Column, Integer, String, Numeric, JSON, Boolean, DateTime, Time, Text
import datetime
from venue_pricing.database.connection import Base


class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    priority = Column(String, default="medium", nullable=False)  # low/medium/high
    multiplier = Column(Numeric(5, 4), nullable=False)  # 0.85 = 15% off
    valid_from = Column(DateTime, nullable=True)  # venue-local
    valid_to = Column(DateTime, nullable=True)
    # weekday numbers, Monday=0; empty = every day
    days_of_week = Column(JSON, default=list)
    time_start = Column(Time, nullable=True)
    time_end = Column(Time, nullable=True)
    # NULL = all items, otherwise a beer style tag
    scope = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
