from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator
from typing import List, Optional, Union
from datetime import datetime, time

from venue_pricing.enums.rule_priority import RulePriority
from venue_pricing.enums.rule_status import RuleStatus
from venue_pricing.enums.weekday import Weekday


def _parse_days(value):
    if value is None:
        return []
    if isinstance(value, (str, int)):
        value = [value]
    return sorted({Weekday.parse(day) for day in value})


def _clean_scope(value):
    # None = all items; a blank named scope can never match anything
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("scope must be a non-empty style name or null for all items")
    return value


class _ScheduleFields(BaseModel):
    @field_validator("days_of_week", mode="before", check_fields=False)
    @classmethod
    def parse_days(cls, value):
        return _parse_days(value)

    @field_validator("scope", check_fields=False)
    @classmethod
    def clean_scope(cls, value):
        return _clean_scope(value)

    @field_serializer("days_of_week", check_fields=False)
    def serialize_days(self, days):
        if days is None:
            return None
        return [Weekday(day).name for day in days]


class PricingRuleBase(_ScheduleFields):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    enabled: bool = True
    priority: RulePriority = RulePriority.medium
    # whole percent off; stored as a multiplier
    discount_percent: int = Field(ge=1, le=99)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    days_of_week: List[Weekday] = []
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    scope: Optional[str] = None

    @model_validator(mode="after")
    def check_validity_range(self):
        if self.valid_from and self.valid_to and self.valid_from > self.valid_to:
            raise ValueError("valid_from must not be after valid_to")
        return self


class PricingRuleCreate(PricingRuleBase):
    pass


class PricingRuleUpdate(_ScheduleFields):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    enabled: Optional[bool] = None
    priority: Optional[RulePriority] = None
    discount_percent: Optional[int] = Field(default=None, ge=1, le=99)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    days_of_week: Optional[List[Weekday]] = None
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    scope: Optional[str] = None


class PricingRuleResponse(BaseModel):
    """
    Read model. Built from stored rows, so it carries no write-time checks:
    a corrupt row is still listed (as inactive) instead of failing the page.
    """

    id: int
    name: str
    description: Optional[str] = None
    enabled: bool
    priority: str
    discount_percent: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    days_of_week: List[Union[int, str]] = []
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    scope: Optional[str] = None
    status: RuleStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("days_of_week")
    def serialize_days(self, days):
        # unknown stored values are passed through untouched
        return [
            Weekday(day).name if isinstance(day, int) and 0 <= day <= 6 else day
            for day in days
        ]


class PricingRuleListResponse(BaseModel):
    rules: List[PricingRuleResponse]
    total: int
    page: int
    per_page: int
