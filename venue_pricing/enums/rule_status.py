from enum import Enum


class RuleStatus(str, Enum):
    scheduled = "scheduled"
    active = "active"
    inactive = "inactive"
