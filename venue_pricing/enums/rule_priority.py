from enum import Enum


class RulePriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    RulePriority.low: 0,
    RulePriority.medium: 1,
    RulePriority.high: 2,
}
