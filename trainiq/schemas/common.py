"""
Categorical labels shared by every engine output.

All enums are ``str`` enums so they serialise as their plain value in API
responses.
"""

from enum import Enum


class Trend(str, Enum):
    """Direction of a series when comparing its recent half to its earlier half."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class LoadIntensity(str, Enum):
    """Bucket of ``current_load / sustainable_load``."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class RiskLevel(str, Enum):
    """Ordered risk / severity / impact scale."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class Priority(str, Enum):
    """Ranking of recommended actions (``URGENT`` first)."""
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


RISK_ORDER: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MODERATE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}

PRIORITY_ORDER: dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}
