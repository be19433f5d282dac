"""
Risk assessment models.

A RiskAssessment is written once per report by the classification
orchestrator and never updated.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class RiskLevel(str, Enum):
    """Ordered: Low < Medium < High < Critical."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    def at_least(self, other: "RiskLevel") -> bool:
        return self.rank >= other.rank


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class RiskResult(BaseModel):
    """Validated classifier output."""
    predicted_condition: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    risk_level: RiskLevel
    recommended_action: str


class RiskAssessment(BaseModel):
    report_id: str
    predicted_condition: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    risk_level: RiskLevel
    recommended_action: str
    created_at: datetime

    @classmethod
    def from_result(cls, report_id: str, result: RiskResult, created_at: datetime) -> "RiskAssessment":
        return cls(
            report_id=report_id,
            predicted_condition=result.predicted_condition,
            confidence=result.confidence,
            risk_level=result.risk_level,
            recommended_action=result.recommended_action,
            created_at=created_at,
        )
