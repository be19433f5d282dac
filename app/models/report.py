"""
Pydantic models for citizen reports.
These models handle validation for report submission and responses.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional
from enum import Enum

from app.models.assessment import RiskAssessment


class ReportCategory(str, Enum):
    DISEASE = "disease"
    DRAINAGE = "drainage"
    OTHER = "other"


class ReportStatus(str, Enum):
    """
    Report lifecycle. A report starts ACTIVE and moves to SOLVED once,
    by a field worker or authority. It never reverts.
    """
    ACTIVE = "active"
    SOLVED = "solved"


class ClassificationState(str, Enum):
    """Where a report is in its single classification attempt."""
    PENDING = "pending"
    CLASSIFIED = "classified"
    UNCLASSIFIED = "unclassified"


class GeoPoint(BaseModel):
    """A point in decimal degrees."""
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    The reporter identity is not part of the body; it comes from the
    authenticated caller.
    """
    description: str = Field(..., min_length=1, max_length=2000, description="What the citizen observed")
    severity: int = Field(..., ge=1, le=10, strict=True, description="Self-assessed severity, 1-10")
    category: ReportCategory = Field(..., description="disease, drainage or other")
    location: GeoPoint

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description must not be blank")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "description": "Fever and vomiting in three houses near the ward office",
                "severity": 7,
                "category": "disease",
                "location": {"latitude": 12.9716, "longitude": 77.5946},
            }
        }


class Report(BaseModel):
    """A stored report."""
    id: str
    reporter_id: str
    description: str
    severity: int
    category: ReportCategory
    location: GeoPoint
    status: ReportStatus = ReportStatus.ACTIVE
    classification: ClassificationState = ClassificationState.PENDING
    classification_error: Optional[str] = None
    created_at: datetime
    solved_at: Optional[datetime] = None


class ReportSubmitted(BaseModel):
    report_id: str
    status: ReportStatus = ReportStatus.ACTIVE
    classification: ClassificationState = ClassificationState.PENDING


class ReportWithAssessment(BaseModel):
    """A report joined with its optional risk assessment."""
    report: Report
    assessment: Optional[RiskAssessment] = None
