"""
Map view models.

ReportPoint.reporter and ReportPoint.description are only populated for
roles holding the view_identity capability.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from app.models.alert import Alert
from app.models.assessment import RiskLevel
from app.models.report import ClassificationState, GeoPoint, ReportCategory, ReportStatus


class ReporterDetails(BaseModel):
    reporter_id: str
    full_name: Optional[str] = None
    house_number: Optional[str] = None
    street: Optional[str] = None
    ward: Optional[str] = None
    age: Optional[int] = None


class ReportPoint(BaseModel):
    id: str
    location: GeoPoint
    category: ReportCategory
    status: ReportStatus
    severity: int
    risk_level: Optional[RiskLevel] = None
    classification: ClassificationState
    summary: str
    created_at: datetime
    description: Optional[str] = None
    reporter: Optional[ReporterDetails] = None


class RiskZone(BaseModel):
    report_id: str
    center: GeoPoint
    radius_meters: float
    risk_level: RiskLevel


class InfrastructureFeature(BaseModel):
    """Static map layer entry (well, drain, clinic...)."""
    id: str
    type: str = Field(..., min_length=1, max_length=60)
    name: str = Field(..., min_length=1, max_length=200)
    location: GeoPoint
    status: Optional[str] = Field(None, max_length=60)


class InfrastructureCreate(BaseModel):
    type: str = Field(..., min_length=1, max_length=60)
    name: str = Field(..., min_length=1, max_length=200)
    location: GeoPoint
    status: Optional[str] = Field(None, max_length=60)


class MapView(BaseModel):
    points: List[ReportPoint] = Field(default_factory=list)
    risk_zones: List[RiskZone] = Field(default_factory=list)
    alerts: List[Alert] = Field(default_factory=list)
    infrastructure: List[InfrastructureFeature] = Field(default_factory=list)
