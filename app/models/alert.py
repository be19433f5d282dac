"""
Emergency alert models.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from enum import Enum

from app.models.report import GeoPoint


class AlertStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


class Alert(BaseModel):
    """Append-only alert derived from a high-risk report."""
    id: str
    type: str
    message: str
    location: GeoPoint
    status: AlertStatus = AlertStatus.ACTIVE
    created_at: datetime
    report_id: Optional[str] = None
