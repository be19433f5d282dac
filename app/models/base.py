"""
Shared response envelopes.

Models describe payload shape only; decisions live in the services layer.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


class BaseResponse(BaseModel):
    """
    Envelope for action endpoints (as opposed to plain resource reads).
    """
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StatusChangeResponse(BaseResponse):
    report_id: str
    status: str
    changed: bool = Field(..., description="False when the report was already in the target status")
