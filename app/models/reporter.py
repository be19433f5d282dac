"""
Reporter profile and viewer roles.

Credentials are handled by the external authentication layer. This model
only keeps the profile fields the map view joins onto reports.
"""

from pydantic import BaseModel, Field
from typing import FrozenSet, Optional
from enum import Enum


class Capability(str, Enum):
    VIEW_IDENTITY = "view_identity"
    CHANGE_STATUS = "change_status"
    MANAGE_INFRASTRUCTURE = "manage_infrastructure"


class ViewerRole(str, Enum):
    CITIZEN = "citizen"
    FIELD_WORKER = "fieldWorker"
    AUTHORITY = "authority"

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return ROLE_CAPABILITIES[self]

    def can(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES[self]


ROLE_CAPABILITIES = {
    ViewerRole.CITIZEN: frozenset(),
    ViewerRole.FIELD_WORKER: frozenset({Capability.VIEW_IDENTITY, Capability.CHANGE_STATUS}),
    ViewerRole.AUTHORITY: frozenset({
        Capability.VIEW_IDENTITY,
        Capability.CHANGE_STATUS,
        Capability.MANAGE_INFRASTRUCTURE,
    }),
}


class ReporterProfileUpdate(BaseModel):
    """Profile fields supplied when registering or updating a reporter."""
    full_name: Optional[str] = Field(None, max_length=120)
    role: ViewerRole = ViewerRole.CITIZEN
    street: Optional[str] = Field(None, max_length=200)
    house_number: Optional[str] = Field(None, max_length=40)
    ward: Optional[str] = Field(None, max_length=40)
    age: Optional[int] = Field(None, ge=0, le=130)


class ReporterProfile(ReporterProfileUpdate):
    reporter_id: str
