"""
FastAPI dependencies for shared resources and caller identity.

The store and orchestrator are created in the application lifespan and
kept on app.state. The caller's identity comes from the X-Reporter-Id
header set by the authentication layer in front of this service.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from app.models.reporter import Capability, ViewerRole
from app.services.classification_orchestrator import ClassificationOrchestrator
from app.services.errors import PermissionDenied
from app.services.reporter_service import resolve_viewer_role
from app.store.base import ReportStore


def get_store(request: Request) -> ReportStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> ClassificationOrchestrator:
    return request.app.state.orchestrator


def get_caller_id(
    x_reporter_id: Optional[str] = Header(None, alias="X-Reporter-Id", description="Authenticated reporter id"),
) -> Optional[str]:
    if x_reporter_id is None:
        return None
    return x_reporter_id.strip() or None


def require_caller_id(caller_id: Optional[str] = Depends(get_caller_id)) -> str:
    if caller_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity (X-Reporter-Id)"
        )
    return caller_id


async def get_viewer_role(
    caller_id: Optional[str] = Depends(get_caller_id),
    store: ReportStore = Depends(get_store),
) -> ViewerRole:
    return await resolve_viewer_role(store, caller_id)


def ensure_capability(role: ViewerRole, capability: Capability) -> None:
    if not role.can(capability):
        raise PermissionDenied(f"Role '{role.value}' cannot {capability.value.replace('_', ' ')}")


def ensure_self_or_capability(caller_id: Optional[str], role: ViewerRole, owner_id: str, capability: Capability) -> None:
    if caller_id is not None and caller_id == owner_id:
        return
    ensure_capability(role, capability)
