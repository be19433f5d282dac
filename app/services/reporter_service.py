"""
Reporter Service - profiles and role resolution.

The caller's identity is an opaque id vouched for by the authentication
layer. The role is looked up here, never taken from the request.
"""

from typing import Optional
import asyncio
import logging

from app.models.reporter import ReporterProfile, ReporterProfileUpdate, ViewerRole
from app.services.errors import NotFound, PermissionDenied
from app.store.base import ReportStore

logger = logging.getLogger(__name__)


async def upsert_reporter(store: ReportStore, reporter_id: str, update: ReporterProfileUpdate) -> ReporterProfile:
    profile = ReporterProfile(reporter_id=reporter_id, **update.model_dump())
    saved = await asyncio.to_thread(store.upsert_reporter, profile)
    logger.info(f"Reporter profile saved: {reporter_id} ({saved.role.value})")
    return saved


async def get_reporter(store: ReportStore, reporter_id: str) -> ReporterProfile:
    profile = await asyncio.to_thread(store.get_reporter, reporter_id)
    if profile is None:
        raise NotFound("reporter", reporter_id)
    return profile


async def resolve_viewer_role(store: ReportStore, reporter_id: Optional[str]) -> ViewerRole:
    """Unknown or anonymous callers get the citizen role."""
    if not reporter_id:
        return ViewerRole.CITIZEN
    profile = await asyncio.to_thread(store.get_reporter, reporter_id)
    return profile.role if profile else ViewerRole.CITIZEN


async def save_profile(
    store: ReportStore,
    caller_id: str,
    reporter_id: str,
    update: ReporterProfileUpdate,
) -> ReporterProfile:
    """
    Create or update a profile on behalf of the caller.

    Reporters may edit their own profile but keep their current role (new
    profiles start as citizen). Only an authority may edit other profiles
    or grant an elevated role.
    """
    caller_role = await resolve_viewer_role(store, caller_id)
    if caller_role == ViewerRole.AUTHORITY:
        return await upsert_reporter(store, reporter_id, update)

    if caller_id != reporter_id:
        raise PermissionDenied("Only an authority may edit another reporter's profile")

    existing = await asyncio.to_thread(store.get_reporter, reporter_id)
    current_role = existing.role if existing else ViewerRole.CITIZEN
    if update.role != current_role:
        raise PermissionDenied(f"Role '{current_role.value}' cannot change its own role")

    return await upsert_reporter(store, reporter_id, update)
