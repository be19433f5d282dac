"""
Report store selection.

USE_MOCK_DB=true selects the in-process store, otherwise Firestore.
"""

from typing import Optional
import logging

from app.core.settings import settings
from app.store.base import ReportRecord, ReportStore
from app.store.memory_store import MemoryReportStore

logger = logging.getLogger(__name__)

__all__ = ["ReportRecord", "ReportStore", "MemoryReportStore", "build_store"]


def build_store(use_mock: Optional[bool] = None) -> ReportStore:
    use_mock = settings.USE_MOCK_DB if use_mock is None else use_mock
    if use_mock:
        logger.info(f"[STORE] USING IN-PROCESS STORE (snapshot: {settings.MOCK_DB_PATH or 'disabled'})")
        return MemoryReportStore(snapshot_path=settings.MOCK_DB_PATH)

    from app.config.firebase import get_db
    from app.store.firestore_store import FirestoreReportStore

    return FirestoreReportStore(get_db())
