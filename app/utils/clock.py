"""
Timezone-aware clock. All stored timestamps are UTC-aware.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
