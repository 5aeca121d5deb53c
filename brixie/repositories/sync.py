"""
Sync timestamp bookkeeping shared by the repositories.
"""

import logging
from datetime import datetime

from ..database import Database
from ..database.models import SyncTimestamp, SyncType
from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)


def record_sync(db: Database, sync_type: SyncType, success: bool, count: int):
    """Write the sync timestamp for a feed. Failures are logged, never raised."""
    timestamp = SyncTimestamp(
        sync_type=sync_type,
        last_sync=datetime.now(),
        is_successful=success,
        item_count=count,
    )
    try:
        db.sync.save(timestamp)
    except PersistenceError as e:
        logger.warning(f"Could not record {sync_type.value} sync timestamp: {e}")
