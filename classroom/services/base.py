"""
Base service class for the classroom performance read path.

Provides the shared data-fetch boundary and the request clock for all
service layer operations.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from classroom.operations.roster_operations import RosterOperations

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for all services with access to roster data operations."""

    def __init__(self, database, roster_operations: Optional[RosterOperations] = None):
        """
        Initialize base service with a database.

        Args:
            database: Initialized Database instance
            roster_operations: Optional shared RosterOperations; one is created if omitted
        """
        self.database = database
        self.roster = roster_operations or RosterOperations(database)

    @staticmethod
    def current_time(now: Optional[datetime] = None) -> datetime:
        """Request clock as naive UTC, matching how timestamps are stored."""
        if now is not None:
            return now
        return datetime.now(timezone.utc).replace(tzinfo=None)
