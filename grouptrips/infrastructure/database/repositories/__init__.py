"""SQLAlchemy-backed repository implementations."""

from .pending_trip_repository import SqlPendingTripRepository
from .trip_repository import SqlTripRepository, sql_repository_scope

__all__ = [
    "SqlPendingTripRepository",
    "SqlTripRepository",
    "sql_repository_scope",
]
