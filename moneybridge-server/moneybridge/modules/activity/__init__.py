"""Activity log exports"""

from .models import ActivityAction, ActivityRecord
from .repository import AuditLog
from .service import ActivityLogService

__all__ = [
    "ActivityAction",
    "ActivityLogService",
    "ActivityRecord",
    "AuditLog",
]
