"""
Database models package.

This package contains all SQLAlchemy models for the application.
"""

# Local application imports
from civicvoice.models.admin import ActionStatus, Admin, AdminAction, AdminActionType, AdminRole
from civicvoice.models.auth import User
from civicvoice.models.base import Base
from civicvoice.models.issues import (
    ADMIN_NOTE_PREFIX,
    CommentAuthorRole,
    Issue,
    IssueComment,
    IssuePriority,
    IssueStatus,
    UpvoteEntry,
)

__all__ = [
    "Base",
    # Citizen models
    "User",
    # Issue models
    "ADMIN_NOTE_PREFIX",
    "CommentAuthorRole",
    "Issue",
    "IssueComment",
    "IssuePriority",
    "IssueStatus",
    "UpvoteEntry",
    # Administration models
    "ActionStatus",
    "Admin",
    "AdminAction",
    "AdminActionType",
    "AdminRole",
]
