# Standard library imports
from datetime import datetime
import enum
from typing import Any
import uuid

# Third-party imports
from sqlalchemy import JSON, DateTime, Enum as SQLEnum, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# Local application imports
from civicvoice.models.base import Base
from civicvoice.utils.datetime_utils import utc_now


class AdminActionType(str, enum.Enum):
    STATUS_CHANGE = "status_change"
    COMMENT_ADDED = "comment_added"
    ISSUE_DELETED = "issue_deleted"
    ISSUE_FLAGGED = "issue_flagged"
    ISSUE_ASSIGNED = "issue_assigned"
    ISSUE_ESCALATED = "issue_escalated"


class ActionStatus(str, enum.Enum):
    """Statuses an audit record may mention; `flagged` exists only here, never on an issue."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    FLAGGED = "flagged"


def _values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class AdminAction(Base):
    """Append-only audit record of one administrative mutation."""

    __tablename__ = "admin_actions"
    __table_args__ = (
        Index("ix_admin_actions_admin_created", "admin_id", "created_at"),
        Index("ix_admin_actions_issue_created", "issue_id", "created_at"),
        Index("ix_admin_actions_type_created", "action_type", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # Plain column: the record must outlive a deleted issue
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    action_type: Mapped[AdminActionType] = mapped_column(
        SQLEnum(AdminActionType, values_callable=_values, native_enum=False, length=30),
        nullable=False,
    )
    old_status: Mapped[ActionStatus | None] = mapped_column(
        SQLEnum(ActionStatus, values_callable=_values, native_enum=False, length=20),
        nullable=True,
    )
    new_status: Mapped[ActionStatus | None] = mapped_column(
        SQLEnum(ActionStatus, values_callable=_values, native_enum=False, length=20),
        nullable=True,
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    extra_data: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
