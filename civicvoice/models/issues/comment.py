# Standard library imports
from datetime import datetime
import enum
from typing import TYPE_CHECKING
import uuid

# Third-party imports
from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from civicvoice.models.base import Base
from civicvoice.utils.datetime_utils import utc_now

if TYPE_CHECKING:
    # Local application imports
    from civicvoice.models.issues.issue import Issue

ADMIN_NOTE_PREFIX = "[ADMIN UPDATE]"


class CommentAuthorRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class IssueComment(Base):
    __tablename__ = "issue_comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Users or admins; no foreign key since the two live in different tables
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    author_role: Mapped[CommentAuthorRole] = mapped_column(
        SQLEnum(CommentAuthorRole, values_callable=lambda e: [m.value for m in e], native_enum=False, length=10),
        nullable=False,
        default=CommentAuthorRole.USER,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    issue: Mapped["Issue"] = relationship("Issue", back_populates="comments")
