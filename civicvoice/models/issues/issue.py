# Standard library imports
import enum
from typing import TYPE_CHECKING
import uuid

# Third-party imports
from sqlalchemy import JSON, CheckConstraint, Enum as SQLEnum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from civicvoice.models.base import Base
from civicvoice.models.mixins.uuid_timestamp import UUIDTimeStampMixin

if TYPE_CHECKING:
    # Local application imports
    from civicvoice.models.issues.comment import IssueComment
    from civicvoice.models.issues.upvote import UpvoteEntry


class IssueStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class IssuePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Issue(Base, UUIDTimeStampMixin):
    __tablename__ = "issues"
    __table_args__ = (
        CheckConstraint("upvote_count >= 0", name="ck_issues_upvote_count_non_negative"),
        CheckConstraint("target >= 1", name="ck_issues_target_positive"),
    )

    # Issue details
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[IssueStatus] = mapped_column(
        SQLEnum(IssueStatus, values_callable=_enum_values, native_enum=False, length=20),
        default=IssueStatus.OPEN,
        nullable=False,
        index=True,
    )
    priority: Mapped[IssuePriority] = mapped_column(
        SQLEnum(IssuePriority, values_callable=_enum_values, native_enum=False, length=10),
        default=IssuePriority.LOW,
        nullable=False,
    )
    concern_authority: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Location information; colony is the region key admins are scoped by
    colony: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    pincode: Mapped[str] = mapped_column(String(20), nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Media and labels
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Reporter and support
    reporter_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    target: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    # Cached size of the upvote ledger, only ever changed with atomic SQL arithmetic
    upvote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    upvote_ledger: Mapped[list["UpvoteEntry"]] = relationship(
        "UpvoteEntry",
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="UpvoteEntry.upvoted_at",
    )
    comments: Mapped[list["IssueComment"]] = relationship(
        "IssueComment",
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="IssueComment.created_at",
    )

    def __str__(self) -> str:
        return f"Issue: {self.title} ({self.colony}) - {self.status.value}"
