# Standard library imports
from datetime import datetime
from typing import TYPE_CHECKING
import uuid

# Third-party imports
from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from civicvoice.models.base import Base

if TYPE_CHECKING:
    # Local application imports
    from civicvoice.models.issues.issue import Issue


class UpvoteEntry(Base):
    """One row of an issue's upvote ledger."""

    __tablename__ = "issue_upvotes"
    # Set semantics on user_id per issue; concurrent duplicate inserts lose here
    __table_args__ = (UniqueConstraint("issue_id", "user_id", name="uq_issue_upvotes_issue_user"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    upvoted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    issue: Mapped["Issue"] = relationship("Issue", back_populates="upvote_ledger")
