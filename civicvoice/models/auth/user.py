# Third-party imports
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

# Local application imports
from civicvoice.models.base import Base
from civicvoice.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class User(UUIDTimeStampMixin, Base):
    """A citizen who reports and upvotes issues."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320),
        index=True,
        unique=True,
        nullable=False,
        comment="User's email (acts as username)",
    )

    def __str__(self) -> str:
        return f"User: {self.name} - {self.email}"
