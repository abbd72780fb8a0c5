# Standard library imports
from datetime import datetime
import enum

# Third-party imports
from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, String, text
from sqlalchemy.orm import Mapped, mapped_column, validates

# Local application imports
from civicvoice.models.base import Base
from civicvoice.models.mixins.uuid_timestamp import UUIDTimeStampMixin
from civicvoice.utils.datetime_utils import utc_now


class AdminRole(str, enum.Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
    MODERATOR = "moderator"


class Admin(UUIDTimeStampMixin, Base):
    __tablename__ = "admins"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    role: Mapped[AdminRole] = mapped_column(
        SQLEnum(AdminRole, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=AdminRole.ADMIN,
    )
    # Scope of authority for every role except superadmin (matched against Issue.colony)
    region: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    # Capability flags
    can_update_status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    can_delete_issues: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    can_manage_users: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    can_view_analytics: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="Last login timestamp",
    )

    @validates("email")
    def normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    @validates("region")
    def validate_region(self, key: str, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Admin region is required")
        return value.strip()

    def __str__(self) -> str:
        return f"Admin: {self.name} ({self.role.value}, {self.region})"
