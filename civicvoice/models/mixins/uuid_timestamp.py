# Standard library imports
from datetime import datetime
import uuid

# Third-party imports
from sqlalchemy import DateTime, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

# Local application imports
from civicvoice.utils.datetime_utils import utc_now


class UUIDTimeStampMixin:
    """A reusable mixin that:
    - Provides a UUID primary key named 'id'
    - Includes created_at and updated_at timestamps

    Timestamps are filled in Python so every backend (Postgres, SQLite) stores
    UTC; the server default only covers rows written outside the ORM.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )
