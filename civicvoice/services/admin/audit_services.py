# Standard library imports
from dataclasses import dataclass
from typing import Any
import uuid

# Third-party imports
from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from civicvoice.core.monitoring.logging import get_contextual_logger
from civicvoice.models.admin.admin_action import ActionStatus, AdminAction, AdminActionType
from civicvoice.services.exceptions import StorageUnavailable
from civicvoice.services.issues.issue_store import translate_storage_errors
from civicvoice.utils.datetime_utils import Clock, ensure_utc, utc_now


@dataclass(frozen=True)
class AuditQuery:
    admin_id: uuid.UUID | None = None
    issue_id: uuid.UUID | None = None
    action_type: AdminActionType | None = None
    offset: int = 0
    limit: int = 25


class AuditLog:
    """
    Append-only trail of administrative actions.

    Records are written after the primary mutation has committed. A failed
    write is logged at ERROR (and so reaches Sentry) but is never raised:
    the mutation it describes has already happened.
    """

    def __init__(self, session: AsyncSession, *, clock: Clock = utc_now, request_id: str | None = None):
        self.session = session
        self.clock = clock
        self.request_id = request_id

    async def record(
        self,
        *,
        admin_id: uuid.UUID,
        issue_id: uuid.UUID,
        action_type: AdminActionType,
        old_status: ActionStatus | str | None = None,
        new_status: ActionStatus | str | None = None,
        comment: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> uuid.UUID | None:
        """Append one record. Returns its id, or None if the write failed."""
        logger = get_contextual_logger(
            __name__,
            request_id=self.request_id,
            admin_id=admin_id,
            issue_id=issue_id,
            action_type=action_type.value,
        )
        action_id = uuid.uuid4()
        statement = insert(AdminAction).values(
            id=action_id,
            admin_id=admin_id,
            issue_id=issue_id,
            action_type=action_type,
            old_status=ActionStatus(old_status) if old_status is not None else None,
            new_status=ActionStatus(new_status) if new_status is not None else None,
            comment=comment,
            extra_data=metadata or {},
            request_id=self.request_id,
            created_at=ensure_utc(self.clock()),
        )
        try:
            with translate_storage_errors():
                await self.session.execute(statement)
                await self.session.commit()
        except (SQLAlchemyError, StorageUnavailable):
            logger.exception("Failed to write admin action audit record")
            await self.session.rollback()
            return None

        logger.debug("Admin action recorded")
        return action_id

    async def list_actions(self, query: AuditQuery) -> tuple[list[AdminAction], int]:
        """Records matching every given filter, newest first."""
        filters = []
        if query.admin_id is not None:
            filters.append(AdminAction.admin_id == query.admin_id)
        if query.issue_id is not None:
            filters.append(AdminAction.issue_id == query.issue_id)
        if query.action_type is not None:
            filters.append(AdminAction.action_type == query.action_type)

        statement = (
            select(AdminAction)
            .where(*filters)
            .order_by(AdminAction.created_at.desc(), AdminAction.id)
            .offset(query.offset)
            .limit(query.limit)
        )
        count_statement = select(func.count()).select_from(AdminAction).where(*filters)

        with translate_storage_errors():
            total = (await self.session.execute(count_statement)).scalar_one()
            actions = list((await self.session.execute(statement)).scalars().all())
        return actions, total
