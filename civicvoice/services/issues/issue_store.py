"""
Issue Store: persistence primitives for issues and their upvote ledgers.

Each mutating primitive is a single conditional SQL statement (unique-backed
insert, conditional delete, compare-and-set update, ledger recount), so
no caller ever reads a value, decides in Python and writes it back. The store
never commits on its own except where noted; services own the transaction.
"""

# Standard library imports
import asyncio
from collections.abc import Awaitable, Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, TypeVar
import uuid

# Third-party imports
from sqlalchemy import and_, case, delete, func, insert, or_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError, TimeoutError as PoolTimeout
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

# Local application imports
from civicvoice.core.monitoring.logging import LoggerAdapter, get_logger
from civicvoice.models.auth.user import User
from civicvoice.models.issues.comment import CommentAuthorRole, IssueComment
from civicvoice.models.issues.issue import Issue, IssuePriority, IssueStatus
from civicvoice.models.issues.upvote import UpvoteEntry
from civicvoice.services.exceptions import AlreadyUpvoted, IssueNotFound, StorageUnavailable

logger = get_logger(__name__)

T = TypeVar("T")

SORTABLE_COLUMNS = {
    "created_at": Issue.created_at,
    "updated_at": Issue.updated_at,
    "upvote_count": Issue.upvote_count,
    "status": Issue.status,
}

PRIORITY_RANK = case(
    (Issue.priority == IssuePriority.LOW, 1),
    (Issue.priority == IssuePriority.MEDIUM, 2),
    (Issue.priority == IssuePriority.HIGH, 3),
    else_=0,
)


@contextmanager
def translate_storage_errors() -> Iterator[None]:
    """Turn transient driver failures into `StorageUnavailable`; constraint violations pass through."""
    try:
        yield
    except IntegrityError:
        raise
    except (OperationalError, InterfaceError, PoolTimeout) as exc:
        raise StorageUnavailable() from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            raise StorageUnavailable() from exc
        raise


async def with_storage_retry(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    backoff_seconds: float,
    log: logging.Logger | LoggerAdapter = logger,
) -> T:
    """
    Run `operation`, retrying on `StorageUnavailable`.

    Only pass operations whose writes are guarded against double application
    (unique-backed insert, conditional delete, compare-and-set) or reads.
    The session is rolled back before each new attempt.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except StorageUnavailable:
            try:
                await session.rollback()
            except DBAPIError:
                log.warning("Rollback after storage failure also failed", exc_info=True)
            if attempt >= attempts:
                log.error(f"Storage still unavailable after {attempts} attempts")
                raise
            log.warning(f"Storage unavailable, retrying (attempt {attempt + 1}/{attempts})")
            await asyncio.sleep(backoff_seconds * attempt)
            attempt += 1


@dataclass(frozen=True)
class IssueQuery:
    """Filters for issue listings. `region` is applied before everything else."""

    region: str | None = None
    status: IssueStatus | None = None
    category: str | None = None
    search: str | None = None
    sort: str = "created_at"
    descending: bool = True
    offset: int = 0
    limit: int | None = 20


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class IssueStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # Transactions

    async def commit(self) -> None:
        with translate_storage_errors():
            await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    # Point reads

    async def get_issue(self, issue_id: uuid.UUID, *, with_details: bool = False) -> Issue | None:
        query = select(Issue).where(Issue.id == issue_id).execution_options(populate_existing=True)
        if with_details:
            query = query.options(selectinload(Issue.upvote_ledger), selectinload(Issue.comments))
        with translate_storage_errors():
            result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def issue_exists(self, issue_id: uuid.UUID) -> bool:
        with translate_storage_errors():
            result = await self.session.execute(select(Issue.id).where(Issue.id == issue_id))
        return result.scalar_one_or_none() is not None

    async def user_exists(self, user_id: uuid.UUID) -> bool:
        with translate_storage_errors():
            result = await self.session.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

    async def get_upvote_count(self, issue_id: uuid.UUID) -> int | None:
        with translate_storage_errors():
            result = await self.session.execute(select(Issue.upvote_count).where(Issue.id == issue_id))
        return result.scalar_one_or_none()

    async def get_ledger_entry(self, issue_id: uuid.UUID, user_id: uuid.UUID) -> UpvoteEntry | None:
        query = (
            select(UpvoteEntry)
            .where(and_(UpvoteEntry.issue_id == issue_id, UpvoteEntry.user_id == user_id))
            .execution_options(populate_existing=True)
        )
        with translate_storage_errors():
            result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def ledger_sizes(self, issue_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, int]:
        """Actual ledger size per issue; issues without entries map to 0."""
        if not issue_ids:
            return {}
        query = (
            select(UpvoteEntry.issue_id, func.count(UpvoteEntry.id))
            .where(UpvoteEntry.issue_id.in_(issue_ids))
            .group_by(UpvoteEntry.issue_id)
        )
        with translate_storage_errors():
            result = await self.session.execute(query)
        sizes = {issue_id: 0 for issue_id in issue_ids}
        sizes.update({row[0]: row[1] for row in result.all()})
        return sizes

    async def reporter_names(self, reporter_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, str]:
        if not reporter_ids:
            return {}
        with translate_storage_errors():
            result = await self.session.execute(select(User.id, User.name).where(User.id.in_(set(reporter_ids))))
        return {row[0]: row[1] for row in result.all()}

    # Listing

    def _filters(self, query: IssueQuery) -> list[Any]:
        # Region scoping is always the first clause
        filters: list[Any] = []
        if query.region is not None:
            filters.append(Issue.colony == query.region)
        if query.status is not None:
            filters.append(Issue.status == query.status)
        if query.category:
            filters.append(Issue.concern_authority == query.category)
        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            filters.append(
                or_(
                    Issue.title.ilike(pattern, escape="\\"),
                    Issue.description.ilike(pattern, escape="\\"),
                    Issue.colony.ilike(pattern, escape="\\"),
                )
            )
        return filters

    async def list_issues(self, query: IssueQuery) -> tuple[list[Issue], int]:
        filters = self._filters(query)

        sort_column: Any = PRIORITY_RANK if query.sort == "priority" else SORTABLE_COLUMNS[query.sort]
        order_by = sort_column.desc() if query.descending else sort_column.asc()

        statement = select(Issue).where(*filters).order_by(order_by, Issue.id).offset(query.offset)
        if query.limit is not None:
            statement = statement.limit(query.limit)
        count_statement = select(func.count()).select_from(Issue).where(*filters)

        with translate_storage_errors():
            total = (await self.session.execute(count_statement)).scalar_one()
            issues = list((await self.session.execute(statement)).scalars().all())
        return issues, total

    # Issue lifecycle

    async def insert_issue(self, **fields: Any) -> Issue:
        issue = Issue(**fields)
        self.session.add(issue)
        with translate_storage_errors():
            await self.session.flush()
        return issue

    async def delete_issue(self, issue_id: uuid.UUID) -> bool:
        """Remove the issue with its ledger and comments. False if it was already gone."""
        with translate_storage_errors():
            await self.session.execute(delete(UpvoteEntry).where(UpvoteEntry.issue_id == issue_id))
            await self.session.execute(delete(IssueComment).where(IssueComment.issue_id == issue_id))
            result = await self.session.execute(delete(Issue).where(Issue.id == issue_id))
        return result.rowcount == 1

    async def compare_and_set_status(
        self, issue_id: uuid.UUID, expected: IssueStatus, new_status: IssueStatus
    ) -> bool:
        """Set `status` only if it still equals `expected`."""
        statement = (
            update(Issue)
            .where(and_(Issue.id == issue_id, Issue.status == expected))
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        with translate_storage_errors():
            result = await self.session.execute(statement)
        return result.rowcount == 1

    async def add_comment(
        self, issue_id: uuid.UUID, author_id: uuid.UUID, text: str, author_role: CommentAuthorRole, created_at: datetime
    ) -> None:
        with translate_storage_errors():
            await self.session.execute(
                insert(IssueComment).values(
                    id=uuid.uuid4(),
                    issue_id=issue_id,
                    author_id=author_id,
                    author_role=author_role,
                    text=text,
                    created_at=created_at,
                )
            )

    # Upvote ledger

    async def insert_ledger_entry(self, issue_id: uuid.UUID, user_id: uuid.UUID, upvoted_at: datetime) -> int:
        """
        Append `{user_id, upvoted_at}` to the ledger and reset the cached count
        to the ledger size.

        The unique constraint on (issue_id, user_id) makes the membership
        check and the insert one atomic step. The issue row lock is held until
        commit, so the recount sees every other committed writer. Returns the
        new count.

        Raises:
            AlreadyUpvoted: an entry for this user already exists.
            IssueNotFound: the issue disappeared underneath us.
        """
        if not await self._lock_issue(issue_id):
            raise IssueNotFound()

        try:
            with translate_storage_errors():
                await self.session.execute(
                    insert(UpvoteEntry).values(
                        id=uuid.uuid4(), issue_id=issue_id, user_id=user_id, upvoted_at=upvoted_at
                    )
                )
        except IntegrityError:
            await self.session.rollback()
            if await self.get_ledger_entry(issue_id, user_id) is not None:
                raise AlreadyUpvoted()
            if not await self.issue_exists(issue_id):
                raise IssueNotFound()
            raise

        if not await self._recount_upvotes(issue_id):
            await self.session.rollback()
            raise IssueNotFound()
        return await self._require_count(issue_id)

    async def delete_ledger_entry(
        self, issue_id: uuid.UUID, user_id: uuid.UUID, not_before: datetime
    ) -> int | None:
        """
        Remove the user's entry if it was written at or after `not_before`.

        The window check happens inside the DELETE, against the stored
        timestamp. Returns the new count, or None when nothing was removed.
        """
        if not await self._lock_issue(issue_id):
            return None

        statement = delete(UpvoteEntry).where(
            and_(
                UpvoteEntry.issue_id == issue_id,
                UpvoteEntry.user_id == user_id,
                UpvoteEntry.upvoted_at >= not_before,
            )
        )
        with translate_storage_errors():
            result = await self.session.execute(statement)
        if result.rowcount != 1:
            return None

        await self._recount_upvotes(issue_id)
        return await self._require_count(issue_id)

    async def heal_upvote_count(self, issue_id: uuid.UUID) -> tuple[int, bool] | None:
        """
        Re-check the cached count against the ledger while holding the issue
        row lock and rewrite it if they still disagree.

        Writers recount under the same row lock, so an upvote in
        flight is either fully visible to the recount or not yet counted on
        either side. Returns `(count, rewritten)`, or None if the issue is gone.
        """
        locked = select(Issue.upvote_count).where(Issue.id == issue_id).with_for_update()
        ledger_size = select(func.count(UpvoteEntry.id)).where(UpvoteEntry.issue_id == issue_id)
        with translate_storage_errors():
            cached = (await self.session.execute(locked)).scalar_one_or_none()
            if cached is None:
                return None
            actual = (await self.session.execute(ledger_size)).scalar_one()
            if cached == actual:
                return actual, False
            await self.session.execute(
                update(Issue)
                .where(Issue.id == issue_id)
                .values(upvote_count=actual)
                .execution_options(synchronize_session=False)
            )
        return actual, True

    async def _lock_issue(self, issue_id: uuid.UUID) -> bool:
        """Take the issue row lock that serializes ledger writers. False if the issue is gone."""
        statement = select(Issue.id).where(Issue.id == issue_id).with_for_update()
        with translate_storage_errors():
            result = await self.session.execute(statement)
        return result.scalar_one_or_none() is not None

    async def _recount_upvotes(self, issue_id: uuid.UUID) -> bool:
        # Cached count := ledger size, so earlier drift never survives a write
        ledger_size = (
            select(func.count(UpvoteEntry.id)).where(UpvoteEntry.issue_id == issue_id).scalar_subquery()
        )
        statement = (
            update(Issue)
            .where(Issue.id == issue_id)
            .values(upvote_count=ledger_size)
            .execution_options(synchronize_session=False)
        )
        with translate_storage_errors():
            result = await self.session.execute(statement)
        return result.rowcount == 1

    async def _require_count(self, issue_id: uuid.UUID) -> int:
        count = await self.get_upvote_count(issue_id)
        if count is None:
            raise IssueNotFound()
        return count
