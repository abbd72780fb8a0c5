# Standard library imports
from dataclasses import dataclass
from datetime import datetime, timedelta
import uuid

# Local application imports
from civicvoice.core.monitoring.logging import get_contextual_logger
from civicvoice.services.exceptions import (
    IssueNotFound,
    NotUpvoted,
    UndoWindowExpired,
    UserNotFound,
)
from civicvoice.services.issues.issue_store import IssueStore, with_storage_retry
from civicvoice.utils.datetime_utils import Clock, ensure_utc, utc_now


@dataclass(frozen=True)
class UpvoteAdded:
    upvote_count: int
    upvoted_at: datetime
    can_undo: bool = True


@dataclass(frozen=True)
class UpvoteRemoved:
    upvote_count: int


@dataclass(frozen=True)
class UpvoteStatus:
    upvoted: bool
    upvote_count: int
    upvoted_at: datetime | None = None
    undo_expires_at: datetime | None = None
    can_undo: bool = False


class UpvoteService:
    """
    Upvote ledger engine: one upvote per user per issue, retractable for a
    bounded window after it was cast.
    """

    def __init__(
        self,
        store: IssueStore,
        *,
        undo_window: timedelta = timedelta(seconds=60),
        clock: Clock = utc_now,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 0.1,
        request_id: str | None = None,
    ):
        self.store = store
        self.undo_window = undo_window
        self.clock = clock
        self.retry_attempts = retry_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.request_id = request_id

    def _now(self) -> datetime:
        return ensure_utc(self.clock())

    async def add_upvote(self, issue_id: uuid.UUID, user_id: uuid.UUID) -> UpvoteAdded:
        """
        Record the user's upvote on the issue.

        Raises:
            IssueNotFound, UserNotFound, AlreadyUpvoted
        """
        logger = get_contextual_logger(
            __name__, request_id=self.request_id, issue_id=issue_id, user_id=user_id
        )

        async def _attempt() -> UpvoteAdded:
            if not await self.store.issue_exists(issue_id):
                raise IssueNotFound()
            if not await self.store.user_exists(user_id):
                raise UserNotFound()

            upvoted_at = self._now()
            count = await self.store.insert_ledger_entry(issue_id, user_id, upvoted_at)
            await self.store.commit()
            return UpvoteAdded(upvote_count=count, upvoted_at=upvoted_at)

        result = await with_storage_retry(
            self.store.session,
            _attempt,
            attempts=self.retry_attempts,
            backoff_seconds=self.retry_backoff_seconds,
            log=logger,
        )
        logger.info(f"Upvote added, count is now {result.upvote_count}")
        return result

    async def remove_upvote(self, issue_id: uuid.UUID, user_id: uuid.UUID) -> UpvoteRemoved:
        """
        Retract the user's upvote if it is still inside the undo window.

        Raises:
            IssueNotFound, NotUpvoted, UndoWindowExpired
        """
        logger = get_contextual_logger(
            __name__, request_id=self.request_id, issue_id=issue_id, user_id=user_id
        )

        async def _attempt() -> UpvoteRemoved:
            not_before = self._now() - self.undo_window
            count = await self.store.delete_ledger_entry(issue_id, user_id, not_before)
            if count is not None:
                await self.store.commit()
                return UpvoteRemoved(upvote_count=count)

            # Nothing matched: work out why
            await self.store.rollback()
            if await self.store.get_ledger_entry(issue_id, user_id) is not None:
                raise UndoWindowExpired()
            if not await self.store.issue_exists(issue_id):
                raise IssueNotFound()
            raise NotUpvoted()

        result = await with_storage_retry(
            self.store.session,
            _attempt,
            attempts=self.retry_attempts,
            backoff_seconds=self.retry_backoff_seconds,
            log=logger,
        )
        logger.info(f"Upvote removed, count is now {result.upvote_count}")
        return result

    async def get_status(self, issue_id: uuid.UUID, user_id: uuid.UUID) -> UpvoteStatus:
        """Whether the user has upvoted the issue and how long the undo stays open."""
        outcome = await self.store.heal_upvote_count(issue_id)
        if outcome is None:
            raise IssueNotFound()
        count, rewritten = outcome
        if rewritten:
            get_contextual_logger(__name__, request_id=self.request_id, issue_id=issue_id).warning(
                f"Upvote count drift healed on status read, ledger holds {count}"
            )
            await self.store.commit()

        entry = await self.store.get_ledger_entry(issue_id, user_id)
        if entry is None:
            return UpvoteStatus(upvoted=False, upvote_count=count)

        upvoted_at = ensure_utc(entry.upvoted_at)
        expires_at = upvoted_at + self.undo_window
        return UpvoteStatus(
            upvoted=True,
            upvote_count=count,
            upvoted_at=upvoted_at,
            undo_expires_at=expires_at,
            can_undo=self._now() <= expires_at,
        )
