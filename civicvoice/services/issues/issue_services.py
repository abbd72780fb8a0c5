# Standard library imports
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
import uuid

# Local application imports
from civicvoice.core.monitoring.logging import get_contextual_logger
from civicvoice.models.issues.issue import Issue, IssuePriority, IssueStatus
from civicvoice.services.exceptions import IssueNotFound, UserNotFound
from civicvoice.services.issues.issue_store import IssueQuery, IssueStore, with_storage_retry

PUBLIC_SORTS = {
    # sort key -> (column, descending)
    "newest": ("created_at", True),
    "recent": ("updated_at", True),
    "supported": ("upvote_count", True),
}


@dataclass(frozen=True)
class IssueView:
    """An issue together with facts that are not columns on it."""

    issue: Issue
    upvote_count: int
    reporter_name: str | None = None


async def verified_views(store: IssueStore, issues: Sequence[Issue], request_id: str | None = None) -> list[IssueView]:
    """
    Pair issues with an upvote count checked against the ledger.

    A cached count that disagrees with the ledger is logged and rewritten
    (see `IssueStore.heal_upvote_count`). This only repairs legacy or
    partially written rows; upvote writes never depend on it.
    """
    logger = get_contextual_logger(__name__, request_id=request_id)

    sizes = await store.ledger_sizes([issue.id for issue in issues])
    reporters = await store.reporter_names([issue.reporter_id for issue in issues])

    views: list[IssueView] = []
    healed = False
    for issue in issues:
        count = sizes[issue.id]
        if issue.upvote_count != count:
            outcome = await store.heal_upvote_count(issue.id)
            if outcome is not None:
                count, rewritten = outcome
                if rewritten:
                    healed = True
                    logger.warning(
                        f"Upvote count drift on issue {issue.id}: cached {issue.upvote_count}, ledger {count}"
                    )
        views.append(IssueView(issue=issue, upvote_count=count, reporter_name=reporters.get(issue.reporter_id)))

    if healed:
        await store.commit()
    return views


class IssueService:
    """Citizen-facing issue operations: report, browse, read."""

    def __init__(
        self,
        store: IssueStore,
        *,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 0.1,
        request_id: str | None = None,
    ):
        self.store = store
        self.retry_attempts = retry_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.request_id = request_id

    async def _read(self, operation: Any) -> Any:
        return await with_storage_retry(
            self.store.session,
            operation,
            attempts=self.retry_attempts,
            backoff_seconds=self.retry_backoff_seconds,
        )

    async def create_issue(
        self,
        reporter_id: uuid.UUID,
        *,
        title: str,
        description: str,
        concern_authority: str,
        colony: str,
        pincode: str,
        priority: IssuePriority = IssuePriority.LOW,
        longitude: float = 0.0,
        latitude: float = 0.0,
        images: list[str] | None = None,
        tags: list[str] | None = None,
        target: int = 100,
    ) -> IssueView:
        logger = get_contextual_logger(__name__, request_id=self.request_id, user_id=reporter_id)

        if not await self.store.user_exists(reporter_id):
            raise UserNotFound()

        issue = await self.store.insert_issue(
            title=title,
            description=description,
            concern_authority=concern_authority,
            colony=colony,
            pincode=pincode,
            priority=priority,
            longitude=longitude,
            latitude=latitude,
            images=images or [],
            tags=tags or [],
            target=target,
            reporter_id=reporter_id,
            status=IssueStatus.OPEN,
            upvote_count=0,
        )
        await self.store.commit()
        logger.info(f"Issue {issue.id} reported in {colony}")

        fresh = await self.store.get_issue(issue.id, with_details=True)
        if fresh is None:
            raise IssueNotFound()
        return (await verified_views(self.store, [fresh], self.request_id))[0]

    async def list_issues(self, sort: str = "newest", limit: int | None = None) -> list[IssueView]:
        column, descending = PUBLIC_SORTS[sort]
        query = IssueQuery(sort=column, descending=descending, limit=limit)

        async def _attempt() -> list[IssueView]:
            issues, _ = await self.store.list_issues(query)
            return await verified_views(self.store, issues, self.request_id)

        return await self._read(_attempt)

    async def get_issue(self, issue_id: uuid.UUID) -> IssueView:
        async def _attempt() -> IssueView:
            issue = await self.store.get_issue(issue_id, with_details=True)
            if issue is None:
                raise IssueNotFound()
            return (await verified_views(self.store, [issue], self.request_id))[0]

        return await self._read(_attempt)
