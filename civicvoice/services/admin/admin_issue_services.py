# Standard library imports
from dataclasses import dataclass
import math
import uuid

# Local application imports
from civicvoice.core.monitoring.logging import get_contextual_logger
from civicvoice.models.admin.admin import Admin
from civicvoice.models.admin.admin_action import AdminActionType
from civicvoice.models.issues.comment import ADMIN_NOTE_PREFIX, CommentAuthorRole
from civicvoice.models.issues.issue import Issue, IssueStatus
from civicvoice.services.admin.audit_services import AuditLog
from civicvoice.services.admin.authorization import (
    CAPABILITY_MESSAGES,
    Capability,
    check_issue_access,
    ensure_active,
    has_capability,
    scope_for,
)
from civicvoice.services.exceptions import IssueNotFound, PermissionDenied, StorageUnavailable
from civicvoice.services.issues.issue_services import IssueView, verified_views
from civicvoice.services.issues.issue_store import IssueQuery, IssueStore, with_storage_retry
from civicvoice.utils.datetime_utils import Clock, ensure_utc, utc_now

# Compare-and-set rounds before a status update gives up on a hot issue
MAX_STATUS_CAS_ROUNDS = 5

DEFAULT_DELETE_REASON = "Issue deleted by admin"


@dataclass(frozen=True)
class AdminIssueFilters:
    status: IssueStatus | None = None
    category: str | None = None
    search: str | None = None
    sort: str = "created_at"
    descending: bool = True
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class DeletedIssue:
    title: str
    colony: str
    status: IssueStatus


@dataclass(frozen=True)
class IssuePage:
    views: list[IssueView]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return (self.page - 1) * self.limit + len(self.views) < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class AdminIssueService:
    """Region-scoped triage operations for administrators."""

    def __init__(
        self,
        store: IssueStore,
        audit: AuditLog,
        *,
        clock: Clock = utc_now,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 0.1,
        request_id: str | None = None,
    ):
        self.store = store
        self.audit = audit
        self.clock = clock
        self.retry_attempts = retry_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.request_id = request_id

    def _logger(self, admin: Admin, issue_id: uuid.UUID | None = None):
        return get_contextual_logger(__name__, request_id=self.request_id, admin_id=admin.id, issue_id=issue_id)

    async def _retrying(self, operation, admin: Admin, issue_id: uuid.UUID | None = None):
        return await with_storage_retry(
            self.store.session,
            operation,
            attempts=self.retry_attempts,
            backoff_seconds=self.retry_backoff_seconds,
            log=self._logger(admin, issue_id),
        )

    async def list_issues(self, admin: Admin, filters: AdminIssueFilters) -> IssuePage:
        """Issues visible to `admin`, region scope applied before any other filter."""
        scope = scope_for(admin)
        query = IssueQuery(
            region=scope.colony,
            status=filters.status,
            category=filters.category,
            search=filters.search,
            sort=filters.sort,
            descending=filters.descending,
            offset=(filters.page - 1) * filters.limit,
            limit=filters.limit,
        )

        async def _attempt() -> IssuePage:
            issues, total = await self.store.list_issues(query)
            views = await verified_views(self.store, issues, self.request_id)
            return IssuePage(views=views, page=filters.page, limit=filters.limit, total=total)

        return await self._retrying(_attempt, admin)

    async def _load(self, issue_id: uuid.UUID) -> Issue:
        issue = await self.store.get_issue(issue_id)
        if issue is None:
            raise IssueNotFound()
        return issue

    async def update_status(
        self, admin: Admin, issue_id: uuid.UUID, new_status: IssueStatus, comment: str | None = None
    ) -> IssueView:
        """
        Move the issue to `new_status`, optionally leaving an admin note, and
        audit the transition. Any status may follow any other.

        Raises:
            IssueNotFound, AdminInactive, PermissionDenied, OutOfRegion
        """
        logger = self._logger(admin, issue_id)
        note = comment.strip() if comment else None

        async def _attempt() -> IssueStatus:
            issue = await self._load(issue_id)
            check_issue_access(admin, issue, Capability.UPDATE_STATUS)

            old_status = issue.status
            for _ in range(MAX_STATUS_CAS_ROUNDS):
                if await self.store.compare_and_set_status(issue_id, old_status, new_status):
                    break
                # Someone else moved it first; audit what we actually replace
                old_status = (await self._load(issue_id)).status
            else:
                raise StorageUnavailable("Issue is being updated concurrently, please retry")

            if note:
                await self.store.add_comment(
                    issue_id,
                    admin.id,
                    f"{ADMIN_NOTE_PREFIX} {note}",
                    CommentAuthorRole.ADMIN,
                    ensure_utc(self.clock()),
                )
            await self.store.commit()
            return old_status

        old_status = await self._retrying(_attempt, admin, issue_id)
        logger.info(f"Issue status changed {old_status.value} -> {new_status.value}")

        await self.audit.record(
            admin_id=admin.id,
            issue_id=issue_id,
            action_type=AdminActionType.STATUS_CHANGE,
            old_status=old_status.value,
            new_status=new_status.value,
            comment=note,
        )

        issue = await self.store.get_issue(issue_id, with_details=True)
        if issue is None:
            raise IssueNotFound()
        return (await verified_views(self.store, [issue], self.request_id))[0]

    async def delete_issue(self, admin: Admin, issue_id: uuid.UUID, reason: str | None = None) -> None:
        """
        Physically remove the issue and audit the deletion.

        Raises:
            AdminInactive, PermissionDenied, IssueNotFound, OutOfRegion
        """
        logger = self._logger(admin, issue_id)

        ensure_active(admin)
        if not has_capability(admin, Capability.DELETE_ISSUES):
            raise PermissionDenied(CAPABILITY_MESSAGES[Capability.DELETE_ISSUES])

        async def _attempt() -> DeletedIssue:
            issue = await self._load(issue_id)
            check_issue_access(admin, issue, Capability.DELETE_ISSUES)
            snapshot = DeletedIssue(title=issue.title, colony=issue.colony, status=issue.status)
            if not await self.store.delete_issue(issue_id):
                raise IssueNotFound()
            await self.store.commit()
            return snapshot

        issue = await self._retrying(_attempt, admin, issue_id)
        logger.info(f"Issue deleted from {issue.colony}")

        await self.audit.record(
            admin_id=admin.id,
            issue_id=issue_id,
            action_type=AdminActionType.ISSUE_DELETED,
            old_status=issue.status.value,
            comment=reason.strip() if reason and reason.strip() else DEFAULT_DELETE_REASON,
            metadata={"title": issue.title, "colony": issue.colony},
        )
