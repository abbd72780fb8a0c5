# Standard library imports
from datetime import datetime
from typing import Any
from uuid import UUID

# Third-party imports
from pydantic import Field

# Local application imports
from civicvoice.models.admin.admin_action import ActionStatus, AdminAction, AdminActionType
from civicvoice.models.issues.issue import IssueStatus
from civicvoice.schemas.common.base_schemas import CamelModel
from civicvoice.schemas.issues.issue_schemas import IssueResponse
from civicvoice.utils.datetime_utils import ensure_utc


class StatusUpdateRequest(CamelModel):
    status: IssueStatus
    comment: str | None = Field(default=None, max_length=1000)


class DeleteIssueRequest(CamelModel):
    reason: str | None = Field(default=None, max_length=500)


class PaginationInfo(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class AdminIssueListResponse(CamelModel):
    issues: list[IssueResponse]
    pagination: PaginationInfo


class StatusUpdateResponse(CamelModel):
    message: str = "Issue status updated successfully"
    issue: IssueResponse


class DeleteIssueResponse(CamelModel):
    message: str = "Issue deleted successfully"


class AdminActionResponse(CamelModel):
    id: UUID
    admin_id: UUID
    issue_id: UUID
    action_type: AdminActionType
    old_status: ActionStatus | None = None
    new_status: ActionStatus | None = None
    comment: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    request_id: str | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, action: AdminAction) -> "AdminActionResponse":
        return cls(
            id=action.id,
            admin_id=action.admin_id,
            issue_id=action.issue_id,
            action_type=action.action_type,
            old_status=action.old_status,
            new_status=action.new_status,
            comment=action.comment,
            metadata=action.extra_data or {},
            request_id=action.request_id,
            created_at=ensure_utc(action.created_at),
        )


class AdminActionListResponse(CamelModel):
    actions: list[AdminActionResponse]
    pagination: PaginationInfo
