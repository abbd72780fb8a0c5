# Standard library imports
from typing import Literal

# Third-party imports
from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic.alias_generators import to_snake

# Local application imports
from civicvoice.dependancies.common import (
    get_admin_issue_service,
    get_app_settings,
    get_current_admin,
    parse_identifier,
)
from civicvoice.models.admin.admin import Admin
from civicvoice.models.issues.issue import IssueStatus
from civicvoice.schemas.admin.admin_schemas import (
    AdminIssueListResponse,
    DeleteIssueRequest,
    DeleteIssueResponse,
    PaginationInfo,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from civicvoice.schemas.issues.issue_schemas import IssueResponse
from civicvoice.services.admin.admin_issue_services import AdminIssueFilters, AdminIssueService
from civicvoice.settings import CommonSettings

router = APIRouter(prefix="/admin/issues", tags=["Admin"])

ADMIN_SORT_FIELDS = {"created_at", "updated_at", "upvote_count", "priority", "status"}


def _parse_status(value: str | None) -> IssueStatus | None:
    if not value or value == "all":
        return None
    try:
        return IssueStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in IssueStatus)
        raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of: all, {allowed}")


def _parse_sort(value: str) -> str:
    field = to_snake(value)
    if field not in ADMIN_SORT_FIELDS:
        allowed = ", ".join(sorted(ADMIN_SORT_FIELDS))
        raise HTTPException(status_code=400, detail=f"Invalid sort field. Must be one of: {allowed}")
    return field


@router.get("/", response_model=AdminIssueListResponse)
async def list_admin_issues(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None),
    status: str | None = Query(None, description="Issue status, or 'all'"),
    category: str | None = Query(None, description="Concern authority, or 'all'"),
    search: str | None = Query(None),
    sort: str = Query("created_at"),
    order: Literal["asc", "desc"] = "desc",
    current_admin: Admin = Depends(get_current_admin),
    service: AdminIssueService = Depends(get_admin_issue_service),
    settings: CommonSettings = Depends(get_app_settings),
):
    """List issues in the admin's region (every region for superadmins)"""
    pagination = settings.PAGINATION_CONFIGS["medium"]
    if limit is None:
        limit = pagination["default_limit"]
    limit = max(pagination["min_limit"], min(limit, pagination["max_limit"]))

    filters = AdminIssueFilters(
        status=_parse_status(status),
        category=None if not category or category == "all" else category,
        search=search.strip() if search and search.strip() else None,
        sort=_parse_sort(sort),
        descending=order == "desc",
        page=page,
        limit=limit,
    )
    result = await service.list_issues(current_admin, filters)

    return AdminIssueListResponse(
        issues=[IssueResponse.from_view(view) for view in result.views],
        pagination=PaginationInfo(
            current_page=result.page,
            total_pages=result.total_pages,
            total_count=result.total,
            has_next=result.has_next,
            has_prev=result.has_prev,
        ),
    )


@router.patch("/{issue_id}/status", response_model=StatusUpdateResponse)
async def update_issue_status(
    issue_id: str,
    status_data: StatusUpdateRequest,
    current_admin: Admin = Depends(get_current_admin),
    service: AdminIssueService = Depends(get_admin_issue_service),
):
    """Change an issue's status, optionally leaving an admin note"""
    view = await service.update_status(
        current_admin,
        parse_identifier(issue_id, "issue ID"),
        status_data.status,
        status_data.comment,
    )
    return StatusUpdateResponse(issue=IssueResponse.from_view(view, include_details=True))


@router.delete("/{issue_id}", response_model=DeleteIssueResponse)
async def delete_issue(
    issue_id: str,
    delete_data: DeleteIssueRequest | None = Body(None),
    current_admin: Admin = Depends(get_current_admin),
    service: AdminIssueService = Depends(get_admin_issue_service),
):
    """Delete an issue with its upvotes and comments"""
    await service.delete_issue(
        current_admin,
        parse_identifier(issue_id, "issue ID"),
        delete_data.reason if delete_data else None,
    )
    return DeleteIssueResponse()
