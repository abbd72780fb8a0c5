# Standard library imports
from typing import Literal

# Third-party imports
from fastapi import APIRouter, Depends, Query, status

# Local application imports
from civicvoice.dependancies.common import (
    get_app_settings,
    get_current_user,
    get_issue_service,
    parse_identifier,
)
from civicvoice.models.auth.user import User
from civicvoice.schemas.issues.issue_schemas import IssueCreate, IssueResponse
from civicvoice.services.issues.issue_services import IssueService
from civicvoice.settings import CommonSettings

router = APIRouter(prefix="/issues", tags=["Issues"])


@router.post("/", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    issue_data: IssueCreate,
    current_user: User = Depends(get_current_user),
    issues: IssueService = Depends(get_issue_service),
):
    """Report a new civic issue"""
    location = issue_data.location
    longitude, latitude = location.coordinates if location else (0.0, 0.0)

    view = await issues.create_issue(
        current_user.id,
        title=issue_data.title,
        description=issue_data.description,
        concern_authority=issue_data.concern_authority,
        colony=issue_data.colony,
        pincode=issue_data.pincode,
        priority=issue_data.priority,
        longitude=longitude,
        latitude=latitude,
        images=issue_data.images,
        tags=issue_data.tags,
    )
    return IssueResponse.from_view(view, include_details=True)


@router.get("/", response_model=list[IssueResponse])
async def list_issues(
    sort: Literal["newest", "recent", "supported"] = "newest",
    limit: int | None = Query(None, ge=1),
    issues: IssueService = Depends(get_issue_service),
    settings: CommonSettings = Depends(get_app_settings),
):
    """List issues: newest first, recently updated, or most supported"""
    pagination = settings.PAGINATION_CONFIGS["large"]
    limit = min(limit or pagination["default_limit"], pagination["max_limit"])

    views = await issues.list_issues(sort=sort, limit=limit)
    return [IssueResponse.from_view(view) for view in views]


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: str,
    issues: IssueService = Depends(get_issue_service),
):
    """Get an issue with its upvote ledger and comments"""
    view = await issues.get_issue(parse_identifier(issue_id, "issue ID"))
    return IssueResponse.from_view(view, include_details=True)
