# Standard library imports
from datetime import datetime
from typing import Literal
from uuid import UUID

# Third-party imports
from pydantic import Field, field_validator

# Local application imports
from civicvoice.models.issues.comment import ADMIN_NOTE_PREFIX, CommentAuthorRole
from civicvoice.models.issues.issue import IssuePriority, IssueStatus
from civicvoice.schemas.common.base_schemas import CamelModel
from civicvoice.services.issues.issue_services import IssueView
from civicvoice.utils.datetime_utils import ensure_utc


class GeoPoint(CamelModel):
    type: Literal["Point"] = "Point"
    # GeoJSON order: [longitude, latitude]
    coordinates: tuple[float, float] = (0.0, 0.0)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, value: tuple[float, float]) -> tuple[float, float]:
        longitude, latitude = value
        if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
            raise ValueError("Coordinates must be [longitude, latitude] within valid ranges")
        return value


class IssueCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    concern_authority: str = Field(..., min_length=1, max_length=100)
    colony: str = Field(..., min_length=1, max_length=200)
    pincode: str = Field(..., min_length=1, max_length=20)
    location: GeoPoint | None = None
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    priority: IssuePriority = IssuePriority.LOW

    @field_validator("title", "description", "concern_authority", "colony", "pincode")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Missing required fields")
        return value


class UpvoteEntryResponse(CamelModel):
    user_id: UUID
    upvoted_at: datetime


class CommentResponse(CamelModel):
    id: UUID
    author_id: UUID
    author_role: CommentAuthorRole
    text: str
    is_admin_note: bool
    created_at: datetime


class IssueResponse(CamelModel):
    id: UUID
    title: str
    description: str
    status: IssueStatus
    priority: IssuePriority
    concern_authority: str
    colony: str
    pincode: str
    location: GeoPoint
    images: list[str]
    tags: list[str]
    target: int
    reporter_id: UUID
    reporter_name: str | None = None
    upvote_count: int
    upvotes: list[UpvoteEntryResponse] | None = None
    comments: list[CommentResponse] | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: IssueView, *, include_details: bool = False) -> "IssueResponse":
        """Build the response; ledger and comments only when they were loaded with the issue."""
        issue = view.issue
        upvotes = comments = None
        if include_details:
            upvotes = [
                UpvoteEntryResponse(user_id=entry.user_id, upvoted_at=ensure_utc(entry.upvoted_at))
                for entry in issue.upvote_ledger
            ]
            comments = [
                CommentResponse(
                    id=comment.id,
                    author_id=comment.author_id,
                    author_role=comment.author_role,
                    text=comment.text,
                    is_admin_note=comment.author_role == CommentAuthorRole.ADMIN
                    and comment.text.startswith(ADMIN_NOTE_PREFIX),
                    created_at=ensure_utc(comment.created_at),
                )
                for comment in issue.comments
            ]

        return cls(
            id=issue.id,
            title=issue.title,
            description=issue.description,
            status=issue.status,
            priority=issue.priority,
            concern_authority=issue.concern_authority,
            colony=issue.colony,
            pincode=issue.pincode,
            location=GeoPoint(coordinates=(issue.longitude, issue.latitude)),
            images=list(issue.images or []),
            tags=list(issue.tags or []),
            target=issue.target,
            reporter_id=issue.reporter_id,
            reporter_name=view.reporter_name,
            upvote_count=view.upvote_count,
            upvotes=upvotes,
            comments=comments,
            created_at=ensure_utc(issue.created_at),
            updated_at=ensure_utc(issue.updated_at),
        )
