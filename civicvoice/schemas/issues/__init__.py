# Local application imports
from civicvoice.schemas.issues.issue_schemas import (
    CommentResponse,
    GeoPoint,
    IssueCreate,
    IssueResponse,
    UpvoteEntryResponse,
)
from civicvoice.schemas.issues.upvote_schemas import (
    UpvoteAddedResponse,
    UpvoteRemovedResponse,
    UpvoteStatusResponse,
)

__all__ = [
    "CommentResponse",
    "GeoPoint",
    "IssueCreate",
    "IssueResponse",
    "UpvoteAddedResponse",
    "UpvoteEntryResponse",
    "UpvoteRemovedResponse",
    "UpvoteStatusResponse",
]
