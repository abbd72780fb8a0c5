# Standard library imports
from datetime import datetime

# Local application imports
from civicvoice.schemas.common.base_schemas import CamelModel


class UpvoteAddedResponse(CamelModel):
    upvote_count: int
    can_undo: bool
    upvoted_at: datetime


class UpvoteRemovedResponse(CamelModel):
    upvote_count: int


class UpvoteStatusResponse(CamelModel):
    upvoted: bool
    upvote_count: int
    can_undo: bool
    upvoted_at: datetime | None = None
    undo_expires_at: datetime | None = None
