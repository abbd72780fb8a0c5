# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from civicvoice.dependancies.common import get_current_user, get_upvote_service, parse_identifier
from civicvoice.models.auth.user import User
from civicvoice.schemas.issues.upvote_schemas import (
    UpvoteAddedResponse,
    UpvoteRemovedResponse,
    UpvoteStatusResponse,
)
from civicvoice.services.issues.upvote_services import UpvoteService

router = APIRouter(prefix="/issues", tags=["Upvotes"])


@router.post("/{issue_id}/upvote", response_model=UpvoteAddedResponse)
async def add_upvote(
    issue_id: str,
    current_user: User = Depends(get_current_user),
    upvotes: UpvoteService = Depends(get_upvote_service),
):
    """Upvote an issue (once per user; can be undone for a short while)"""
    result = await upvotes.add_upvote(parse_identifier(issue_id, "issue ID"), current_user.id)
    return UpvoteAddedResponse(
        upvote_count=result.upvote_count,
        can_undo=result.can_undo,
        upvoted_at=result.upvoted_at,
    )


@router.post("/{issue_id}/remove-upvote", response_model=UpvoteRemovedResponse)
async def remove_upvote(
    issue_id: str,
    current_user: User = Depends(get_current_user),
    upvotes: UpvoteService = Depends(get_upvote_service),
):
    """Undo an upvote while it is still inside the undo window"""
    result = await upvotes.remove_upvote(parse_identifier(issue_id, "issue ID"), current_user.id)
    return UpvoteRemovedResponse(upvote_count=result.upvote_count)


@router.get("/{issue_id}/upvote", response_model=UpvoteStatusResponse)
async def get_upvote_status(
    issue_id: str,
    current_user: User = Depends(get_current_user),
    upvotes: UpvoteService = Depends(get_upvote_service),
):
    """Get the caller's upvote on an issue and whether it can still be undone"""
    status = await upvotes.get_status(parse_identifier(issue_id, "issue ID"), current_user.id)
    return UpvoteStatusResponse(
        upvoted=status.upvoted,
        upvote_count=status.upvote_count,
        can_undo=status.can_undo,
        upvoted_at=status.upvoted_at,
        undo_expires_at=status.undo_expires_at,
    )
