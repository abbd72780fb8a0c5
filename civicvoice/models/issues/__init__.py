# Local application imports
from civicvoice.models.issues.comment import ADMIN_NOTE_PREFIX, CommentAuthorRole, IssueComment
from civicvoice.models.issues.issue import Issue, IssuePriority, IssueStatus
from civicvoice.models.issues.upvote import UpvoteEntry

__all__ = [
    "ADMIN_NOTE_PREFIX",
    "CommentAuthorRole",
    "Issue",
    "IssueComment",
    "IssuePriority",
    "IssueStatus",
    "UpvoteEntry",
]
