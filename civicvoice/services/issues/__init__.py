# Local application imports
from civicvoice.services.issues.issue_services import IssueService, IssueView, verified_views
from civicvoice.services.issues.issue_store import IssueQuery, IssueStore, translate_storage_errors, with_storage_retry
from civicvoice.services.issues.upvote_services import UpvoteAdded, UpvoteRemoved, UpvoteService, UpvoteStatus

__all__ = [
    "IssueQuery",
    "IssueService",
    "IssueStore",
    "IssueView",
    "UpvoteAdded",
    "UpvoteRemoved",
    "UpvoteService",
    "UpvoteStatus",
    "translate_storage_errors",
    "verified_views",
    "with_storage_retry",
]
