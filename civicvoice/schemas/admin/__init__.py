# Local application imports
from civicvoice.schemas.admin.admin_schemas import (
    AdminActionListResponse,
    AdminActionResponse,
    AdminIssueListResponse,
    DeleteIssueRequest,
    DeleteIssueResponse,
    PaginationInfo,
    StatusUpdateRequest,
    StatusUpdateResponse,
)

__all__ = [
    "AdminActionListResponse",
    "AdminActionResponse",
    "AdminIssueListResponse",
    "DeleteIssueRequest",
    "DeleteIssueResponse",
    "PaginationInfo",
    "StatusUpdateRequest",
    "StatusUpdateResponse",
]
