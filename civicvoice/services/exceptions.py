"""
Domain errors raised by the services layer.

Every error carries a stable `code`, the broader `kind` it belongs to and the
HTTP status the API surfaces it with. Handlers in
`civicvoice.api.internal.utils.exceptions` turn them into the standard
failure envelope; nothing below this layer raises `HTTPException`.
"""

# Standard library imports
from typing import Any


class CivicVoiceError(Exception):
    kind: str = "error"
    code: str = "error"
    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# Unauthenticated


class Unauthenticated(CivicVoiceError):
    kind = "unauthenticated"
    code = "unauthenticated"
    status_code = 401
    default_message = "Authorization token is missing or invalid"


class TokenExpired(Unauthenticated):
    code = "token_expired"
    default_message = "Token has expired"


# Not found


class NotFound(CivicVoiceError):
    kind = "not_found"
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class IssueNotFound(NotFound):
    code = "issue_not_found"
    default_message = "Issue not found"


class UserNotFound(NotFound):
    code = "user_not_found"
    default_message = "User not found"


class AdminNotFound(NotFound):
    code = "admin_not_found"
    default_message = "Admin account not found"


# Invalid input


class InvalidIdentifier(CivicVoiceError):
    kind = "invalid"
    code = "invalid_identifier"
    status_code = 400
    default_message = "Invalid identifier format"


# Conflicts on the upvote ledger


class Conflict(CivicVoiceError):
    kind = "conflict"
    code = "conflict"
    status_code = 400


class AlreadyUpvoted(Conflict):
    code = "already_upvoted"
    default_message = "You have already upvoted this issue"


class NotUpvoted(Conflict):
    code = "not_upvoted"
    default_message = "You have not upvoted this issue"


class UndoWindowExpired(Conflict):
    code = "undo_window_expired"
    default_message = "The undo window for this upvote has expired"


# Forbidden


class Forbidden(CivicVoiceError):
    kind = "forbidden"
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action"


class AdminRequired(Forbidden):
    code = "admin_required"
    default_message = "Admin access required"


class AdminInactive(Forbidden):
    code = "admin_inactive"
    default_message = "Admin account is inactive"


class PermissionDenied(Forbidden):
    code = "permission_denied"
    default_message = "You do not have permission to perform this action"


class OutOfRegion(Forbidden):
    code = "out_of_region"
    default_message = "You can only manage issues in your region"


# Storage


class StorageUnavailable(CivicVoiceError):
    kind = "storage_unavailable"
    code = "storage_unavailable"
    status_code = 503
    default_message = "The data store is temporarily unavailable, please retry"
