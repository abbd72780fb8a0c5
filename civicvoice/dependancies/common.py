# Standard library imports
from datetime import timedelta
from uuid import UUID

# Third-party imports
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from civicvoice.core.db import get_async_session
from civicvoice.models.admin.admin import Admin
from civicvoice.models.auth.user import User
from civicvoice.services.admin.admin_issue_services import AdminIssueService
from civicvoice.services.admin.audit_services import AuditLog
from civicvoice.services.auth.identity_services import Identity, SubjectRole, resolve_identity
from civicvoice.services.exceptions import (
    AdminNotFound,
    AdminRequired,
    InvalidIdentifier,
    Unauthenticated,
    UserNotFound,
)
from civicvoice.services.issues.issue_services import IssueService
from civicvoice.services.issues.issue_store import IssueStore
from civicvoice.services.issues.upvote_services import UpvoteService
from civicvoice.settings import CommonSettings
from civicvoice.utils.datetime_utils import Clock

# OAuth2PasswordBearer for token extraction; missing tokens are reported by get_identity
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def get_app_settings(request: Request) -> CommonSettings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def parse_identifier(value: str, kind: str = "identifier") -> UUID:
    """Parse a path identifier, refusing anything that is not a UUID."""
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise InvalidIdentifier(f"Invalid {kind} format")


def get_identity(
    token: str | None = Depends(oauth2_scheme),
    settings: CommonSettings = Depends(get_app_settings),
) -> Identity:
    """Resolve the bearer token into the caller's identity."""
    return resolve_identity(token, settings)


async def get_current_user(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """Get the citizen behind the bearer token."""
    if identity.role != SubjectRole.USER:
        raise Unauthenticated("A citizen account is required for this action")

    result = await db.execute(select(User).where(User.id == identity.subject_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise UserNotFound()

    return user


async def get_current_admin(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_async_session),
) -> Admin:
    """Get the admin behind the bearer token. Active flag and region are checked by the policy."""
    if not identity.is_admin:
        raise AdminRequired()

    result = await db.execute(select(Admin).where(Admin.id == identity.subject_id))
    admin = result.scalar_one_or_none()

    if admin is None:
        raise AdminNotFound()

    return admin


# Services, constructed per request around the request-scoped session


def get_issue_store(db: AsyncSession = Depends(get_async_session)) -> IssueStore:
    return IssueStore(db)


def get_upvote_service(
    store: IssueStore = Depends(get_issue_store),
    settings: CommonSettings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
    request_id: str | None = Depends(get_request_id),
) -> UpvoteService:
    return UpvoteService(
        store,
        undo_window=timedelta(seconds=settings.UPVOTE_UNDO_WINDOW_SECONDS),
        clock=clock,
        retry_attempts=settings.STORAGE_RETRY_ATTEMPTS,
        retry_backoff_seconds=settings.STORAGE_RETRY_BACKOFF_SECONDS,
        request_id=request_id,
    )


def get_issue_service(
    store: IssueStore = Depends(get_issue_store),
    settings: CommonSettings = Depends(get_app_settings),
    request_id: str | None = Depends(get_request_id),
) -> IssueService:
    return IssueService(
        store,
        retry_attempts=settings.STORAGE_RETRY_ATTEMPTS,
        retry_backoff_seconds=settings.STORAGE_RETRY_BACKOFF_SECONDS,
        request_id=request_id,
    )


def get_audit_log(
    db: AsyncSession = Depends(get_async_session),
    clock: Clock = Depends(get_clock),
    request_id: str | None = Depends(get_request_id),
) -> AuditLog:
    return AuditLog(db, clock=clock, request_id=request_id)


def get_admin_issue_service(
    store: IssueStore = Depends(get_issue_store),
    audit: AuditLog = Depends(get_audit_log),
    settings: CommonSettings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
    request_id: str | None = Depends(get_request_id),
) -> AdminIssueService:
    return AdminIssueService(
        store,
        audit,
        clock=clock,
        retry_attempts=settings.STORAGE_RETRY_ATTEMPTS,
        retry_backoff_seconds=settings.STORAGE_RETRY_BACKOFF_SECONDS,
        request_id=request_id,
    )
