# Standard library imports
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

# Third-party imports
import jwt

# Local application imports
from civicvoice.services.auth.identity_services import SubjectRole
from civicvoice.settings import CommonSettings


def create_access_token(
    settings: CommonSettings,
    subject_id: UUID,
    role: SubjectRole = SubjectRole.USER,
    region: str | None = None,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> tuple[str, str]:
    """
    Create a JWT access token for a citizen or an admin.

    Token issuance to end users lives outside this service; this is used by
    the seeding script and by tests.

    Args:
        settings: Settings carrying the signing key and algorithm
        subject_id: The user's or admin's ID
        role: Whether the subject is a citizen or an admin
        region: The admin's region, if any
        expires_delta: Optional custom expiration time
        now: Issue time, defaults to the current time

    Returns:
        Tuple of (token, jti)
    """
    now = now or datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    # Generate a unique JWT ID
    jti = str(uuid4())

    to_encode = {
        "sub": str(subject_id),  # Standard JWT claim for subject
        "role": role.value,
        "exp": expire,  # Expiration time
        "iat": now,  # Issued at time
        "token_type": "access",  # Token type  # nosec B106
        "jti": jti,  # JWT ID for tracking
    }
    if region is not None:
        to_encode["region"] = region

    token = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    return token, jti
