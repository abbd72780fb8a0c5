# Standard library imports
from dataclasses import dataclass
import enum
from uuid import UUID

# Third-party imports
import jwt

# Local application imports
from civicvoice.services.exceptions import TokenExpired, Unauthenticated
from civicvoice.settings import CommonSettings


class SubjectRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """Who is calling, as far as the bearer credential says."""

    subject_id: UUID
    role: SubjectRole
    admin_region: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == SubjectRole.ADMIN


def resolve_identity(token: str | None, settings: CommonSettings) -> Identity:
    """
    Verify a bearer token and extract the caller's identity.

    Raises:
        TokenExpired: the token's `exp` is in the past.
        Unauthenticated: the token is missing, malformed or not an access token.
    """
    if not token:
        raise Unauthenticated("Authorization token is required")

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.PyJWTError:
        raise Unauthenticated("Token is invalid or expired")

    if payload.get("token_type") != "access":  # nosec B105
        raise Unauthenticated("Token is invalid or expired")

    subject = payload.get("sub")
    if subject is None:
        raise Unauthenticated("Token is invalid or expired")
    try:
        subject_id = UUID(subject)
    except (TypeError, ValueError):
        raise Unauthenticated("Token is invalid or expired")

    try:
        role = SubjectRole(payload.get("role", SubjectRole.USER.value))
    except ValueError:
        raise Unauthenticated("Token is invalid or expired")

    return Identity(subject_id=subject_id, role=role, admin_region=payload.get("region"))
