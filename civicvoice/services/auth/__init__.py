# Local application imports
from civicvoice.services.auth.identity_services import Identity, SubjectRole, resolve_identity
from civicvoice.services.auth.token_services import create_access_token

__all__ = [
    "Identity",
    "SubjectRole",
    "create_access_token",
    "resolve_identity",
]
