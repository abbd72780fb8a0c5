# Local application imports
from civicvoice.models.auth.user import User

__all__ = ["User"]
