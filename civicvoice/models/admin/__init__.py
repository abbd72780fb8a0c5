# Local application imports
from civicvoice.models.admin.admin import Admin, AdminRole
from civicvoice.models.admin.admin_action import ActionStatus, AdminAction, AdminActionType

__all__ = ["ActionStatus", "Admin", "AdminAction", "AdminActionType", "AdminRole"]
