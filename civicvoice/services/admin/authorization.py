"""Region-scoped access control for administrative reads and mutations.

Order of checks for a single issue:
1. inactive admins are refused outright
2. the requested capability flag must be set
3. superadmins pass regardless of region
4. everyone else must match `admin.region == issue.colony`
"""

# Standard library imports
from dataclasses import dataclass
import enum
import uuid

# Local application imports
from civicvoice.models.admin.admin import Admin, AdminRole
from civicvoice.models.issues.issue import Issue
from civicvoice.services.exceptions import AdminInactive, OutOfRegion, PermissionDenied


class Capability(str, enum.Enum):
    UPDATE_STATUS = "update_status"
    DELETE_ISSUES = "delete_issues"
    MANAGE_USERS = "manage_users"
    VIEW_ANALYTICS = "view_analytics"


CAPABILITY_FLAGS: dict[Capability, str] = {
    Capability.UPDATE_STATUS: "can_update_status",
    Capability.DELETE_ISSUES: "can_delete_issues",
    Capability.MANAGE_USERS: "can_manage_users",
    Capability.VIEW_ANALYTICS: "can_view_analytics",
}

CAPABILITY_MESSAGES: dict[Capability, str] = {
    Capability.UPDATE_STATUS: "You do not have permission to update issue status",
    Capability.DELETE_ISSUES: "You do not have permission to delete issues",
    Capability.MANAGE_USERS: "You do not have permission to manage users",
    Capability.VIEW_ANALYTICS: "You do not have permission to view analytics",
}


@dataclass(frozen=True)
class RegionScope:
    """Outermost listing filter. `colony is None` means every region (superadmin)."""

    colony: str | None

    @property
    def unrestricted(self) -> bool:
        return self.colony is None


def is_superadmin(admin: Admin) -> bool:
    return admin.role == AdminRole.SUPERADMIN


def has_capability(admin: Admin, capability: Capability) -> bool:
    return bool(getattr(admin, CAPABILITY_FLAGS[capability]))


def ensure_active(admin: Admin) -> None:
    if not admin.is_active:
        raise AdminInactive()


def check_issue_access(admin: Admin, issue: Issue, capability: Capability | None = None) -> None:
    """
    Raise unless `admin` may act on `issue` with `capability`.

    `capability=None` asks for read access only.

    Raises:
        AdminInactive, PermissionDenied, OutOfRegion
    """
    ensure_active(admin)

    if capability is not None and not has_capability(admin, capability):
        raise PermissionDenied(CAPABILITY_MESSAGES[capability])

    if is_superadmin(admin):
        return

    if admin.region != issue.colony:
        raise OutOfRegion()


def can_access(admin: Admin, issue: Issue, capability: Capability | None = None) -> bool:
    try:
        check_issue_access(admin, issue, capability)
    except (AdminInactive, PermissionDenied, OutOfRegion):
        return False
    return True


def scope_for(admin: Admin) -> RegionScope:
    """Listing scope for `admin`; never influenced by request parameters."""
    ensure_active(admin)
    if is_superadmin(admin):
        return RegionScope(colony=None)
    return RegionScope(colony=admin.region)


def audit_scope_for(admin: Admin, requested_admin_id: uuid.UUID | None = None) -> uuid.UUID | None:
    """
    Admin id the audit trail is filtered by for `admin`.

    Superadmins may read every record (or narrow to `requested_admin_id`);
    everyone else reads only their own.

    Raises:
        AdminInactive, PermissionDenied
    """
    ensure_active(admin)
    if is_superadmin(admin):
        return requested_admin_id
    if requested_admin_id is not None and requested_admin_id != admin.id:
        raise PermissionDenied("You can only view your own actions")
    return admin.id
