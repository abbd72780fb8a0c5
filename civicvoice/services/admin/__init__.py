# Local application imports
from civicvoice.services.admin.admin_issue_services import AdminIssueFilters, AdminIssueService, IssuePage
from civicvoice.services.admin.audit_services import AuditLog, AuditQuery
from civicvoice.services.admin.authorization import (
    Capability,
    RegionScope,
    audit_scope_for,
    can_access,
    check_issue_access,
    scope_for,
)

__all__ = [
    "AdminIssueFilters",
    "AdminIssueService",
    "AuditLog",
    "AuditQuery",
    "Capability",
    "IssuePage",
    "RegionScope",
    "audit_scope_for",
    "can_access",
    "check_issue_access",
    "scope_for",
]
