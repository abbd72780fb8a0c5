# Standard library imports
import uuid

# Third-party imports
import pytest

# Local application imports
from civicvoice.models import Admin, AdminRole, Issue
from civicvoice.services.admin.authorization import (
    Capability,
    audit_scope_for,
    can_access,
    check_issue_access,
    scope_for,
)
from civicvoice.services.exceptions import AdminInactive, OutOfRegion, PermissionDenied


def _admin(region="Sector5", role=AdminRole.ADMIN, **flags):
    values = {
        "can_update_status": True,
        "can_delete_issues": False,
        "can_manage_users": False,
        "can_view_analytics": True,
        "is_active": True,
    }
    values.update(flags)
    return Admin(id=uuid.uuid4(), name="Admin", email="Admin@Example.com", role=role, region=region, **values)


def _issue(colony="Sector5"):
    return Issue(id=uuid.uuid4(), title="Pothole", colony=colony)


def test_same_region_is_allowed():
    check_issue_access(_admin(), _issue(), Capability.UPDATE_STATUS)


def test_other_region_is_refused():
    with pytest.raises(OutOfRegion):
        check_issue_access(_admin(region="A"), _issue(colony="B"), Capability.UPDATE_STATUS)


def test_superadmin_ignores_region():
    assert can_access(_admin(region="HQ", role=AdminRole.SUPERADMIN), _issue(colony="B"), Capability.UPDATE_STATUS)


def test_moderator_is_region_bound():
    assert not can_access(_admin(region="A", role=AdminRole.MODERATOR), _issue(colony="B"))


def test_capability_checked_before_region():
    admin = _admin(region="A")

    with pytest.raises(PermissionDenied, match="delete issues"):
        check_issue_access(admin, _issue(colony="B"), Capability.DELETE_ISSUES)


def test_superadmin_still_needs_the_capability_flag():
    admin = _admin(role=AdminRole.SUPERADMIN, can_delete_issues=False)

    with pytest.raises(PermissionDenied):
        check_issue_access(admin, _issue(colony="B"), Capability.DELETE_ISSUES)


def test_inactive_checked_first():
    admin = _admin(region="A", is_active=False, can_update_status=False)

    with pytest.raises(AdminInactive):
        check_issue_access(admin, _issue(colony="B"), Capability.UPDATE_STATUS)


def test_read_access_needs_no_capability():
    assert can_access(_admin(can_update_status=False), _issue())


def test_listing_scope():
    assert scope_for(_admin(region="Sector5")).colony == "Sector5"
    assert scope_for(_admin(role=AdminRole.SUPERADMIN)).unrestricted
    with pytest.raises(AdminInactive):
        scope_for(_admin(is_active=False))


def test_audit_scope():
    admin = _admin()
    superadmin = _admin(role=AdminRole.SUPERADMIN)
    other = uuid.uuid4()

    assert audit_scope_for(admin) == admin.id
    assert audit_scope_for(admin, admin.id) == admin.id
    assert audit_scope_for(superadmin) is None
    assert audit_scope_for(superadmin, other) == other
    with pytest.raises(PermissionDenied):
        audit_scope_for(admin, other)


def test_admin_email_is_normalised():
    assert _admin().email == "admin@example.com"


def test_admin_region_is_required():
    with pytest.raises(ValueError):
        _admin(region="  ")
