# Third-party imports
from fastapi import APIRouter, Depends, Query

# Local application imports
from civicvoice.dependancies.common import get_app_settings, get_audit_log, get_current_admin, parse_identifier
from civicvoice.models.admin.admin import Admin
from civicvoice.models.admin.admin_action import AdminActionType
from civicvoice.schemas.admin.admin_schemas import AdminActionListResponse, AdminActionResponse, PaginationInfo
from civicvoice.services.admin.audit_services import AuditLog, AuditQuery
from civicvoice.services.admin.authorization import audit_scope_for
from civicvoice.settings import CommonSettings

router = APIRouter(prefix="/admin/actions", tags=["Admin"])


@router.get("/", response_model=AdminActionListResponse)
async def list_admin_actions(
    admin_id: str | None = Query(None),
    issue_id: str | None = Query(None),
    action_type: AdminActionType | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None),
    current_admin: Admin = Depends(get_current_admin),
    audit: AuditLog = Depends(get_audit_log),
    settings: CommonSettings = Depends(get_app_settings),
):
    """Browse the audit trail, newest first. Admins other than superadmins only see their own actions."""
    pagination = settings.PAGINATION_CONFIGS["small"]
    if limit is None:
        limit = pagination["default_limit"]
    limit = max(pagination["min_limit"], min(limit, pagination["max_limit"]))

    requested_admin = parse_identifier(admin_id, "admin ID") if admin_id else None
    query = AuditQuery(
        admin_id=audit_scope_for(current_admin, requested_admin),
        issue_id=parse_identifier(issue_id, "issue ID") if issue_id else None,
        action_type=action_type,
        offset=(page - 1) * limit,
        limit=limit,
    )
    actions, total = await audit.list_actions(query)

    total_pages = -(-total // limit)
    return AdminActionListResponse(
        actions=[AdminActionResponse.from_model(action) for action in actions],
        pagination=PaginationInfo(
            current_page=page,
            total_pages=total_pages,
            total_count=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )
