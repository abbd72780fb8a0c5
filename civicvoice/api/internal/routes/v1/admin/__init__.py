from .admin_issue_routes import router as admin_issue_router
from .audit_routes import router as audit_router

__all__ = ["admin_issue_router", "audit_router"]
