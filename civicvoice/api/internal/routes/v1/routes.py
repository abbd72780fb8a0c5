# Third-party imports
from fastapi import APIRouter

# Local application imports
from civicvoice.api.internal.routes.v1.admin import admin_issue_router, audit_router
from civicvoice.api.internal.routes.v1.issues import issue_router, upvote_router

router = APIRouter()

# Include all internal v1 routers
router.include_router(issue_router)
router.include_router(upvote_router)
router.include_router(admin_issue_router)
router.include_router(audit_router)
