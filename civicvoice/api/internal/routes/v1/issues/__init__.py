from .issue_routes import router as issue_router
from .upvote_routes import router as upvote_router

__all__ = ["issue_router", "upvote_router"]
