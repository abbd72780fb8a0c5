# Local application imports
from civicvoice.core.db.create_async_engine import build_async_engine, build_session_factory
from civicvoice.core.db.get_async_session import get_async_session, get_session_factory
from civicvoice.core.db.run_with_new_session import run_with_new_session

__all__ = [
    "build_async_engine",
    "build_session_factory",
    "get_async_session",
    "get_session_factory",
    "run_with_new_session",
]
