# Standard library imports
from collections.abc import AsyncGenerator

# Third-party imports
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Session factory built by `create_app` for this application instance."""
    return request.app.state.session_factory


# Dependency to get a request-scoped async session
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory(request)() as session:
        yield session
