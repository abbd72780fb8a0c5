# Standard library imports
from collections.abc import Awaitable, Callable
from typing import Any

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


async def run_with_new_session(
    session_factory: async_sessionmaker[AsyncSession],
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any,
) -> Any:
    """
    Run any function with a fresh DB session.

    Args:
        session_factory: Factory the session is opened from.
        func: The function to run, which must accept an
        AsyncSession as its first argument.
        *args: Positional arguments to pass to the function.
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        Any: The result of the function execution.
    """
    async with session_factory() as session:
        return await func(session, *args, **kwargs)
