# Standard library imports
import asyncio
from datetime import timedelta

# Third-party imports
import pytest

# Local application imports
from civicvoice.services.exceptions import AlreadyUpvoted, NotUpvoted, UndoWindowExpired
from civicvoice.services.issues.issue_store import IssueStore
from civicvoice.services.issues.upvote_services import UpvoteService


@pytest.fixture
def run_upvote(session_factory, clock):
    """Run one UpvoteService call in its own session, like a separate request would."""

    async def _run(method: str, *args):
        async with session_factory() as session:
            service = UpvoteService(
                IssueStore(session), undo_window=timedelta(seconds=60), clock=clock, retry_backoff_seconds=0
            )
            return await getattr(service, method)(*args)

    return _run


async def test_racing_adds_from_one_user(run_upvote, make_user, make_issue):
    user = await make_user()
    issue = await make_issue(user)

    results = await asyncio.gather(
        *(run_upvote("add_upvote", issue.id, user.id) for _ in range(4)), return_exceptions=True
    )

    successes = [result for result in results if not isinstance(result, Exception)]
    assert len(successes) == 1
    assert successes[0].upvote_count == 1
    assert all(isinstance(result, AlreadyUpvoted) for result in results if isinstance(result, Exception))
    status = await run_upvote("get_status", issue.id, user.id)
    assert status.upvoted and status.upvote_count == 1


async def test_racing_removes_of_one_entry(run_upvote, make_user, make_issue):
    user = await make_user()
    issue = await make_issue(user)
    await run_upvote("add_upvote", issue.id, user.id)

    results = await asyncio.gather(
        *(run_upvote("remove_upvote", issue.id, user.id) for _ in range(3)), return_exceptions=True
    )

    successes = [result for result in results if not isinstance(result, Exception)]
    assert [result.upvote_count for result in successes] == [0]
    assert all(isinstance(result, NotUpvoted) for result in results if isinstance(result, Exception))


async def test_expired_entry_stays_counted(run_upvote, clock, make_user, make_issue):
    user = await make_user()
    issue = await make_issue(user)
    await run_upvote("add_upvote", issue.id, user.id)
    clock.advance(60.001)

    with pytest.raises(UndoWindowExpired):
        await run_upvote("remove_upvote", issue.id, user.id)

    status = await run_upvote("get_status", issue.id, user.id)
    assert status.upvoted
    assert not status.can_undo
    assert status.upvote_count == 1
