# Standard library imports
import asyncio
from datetime import datetime, timedelta
import logging
import uuid

# Third-party imports
from sqlalchemy import func, select

# Local application imports
from civicvoice.models import Issue, UpvoteEntry
from civicvoice.services.auth.identity_services import SubjectRole
from civicvoice.services.auth.token_services import create_access_token
from tests.conftest import API, START


async def _ledger_size(session_factory, issue_id) -> int:
    async with session_factory() as session:
        return (
            await session.execute(select(func.count(UpvoteEntry.id)).where(UpvoteEntry.issue_id == issue_id))
        ).scalar_one()


async def _cached_count(session_factory, issue_id) -> int:
    async with session_factory() as session:
        return (await session.execute(select(Issue.upvote_count).where(Issue.id == issue_id))).scalar_one()


async def test_add_upvote_records_entry_and_count(client, make_user, make_issue, user_headers, session_factory):
    reporter = await make_user("Reporter")
    voter = await make_user("Voter")
    issue = await make_issue(reporter)

    response = await client.post(f"{API}/issues/{issue.id}/upvote", headers=user_headers(voter))

    assert response.status_code == 200
    body = response.json()
    assert body["upvoteCount"] == 1
    assert body["canUndo"] is True
    assert datetime.fromisoformat(body["upvotedAt"]) == START
    assert await _ledger_size(session_factory, issue.id) == 1
    assert await _cached_count(session_factory, issue.id) == 1


async def test_second_upvote_is_rejected_without_changes(client, make_user, make_issue, user_headers, session_factory):
    reporter = await make_user()
    issue = await make_issue(reporter)
    headers = user_headers(reporter)

    first = await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)
    second = await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json() == {
        "ok": False,
        "error": {
            "code": "already_upvoted",
            "kind": "conflict",
            "message": "You have already upvoted this issue",
        },
    }
    assert await _ledger_size(session_factory, issue.id) == 1
    assert await _cached_count(session_factory, issue.id) == 1


async def test_upvote_then_undo_then_undo_again(client, clock, make_user, make_issue, user_headers):
    reporter = await make_user("U1")
    issue = await make_issue(reporter, title="I2")
    headers = user_headers(reporter)

    added = await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)
    assert added.json()["upvoteCount"] == 1

    clock.advance(30)
    removed = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)
    assert removed.status_code == 200
    assert removed.json() == {"upvoteCount": 0}

    again = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "not_upvoted"


async def test_undo_allowed_just_inside_window(client, clock, make_user, make_issue, user_headers, session_factory):
    user = await make_user()
    issue = await make_issue(user)
    headers = user_headers(user)
    await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)

    clock.advance(59)
    response = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)

    assert response.status_code == 200
    assert response.json()["upvoteCount"] == 0
    assert await _ledger_size(session_factory, issue.id) == 0


async def test_undo_allowed_at_exactly_the_window_length(client, clock, make_user, make_issue, user_headers):
    user = await make_user()
    issue = await make_issue(user)
    headers = user_headers(user)
    await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)

    clock.advance(60)
    response = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)

    assert response.status_code == 200


async def test_undo_rejected_after_window(client, clock, make_user, make_issue, user_headers, session_factory):
    user = await make_user()
    issue = await make_issue(user)
    headers = user_headers(user)
    await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)

    clock.advance(61)
    response = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "undo_window_expired"
    assert await _ledger_size(session_factory, issue.id) == 1
    assert await _cached_count(session_factory, issue.id) == 1


async def test_undo_window_follows_settings(app, client, clock, make_user, make_issue, user_headers):
    app.state.settings.UPVOTE_UNDO_WINDOW_SECONDS = 10
    user = await make_user()
    issue = await make_issue(user)
    headers = user_headers(user)
    await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)

    clock.advance(11)
    response = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)

    assert response.json()["error"]["code"] == "undo_window_expired"


async def test_upvote_status_reports_undo_deadline(client, clock, make_user, make_issue, user_headers):
    user = await make_user()
    issue = await make_issue(user)
    headers = user_headers(user)

    before = await client.get(f"{API}/issues/{issue.id}/upvote", headers=headers)
    assert before.json()["upvoted"] is False
    assert before.json()["canUndo"] is False

    await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)
    clock.advance(20)
    during = (await client.get(f"{API}/issues/{issue.id}/upvote", headers=headers)).json()
    assert during["upvoted"] is True
    assert during["canUndo"] is True
    assert during["upvoteCount"] == 1
    assert datetime.fromisoformat(during["undoExpiresAt"]) == START + timedelta(seconds=60)

    clock.advance(41)
    after = (await client.get(f"{API}/issues/{issue.id}/upvote", headers=headers)).json()
    assert after["upvoted"] is True
    assert after["canUndo"] is False


async def test_upvote_unknown_issue(client, make_user, user_headers):
    user = await make_user()

    response = await client.post(f"{API}/issues/{uuid.uuid4()}/upvote", headers=user_headers(user))

    assert response.status_code == 404
    assert response.json()["error"] == {"code": "issue_not_found", "kind": "not_found", "message": "Issue not found"}


async def test_remove_upvote_unknown_issue(client, make_user, user_headers):
    user = await make_user()

    response = await client.post(f"{API}/issues/{uuid.uuid4()}/remove-upvote", headers=user_headers(user))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "issue_not_found"


async def test_malformed_issue_id(client, make_user, user_headers):
    user = await make_user()

    response = await client.post(f"{API}/issues/not-a-uuid/upvote", headers=user_headers(user))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_identifier"
    assert response.json()["error"]["kind"] == "invalid"


async def test_upvote_requires_token(client, make_user, make_issue):
    issue = await make_issue(await make_user())

    response = await client.post(f"{API}/issues/{issue.id}/upvote")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_upvote_with_expired_token(client, settings, make_user, make_issue):
    user = await make_user()
    issue = await make_issue(user)
    token, _ = create_access_token(settings, user.id, expires_delta=timedelta(minutes=-5))

    response = await client.post(f"{API}/issues/{issue.id}/upvote", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "token_expired"


async def test_upvote_by_unknown_user(client, settings, make_user, make_issue):
    issue = await make_issue(await make_user())
    token, _ = create_access_token(settings, uuid.uuid4(), SubjectRole.USER)

    response = await client.post(f"{API}/issues/{issue.id}/upvote", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "user_not_found"


async def test_concurrent_upvotes_from_one_user_count_once(client, make_user, make_issue, user_headers, session_factory):
    user = await make_user()
    issue = await make_issue(user)
    headers = user_headers(user)

    responses = await asyncio.gather(
        *(client.post(f"{API}/issues/{issue.id}/upvote", headers=headers) for _ in range(5))
    )

    statuses = sorted(response.status_code for response in responses)
    assert statuses == [200, 400, 400, 400, 400]
    assert all(
        response.json()["error"]["code"] == "already_upvoted" for response in responses if response.status_code == 400
    )
    assert await _ledger_size(session_factory, issue.id) == 1
    assert await _cached_count(session_factory, issue.id) == 1


async def test_concurrent_upvotes_from_many_users_all_count(
    client, make_user, make_issue, user_headers, session_factory
):
    reporter = await make_user()
    issue = await make_issue(reporter)
    voters = [await make_user(f"Voter {n}") for n in range(6)]

    responses = await asyncio.gather(
        *(client.post(f"{API}/issues/{issue.id}/upvote", headers=user_headers(voter)) for voter in voters)
    )

    assert [response.status_code for response in responses] == [200] * 6
    assert sorted(response.json()["upvoteCount"] for response in responses) == [1, 2, 3, 4, 5, 6]
    assert await _ledger_size(session_factory, issue.id) == 6
    assert await _cached_count(session_factory, issue.id) == 6


async def test_count_matches_ledger_after_mixed_operations(
    client, clock, make_user, make_issue, user_headers, session_factory
):
    reporter = await make_user()
    issue = await make_issue(reporter)
    voters = [await make_user(f"Voter {n}") for n in range(4)]

    for voter in voters:
        await client.post(f"{API}/issues/{issue.id}/upvote", headers=user_headers(voter))
    clock.advance(10)
    await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=user_headers(voters[0]))
    await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=user_headers(voters[0]))
    await client.post(f"{API}/issues/{issue.id}/upvote", headers=user_headers(voters[1]))

    assert await _ledger_size(session_factory, issue.id) == 3
    assert await _cached_count(session_factory, issue.id) == 3


async def test_upvote_on_drifted_issue_counts_the_ledger(
    client, make_user, make_issue, add_ledger_entry, user_headers, session_factory
):
    reporter = await make_user()
    voter = await make_user()
    issue = await make_issue(reporter, upvote_count=7)
    await add_ledger_entry(issue, reporter)

    response = await client.post(f"{API}/issues/{issue.id}/upvote", headers=user_headers(voter))

    assert response.status_code == 200
    assert response.json()["upvoteCount"] == 2
    assert await _ledger_size(session_factory, issue.id) == 2
    assert await _cached_count(session_factory, issue.id) == 2


async def test_remove_upvote_on_drifted_issue_counts_the_ledger(
    client, make_user, make_issue, user_headers, session_factory
):
    voter = await make_user()
    issue = await make_issue(voter, upvote_count=5)
    headers = user_headers(voter)

    added = await client.post(f"{API}/issues/{issue.id}/upvote", headers=headers)
    removed = await client.post(f"{API}/issues/{issue.id}/remove-upvote", headers=headers)

    assert added.json()["upvoteCount"] == 1
    assert removed.status_code == 200
    assert removed.json()["upvoteCount"] == 0
    assert await _ledger_size(session_factory, issue.id) == 0
    assert await _cached_count(session_factory, issue.id) == 0


async def test_upvote_status_heals_drifted_count(
    client, make_user, make_issue, add_ledger_entry, user_headers, session_factory, caplog
):
    voter = await make_user()
    issue = await make_issue(voter, upvote_count=4)
    await add_ledger_entry(issue, voter)

    with caplog.at_level(logging.WARNING):
        response = await client.get(f"{API}/issues/{issue.id}/upvote", headers=user_headers(voter))

    assert response.status_code == 200
    assert response.json()["upvoted"] is True
    assert response.json()["upvoteCount"] == 1
    assert await _cached_count(session_factory, issue.id) == 1
    assert any("Upvote count drift" in record.getMessage() for record in caplog.records)
