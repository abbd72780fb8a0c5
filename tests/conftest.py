"""Shared fixtures: one SQLite database file per test, a controllable clock,
seeding helpers and bearer tokens for citizens and admins."""

# Standard library imports
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
import sys
from typing import Any
import uuid

# Third-party imports
from fastapi import FastAPI
import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Local application imports
from civicvoice.models import Admin, AdminRole, Issue, IssuePriority, IssueStatus, UpvoteEntry, User  # noqa: E402
from civicvoice.services.auth.identity_services import SubjectRole  # noqa: E402
from civicvoice.services.auth.token_services import create_access_token  # noqa: E402
from civicvoice.settings import DevSettings  # noqa: E402
from main import create_app, create_tables  # noqa: E402

API = "/api/v1"
START = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock the tests move by hand."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def settings(tmp_path: Path) -> DevSettings:
    return DevSettings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'civicvoice-test.db'}",
        AUTO_CREATE_TABLES=False,
        DEBUG_MODE=False,
        JWT_SECRET_KEY="test-secret-key-with-enough-entropy-0123456789",
        STORAGE_RETRY_BACKOFF_SECONDS=0,
        DEFAULT_SUPERADMIN_EMAIL=None,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def app(settings: DevSettings, clock: FakeClock) -> AsyncIterator[FastAPI]:
    application = create_app(settings)
    application.state.clock = clock
    await create_tables(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
def session_factory(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.session_factory


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as test_client:
        yield test_client


async def _persist(session_factory: async_sessionmaker[AsyncSession], instance: Any) -> Any:
    async with session_factory() as session:
        session.add(instance)
        await session.commit()
    return instance


@pytest.fixture
def make_user(session_factory):
    async def _make_user(name: str = "Asha Citizen", email: str | None = None) -> User:
        email = email or f"{uuid.uuid4().hex[:10]}@example.com"
        return await _persist(session_factory, User(name=name, email=email))

    return _make_user


@pytest.fixture
def make_admin(session_factory):
    async def _make_admin(region: str = "Sector5", role: AdminRole = AdminRole.ADMIN, **flags: Any) -> Admin:
        admin = Admin(
            name=f"{role.value.title()} of {region}",
            email=f"{uuid.uuid4().hex[:10]}@civicvoice.test",
            role=role,
            region=region,
            **flags,
        )
        return await _persist(session_factory, admin)

    return _make_admin


@pytest.fixture
def make_issue(session_factory):
    async def _make_issue(
        reporter: User,
        colony: str = "Sector5",
        title: str = "Broken streetlight",
        status: IssueStatus = IssueStatus.OPEN,
        concern_authority: str = "Electricity Board",
        priority: IssuePriority = IssuePriority.LOW,
        description: str = "The streetlight near the park has been out for a week.",
        upvote_count: int = 0,
    ) -> Issue:
        issue = Issue(
            title=title,
            description=description,
            concern_authority=concern_authority,
            colony=colony,
            pincode="560001",
            priority=priority,
            status=status,
            reporter_id=reporter.id,
            images=[],
            tags=[],
            upvote_count=upvote_count,
        )
        return await _persist(session_factory, issue)

    return _make_issue


@pytest.fixture
def add_ledger_entry(session_factory):
    """Write a ledger row directly, leaving the cached count alone."""

    async def _add(issue: Issue, user: User, upvoted_at: datetime = START) -> UpvoteEntry:
        return await _persist(session_factory, UpvoteEntry(issue_id=issue.id, user_id=user.id, upvoted_at=upvoted_at))

    return _add


@pytest.fixture
def user_headers(settings):
    def _headers(user: User) -> dict[str, str]:
        token, _ = create_access_token(settings, user.id, SubjectRole.USER)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(settings):
    def _headers(admin: Admin) -> dict[str, str]:
        token, _ = create_access_token(settings, admin.id, SubjectRole.ADMIN, region=admin.region)
        return {"Authorization": f"Bearer {token}"}

    return _headers
