"""
Pytest fixtures for PolitiRate backend tests.
"""

import os
from collections.abc import AsyncGenerator
from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-for-testing-only")
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_DB", "politirate_test")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("ENABLE_MAINTENANCE_JOBS", "false")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Start every test with empty rate limit windows."""
    from services.rate_limit_service import get_rate_limit_service

    get_rate_limit_service().reset()


@pytest.fixture
async def app() -> Any:
    """Create FastAPI application for testing."""
    from main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Origin": "http://localhost:3000"},
    ) as ac:
        yield ac


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def override_db(app: Any, mock_db_session: AsyncMock) -> AsyncMock:
    """Route the get_db dependency to the mock session."""
    from db.session import get_db

    async def _get_db():
        yield mock_db_session

    app.dependency_overrides[get_db] = _get_db
    return mock_db_session


@pytest.fixture
def sample_user() -> Any:
    """A regular signed-in user from Lagos Island."""
    from schemas.user import UserInDB

    return UserInDB(
        id="11111111-1111-1111-1111-111111111111",
        name="Ada Obi",
        email="ada@example.com",
        role="user",
        is_admin=False,
        state="Lagos",
        constituency="Lagos Island I",
        gender="Female",
        date_of_birth=date(1990, 5, 17),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_admin() -> Any:
    from schemas.user import UserInDB

    return UserInDB(
        id="22222222-2222-2222-2222-222222222222",
        name="Site Admin",
        email="admin@example.com",
        role="admin",
        is_admin=True,
    )


@pytest.fixture
def as_user(app: Any, sample_user: Any) -> Any:
    """Authenticate requests as sample_user."""
    from api.deps import get_current_user, get_current_user_optional

    app.dependency_overrides[get_current_user] = lambda: sample_user
    app.dependency_overrides[get_current_user_optional] = lambda: sample_user
    return sample_user


@pytest.fixture
def as_admin(app: Any, sample_admin: Any) -> Any:
    """Authenticate requests as sample_admin."""
    from api.deps import get_current_admin_user, get_current_user, get_current_user_optional

    app.dependency_overrides[get_current_user] = lambda: sample_admin
    app.dependency_overrides[get_current_user_optional] = lambda: sample_admin
    app.dependency_overrides[get_current_admin_user] = lambda: sample_admin
    return sample_admin


@pytest.fixture
def anonymous(app: Any) -> None:
    """Treat requests as coming from a signed-out visitor."""
    from api.deps import get_current_user_optional

    app.dependency_overrides[get_current_user_optional] = lambda: None


def make_poll_model(
    poll_id: str = "poll-1",
    title: str = "Best policy priority",
    target_filters: dict | None = None,
    is_active: bool = True,
    active_until: datetime | None = None,
) -> MagicMock:
    """Build a poll model stand-in with one two-option question."""
    from models.poll import Poll

    options = [
        MagicMock(id="opt-a", option_text="Roads", position=0, vote_count=0),
        MagicMock(id="opt-b", option_text="Schools", position=1, vote_count=0),
    ]
    question = MagicMock(
        id="q-1",
        question_text="What should be funded first?",
        question_type="multiple_choice",
        position=0,
        options=options,
    )
    poll = MagicMock(spec=Poll)
    poll.id = poll_id
    poll.title = title
    poll.description = None
    poll.is_active = is_active
    poll.active_until = active_until
    poll.target_filters = target_filters
    poll.questions = [question]
    poll.created_at = datetime(2024, 6, 1, tzinfo=timezone.utc)
    poll.updated_at = datetime(2024, 6, 1, tzinfo=timezone.utc)
    poll.is_open = is_active and (active_until is None or active_until > datetime.now(timezone.utc))
    return poll


@pytest.fixture
def poll_factory():
    return make_poll_model
