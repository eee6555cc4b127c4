"""
conftest.py: shared fixtures.

Strategy:
- The reporting engine is tested directly with plain ClockEvent lists.
- API tests run the FastAPI app through httpx ASGITransport with the
  ClockStore dependency overridden by an InMemoryClockStore, so no
  database is needed.
- Users are identified by access tokens minted with create_access_token.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from timekeeper.core.security import create_access_token
from timekeeper.main import app
from timekeeper.services.clock_store import InMemoryClockStore, get_clock_store
from timekeeper.services.domain import ClockEvent, Direction, Team, WorkWindow


def utc(text: str) -> datetime:
    """'2024-01-02T10:00' → aware UTC datetime."""
    return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)


@pytest.fixture
def make_events():
    """Build ClockEvents for one user from ISO strings (UTC)."""

    def _make(
        *stamps: str,
        user_id: uuid.UUID | None = None,
        directions: list[Direction] | None = None,
    ) -> list[ClockEvent]:
        uid = user_id or uuid.UUID(int=1)
        dirs = directions or [None] * len(stamps)
        return [ClockEvent(user_id=uid, at=utc(s), direction=d) for s, d in zip(stamps, dirs)]

    return _make


@pytest.fixture
def window() -> WorkWindow:
    return WorkWindow(start_hour=9, end_hour=17)


# ---------------------------------------------------------------------------
# In-memory store with one team: manager + two members
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryClockStore:
    return InMemoryClockStore()


@pytest.fixture
def people() -> dict:
    return {
        "admin": uuid.uuid4(),
        "manager": uuid.uuid4(),
        "alice": uuid.uuid4(),
        "bob": uuid.uuid4(),
        "outsider": uuid.uuid4(),
    }


@pytest.fixture
def team(store: InMemoryClockStore, people: dict) -> Team:
    """UTC team so expected minutes read straight off the fixture timestamps."""
    return store.add_team(
        Team(
            id=uuid.uuid4(),
            name="QA",
            manager_id=people["manager"],
            window=WorkWindow(start_hour=9, end_hour=17),
            timezone="UTC",
        ),
        members=[people["alice"], people["bob"]],
    )


# ---------------------------------------------------------------------------
# HTTP client + auth headers
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(store: InMemoryClockStore) -> AsyncClient:
    """Fresh HTTPX async client per test, store dependency overridden."""
    app.dependency_overrides[get_clock_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id: uuid.UUID, admin: bool = False) -> dict:
        token = create_access_token({"sub": str(user_id), "admin": admin})
        return {"Authorization": f"Bearer {token}"}

    return _headers
