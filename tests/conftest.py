"""Pytest configuration and fixtures."""

import time
import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from civic_reporter.config import settings
from civic_reporter.core.security import create_session_token, generate_session_id, hash_password
from civic_reporter.database import Base, get_db
from civic_reporter.main import app
from civic_reporter.models.account import Account
from civic_reporter.models.issue import Issue, IssueStatus
from civic_reporter.redis import SessionStore, get_redis
from civic_reporter.services.notifier import Notifier, get_notifier


# Test database URL (in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "TestPass123!"
SOLVER_TOKEN = "solver-token-for-tests"
ADMIN_SECRET = "admin-secret-for-tests"


class InMemoryRedis:
    """Just enough of the redis.asyncio API for sessions and rate limits."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.ttls: dict[str, int] = {}
        self.last_micros = 0

    async def ping(self) -> bool:
        return True

    async def time(self) -> tuple[int, int]:
        # Strictly increasing so sorted-set members never collide
        micros = max(int(time.time() * 1_000_000), self.last_micros + 1)
        self.last_micros = micros
        return divmod(micros, 1_000_000)

    async def hset(self, key: str, mapping: dict[str, str]) -> int:
        self.hashes.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            for store in (self.hashes, self.sets, self.zsets):
                if store.pop(key, None) is not None:
                    removed += 1
        return removed

    async def sadd(self, key: str, *members: str) -> int:
        self.sets.setdefault(key, set()).update(members)
        return len(members)

    async def srem(self, key: str, *members: str) -> int:
        self.sets.get(key, set()).difference_update(members)
        return len(members)

    async def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    async def scard(self, key: str) -> int:
        return len(self.sets.get(key, set()))

    async def zrange(self, key: str, start: int, end: int, withscores: bool = False):
        ordered = sorted(self.zsets.get(key, {}).items(), key=lambda item: item[1])
        selected = ordered[start:end + 1]
        return selected if withscores else [member for member, _ in selected]

    async def zremrangebyscore(self, key: str, minimum: float, maximum: float) -> int:
        zset = self.zsets.setdefault(key, {})
        stale = [m for m, score in zset.items() if minimum <= score <= maximum]
        for member in stale:
            del zset[member]
        return len(stale)

    async def zcard(self, key: str) -> int:
        return len(self.zsets.get(key, {}))

    async def zadd(self, key: str, mapping: dict[str, float]) -> int:
        self.zsets.setdefault(key, {}).update(mapping)
        return len(mapping)

    def pipeline(self) -> "InMemoryPipeline":
        return InMemoryPipeline(self)

    async def aclose(self) -> None:
        return None


class InMemoryPipeline:
    """Queues commands and runs them in order on execute."""

    def __init__(self, redis_client: InMemoryRedis):
        self.redis = redis_client
        self.commands: list = []

    def __getattr__(self, name: str):
        command = getattr(self.redis, name)

        def queue(*args, **kwargs) -> "InMemoryPipeline":
            self.commands.append((command, args, kwargs))
            return self

        return queue

    async def execute(self) -> list:
        results = [await command(*args, **kwargs) for command, args, kwargs in self.commands]
        self.commands = []
        return results


class RecordingNotifier(Notifier):
    """Notifier that keeps messages instead of sending them."""

    def __init__(self):
        super().__init__(settings)
        self.sent: list[tuple[Optional[str], str, str]] = []

    async def send(self, to: Optional[str], subject: str, body: str) -> bool:
        self.sent.append((to, subject, body))
        return bool(to)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    """Create an in-memory Redis double."""
    return InMemoryRedis()


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    """Create a notifier that records outgoing mail."""
    return RecordingNotifier()


@pytest.fixture(autouse=True)
def test_settings(monkeypatch, tmp_path):
    """Configure shared secrets and a throwaway upload directory."""
    monkeypatch.setattr(settings, "solver_token", SOLVER_TOKEN)
    monkeypatch.setattr(settings, "admin_secret", ADMIN_SECRET)
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "enforce_status_transitions", False)
    return settings


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    fake_redis: InMemoryRedis,
    recording_notifier: RecordingNotifier,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""

    async def override_get_db():
        yield db_session

    async def override_get_redis():
        return fake_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_notifier] = lambda: recording_notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_account(db_session: AsyncSession, email: str, **fields) -> Account:
    """Insert an account with the shared test password."""
    account = Account(
        id=uuid.uuid4(),
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        created_at=datetime.now(timezone.utc),
        **fields,
    )
    db_session.add(account)
    await db_session.commit()
    await db_session.refresh(account)
    return account


# Fixture factories for creating test data
@pytest_asyncio.fixture
async def test_citizen(db_session: AsyncSession) -> Account:
    """Create a citizen account."""
    return await make_account(db_session, "citizen@example.com")


@pytest_asyncio.fixture
async def other_citizen(db_session: AsyncSession) -> Account:
    """Create a second citizen account."""
    return await make_account(db_session, "neighbour@example.com")


@pytest_asyncio.fixture
async def test_issue(db_session: AsyncSession, test_citizen: Account) -> Issue:
    """Create an issue reported by the citizen."""
    issue = Issue(
        id=uuid.uuid4(),
        title="Broken streetlight",
        location="12.9716,77.5946",
        status=IssueStatus.PENDING.value,
        reporter_id=test_citizen.id,
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(issue)
    await db_session.commit()
    await db_session.refresh(issue)
    return issue


async def log_in(
    client: AsyncClient,
    fake_redis: InMemoryRedis,
    account: Account,
    is_solver: bool = False,
    is_admin: bool = False,
    department: Optional[str] = None,
) -> str:
    """Create a session record and put its cookie on the client."""
    session_id = generate_session_id()
    await SessionStore(fake_redis).create(
        session_id=session_id,
        account_id=str(account.id),
        expires_in=settings.session_ttl_seconds,
        is_solver=is_solver,
        is_admin=is_admin,
        department=department,
    )
    client.cookies.set(settings.session_cookie_name, create_session_token(session_id))
    return session_id
