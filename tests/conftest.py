from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.auth.jwt import create_access_token
from src.core.auth.models import User, UserRole
from src.core.database import Base, get_db
from src.main import app
from src.modules.projects.models import Project, ProjectMember

# One shared in-memory connection, so every session sees the same tables
engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture(autouse=True)
async def schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with TestSession() as session:
        yield session


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """Independent sessions, one per simulated request."""
    return TestSession


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests run on the test's own session."""

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.pop(get_db, None)


async def _add(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.commit()
    return obj


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _add(db_session, User(email="somchai@ledger.test", full_name="Somchai P.", role=UserRole.ADMIN.value))


@pytest.fixture
async def editor_user(db_session: AsyncSession) -> User:
    return await _add(db_session, User(email="malee@ledger.test", full_name="Malee K.", role=UserRole.EDITOR.value))


@pytest.fixture
async def viewer_user(db_session: AsyncSession) -> User:
    return await _add(db_session, User(email="anan@ledger.test", full_name="Anan S.", role=UserRole.VIEWER.value))


@pytest.fixture
async def project(db_session: AsyncSession) -> Project:
    return await _add(db_session, Project(project_code="PRJ-2025-001", name="Sukhumvit 55 Residence"))


@pytest.fixture
async def other_project(db_session: AsyncSession) -> Project:
    return await _add(db_session, Project(project_code="PRJ-2025-002", name="ABC Tower Renovation"))


@pytest.fixture
def assign(db_session: AsyncSession) -> Callable[[User, Project], Awaitable[None]]:
    """Put a user on a project."""

    async def _assign(user: User, project: Project) -> None:
        await _add(db_session, ProjectMember(user_id=user.id, project_id=project.id))

    return _assign


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Bearer header carrying a token for the given user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers
