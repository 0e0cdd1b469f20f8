"""
Complementary Hours API - Test Configuration and Fixtures
"""
import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Set testing environment
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_hours.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["APP_ENV"] = "testing"
os.environ["DEBUG"] = "false"

from app.main import app
from app.core.database import Base, enable_sqlite_foreign_keys, get_db
from app.core.security import hash_password, create_access_token
from app.models.activity import Activity
from app.models.student import Student
from app.models.student_list import StudentList
from app.models.user import User, UserRole
from app.services.hour_aggregator import ActivityCategory

fake = Faker("pt_BR")

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
enable_sqlite_foreign_keys(test_engine.sync_engine)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

PASSWORD = "testpassword123"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db: AsyncSession, role: UserRole, email: str) -> User:
    user = User(
        name=fake.name(),
        email=email,
        role=role,
        password_hash=hash_password(PASSWORD),
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def coordinator(db_session: AsyncSession) -> User:
    return await _make_user(db_session, UserRole.COORDINATOR, "coordenacao@escola.edu.br")


@pytest.fixture
async def monitor(db_session: AsyncSession) -> User:
    return await _make_user(db_session, UserRole.MONITOR, "monitor@escola.edu.br")


def _headers(user: User) -> dict:
    token = create_access_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def coordinator_headers(coordinator: User) -> dict:
    return _headers(coordinator)


@pytest.fixture
def monitor_headers(monitor: User) -> dict:
    return _headers(monitor)


@pytest.fixture
async def student_list(db_session: AsyncSession) -> StudentList:
    row = StudentList(title="Engenharia 2024.1", total_hours_required=150, max_hours_per_category=50)
    db_session.add(row)
    await db_session.commit()
    await db_session.refresh(row)
    return row


@pytest.fixture
async def student(db_session: AsyncSession, student_list: StudentList) -> Student:
    row = Student(
        list_id=student_list.id,
        name=fake.name(),
        cpf="123.456.789-00",
        course="Engenharia Civil",
        class_name="2024.1",
    )
    db_session.add(row)
    await db_session.commit()
    await db_session.refresh(row)
    return row


@pytest.fixture
def add_activity(db_session: AsyncSession):
    """Insert an activity directly, bypassing request validation."""
    async def _add(student: Student, category: ActivityCategory, hours, occurred_on: date | None = None,
                   document_ref: str | None = "certificado.pdf") -> Activity:
        row = Activity(
            student_id=student.id,
            category=category,
            hours=Decimal(str(hours)),
            occurred_on=occurred_on or date(2024, 3, 10),
            recorded_by="Monitor",
            document_ref=document_ref,
        )
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)
        return row

    return _add
