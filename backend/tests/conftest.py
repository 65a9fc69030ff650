"""
Shared test fixtures for the SiteStaff backend tests.

Store, service, gate and API tests run against an in-memory SQLite
database (aiosqlite) with the status catalog seeded the same way the
initial migration seeds it.
"""
import os
from datetime import date, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-min-32-chars"

from sitestaff.db.base import Base  # noqa: E402
from sitestaff.models import (  # noqa: E402
    Citizenship,
    Counterparty,
    Employee,
    EmployeeCounterpartyMapping,
    Status,
    User,
    UserEmployeeMapping,
)
from sitestaff.models.user import ROLE_ADMIN, ROLE_USER  # noqa: E402
from sitestaff.services.statuses.names import STATUS_CATALOG  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SHARED_COUNTERPARTY_ID = 1
CONTRACTOR_A_ID = 2
CONTRACTOR_B_ID = 3

ADMIN_ID = 1
SHARED_USER_ID = 2
CONTRACTOR_USER_ID = 3
ORPHAN_USER_ID = 4
OTHER_SHARED_USER_ID = 5

RUSSIA_ID = 1
UZBEKISTAN_ID = 2


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_reference_data(session)
    return factory


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def seed_reference_data(session: AsyncSession) -> None:
    """Tenants, users, citizenships and the full status catalog."""
    session.add_all([
        Counterparty(id=SHARED_COUNTERPARTY_ID, name="Pass Office", inn="7700000001"),
        Counterparty(id=CONTRACTOR_A_ID, name="Contractor A", inn="7700000002"),
        Counterparty(id=CONTRACTOR_B_ID, name="Contractor B", inn="7700000003"),
    ])
    await session.flush()
    session.add_all([
        User(id=ADMIN_ID, email="admin@example.com", role=ROLE_ADMIN, counterparty_id=SHARED_COUNTERPARTY_ID),
        User(id=SHARED_USER_ID, email="office@example.com", role=ROLE_USER, counterparty_id=SHARED_COUNTERPARTY_ID),
        User(id=CONTRACTOR_USER_ID, email="foreman@example.com", role=ROLE_USER, counterparty_id=CONTRACTOR_A_ID),
        User(id=ORPHAN_USER_ID, email="orphan@example.com", role=ROLE_USER, counterparty_id=None),
        User(id=OTHER_SHARED_USER_ID, email="office2@example.com", role=ROLE_USER,
             counterparty_id=SHARED_COUNTERPARTY_ID),
        Citizenship(id=RUSSIA_ID, name="Russia", code="RU", requires_patent=False),
        Citizenship(id=UZBEKISTAN_ID, name="Uzbekistan", code="UZ", requires_patent=True),
    ])
    session.add_all([Status(name=name, group=group) for name, group in STATUS_CATALOG.items()])
    await session.commit()


def complete_employee_fields(**overrides) -> dict:
    """Field values that make a Russian citizen's card complete under the default form."""
    fields = dict(
        inn="500100732259",
        gender="male",
        last_name="Ivanov",
        first_name="Ivan",
        middle_name="Ivanovich",
        position_id=1,
        citizenship_id=RUSSIA_ID,
        birth_date=date(1990, 5, 17),
        birth_country_id=RUSSIA_ID,
        registration_address="Moscow, Tverskaya 1",
        phone="+79990000000",
        snils="112-233-445 95",
        passport_type="russian",
        passport_number="4510 123456",
        passport_date=date(2015, 3, 1),
        passport_issuer="OVD Tverskoy",
    )
    fields.update(overrides)
    return fields


async def create_employee(
    db: AsyncSession,
    counterparty_id: Optional[int] = SHARED_COUNTERPARTY_ID,
    owner_id: Optional[int] = None,
    created_by: int = SHARED_USER_ID,
    **fields,
) -> Employee:
    employee = Employee(created_by=created_by, **fields)
    db.add(employee)
    await db.flush()
    if counterparty_id is not None:
        db.add(EmployeeCounterpartyMapping(employee_id=employee.id, counterparty_id=counterparty_id))
    if owner_id is not None:
        db.add(UserEmployeeMapping(user_id=owner_id, employee_id=employee.id, counterparty_id=None))
    await db.commit()
    await db.refresh(employee, ["citizenship"])
    return employee


async def get_user(db: AsyncSession, user_id: int) -> User:
    return await db.get(User, user_id)


def make_token(user_id: int, expires_in: timedelta = timedelta(hours=1)) -> str:
    from datetime import datetime, timezone
    from sitestaff.core.config import settings

    payload = {"sub": str(user_id), "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def employee_factory(db):
    async def factory(**kwargs) -> Employee:
        return await create_employee(db, **kwargs)
    return factory
