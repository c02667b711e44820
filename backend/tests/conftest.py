"""
Way2PG - Test Configuration and Fixtures
"""
import os
import itertools
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['ADMIN_SIGNUP_CODE'] = 'test-admin-code'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SENDGRID_API_KEY'] = ''
os.environ['SMTP_USER'] = ''
os.environ['SMTP_PASSWORD'] = ''

from way2pg.main import app
from way2pg.core.database import Base, get_db
from way2pg.core.security import get_password_hash, issue_token
from way2pg.models import Accommodation, AccommodationImage, User, UserRole
from way2pg.models.accommodation import AccommodationType, RoomType, GenderPolicy, Furnishing
from way2pg.services.accommodation_service import accommodation_service
from way2pg.services.booking_service import booking_service
from way2pg.services.storage_service import MediaAsset
from way2pg.services.user_service import user_service

fake = Faker()

TEST_PASSWORD = 'Passw0rd!'
_phone_counter = itertools.count(9000000000)


def unique_phone() -> str:
    """Normalized phone number that is unique within the test run"""
    return f"+91{next(_phone_counter)}"


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database for each test"""
    engine = create_async_engine(
        'sqlite+aiosqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client sharing the test session"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def mock_storage():
    """Media host double; uploads get sequential ids, deletes succeed"""
    counter = itertools.count(1)
    storage = AsyncMock()

    async def upload(data, folder=None, content_type='image/jpeg', filename=None):
        n = next(counter)
        public_id = f"{folder or 'test'}/img{n}"
        return MediaAsset(url=f"https://media.test/{public_id}", public_id=public_id)

    storage.upload.side_effect = upload
    storage.delete.return_value = True

    with patch.object(accommodation_service, 'storage', storage):
        yield storage


@pytest.fixture(autouse=True)
def mock_mailer():
    """Mail sender double shared by the booking and user services"""
    mailer = AsyncMock()
    mailer.send_owner_notification.return_value = True
    mailer.send_email_verification_code.return_value = True
    mailer.send_password_reset_email.return_value = True

    with patch.object(booking_service, 'mailer', mailer), patch.object(user_service, 'mailer', mailer):
        yield mailer


async def create_user(db: AsyncSession, role: UserRole, **overrides) -> User:
    fields = dict(
        name=fake.name()[:50],
        phone_number=unique_phone(),
        email=fake.unique.email(),
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
    )
    if role is UserRole.OWNER:
        fields.update(company_name=fake.company(), business_registration=fake.bothify('REG-####'))
    fields.update(overrides)
    user = User(**fields)
    db.add(user)
    await db.commit()
    return user


def listing_fields(**overrides) -> dict:
    fields = dict(
        name=f"{fake.last_name()} PG",
        description=fake.sentence(),
        address=fake.street_address(),
        city='Hyderabad',
        price=8000.0,
        type=AccommodationType.PG,
        room_type=RoomType.DOUBLE,
        gender=GenderPolicy.ANY,
        furnishing=Furnishing.FURNISHED,
        capacity=2,
        security_deposit=10000.0,
        amenities=['wifi', 'laundry'],
        rules=['no smoking'],
    )
    fields.update(overrides)
    return fields


async def create_accommodation(db: AsyncSession, owner: User, images: int = 0, **overrides) -> Accommodation:
    accommodation = Accommodation(
        owner=owner,
        images=[
            AccommodationImage(url=f"https://media.test/seed/{i}", public_id=f"seed/{i}", position=i)
            for i in range(images)
        ],
        **listing_fields(**overrides),
    )
    db.add(accommodation)
    await db.commit()
    return accommodation


def auth_header_for(user: User, role: str = None) -> dict:
    token = issue_token(user.id, role or user.role_value)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def make_user(db_session: AsyncSession):
    async def _make(role: UserRole = UserRole.STUDENT, **overrides) -> User:
        return await create_user(db_session, role, **overrides)
    return _make


@pytest.fixture
def make_accommodation(db_session: AsyncSession):
    async def _make(owner: User, images: int = 0, **overrides) -> Accommodation:
        return await create_accommodation(db_session, owner, images=images, **overrides)
    return _make


@pytest.fixture
def headers_for():
    return auth_header_for


@pytest.fixture
def listing_payload():
    """JSON body accepted by the accommodation create endpoints"""
    def _payload(**overrides) -> dict:
        fields = listing_fields(**overrides)
        return {key: value.value if hasattr(value, 'value') else value for key, value in fields.items()}
    return _payload


@pytest.fixture
async def student(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.STUDENT)


@pytest.fixture
async def owner(db_session: AsyncSession) -> User:
    """Approved owner"""
    return await create_user(db_session, UserRole.OWNER, is_approved=True)


@pytest.fixture
async def pending_owner(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.OWNER)


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(db_session, UserRole.ADMIN)


@pytest.fixture
async def accommodation(db_session: AsyncSession, owner: User) -> Accommodation:
    return await create_accommodation(db_session, owner, images=2)


@pytest.fixture
def student_headers(student: User) -> dict:
    return auth_header_for(student)


@pytest.fixture
def owner_headers(owner: User) -> dict:
    return auth_header_for(owner)


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return auth_header_for(admin)
