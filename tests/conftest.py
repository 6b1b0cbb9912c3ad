"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite database, session, and httpx client
fixtures. Each test gets a fresh schema; the request handlers share the
test's session so fixtures and API calls see the same data.
"""

import os

# 설정 로드 전에 테스트 환경 고정 — must run before ponto.config is imported
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["FACE_MATCH_URL"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["SMTP_USER"] = ""
os.environ["AWS_ACCESS_KEY_ID"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ponto.database import Database, get_db  # noqa: E402
from ponto.main import create_app  # noqa: E402
from ponto.models import AuthorizedDevice, Company, TimeRecord, User  # noqa: E402
from ponto.utils.jwt import create_access_token  # noqa: E402
from ponto.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"
PASSWORD = "senha123"
DEVICE_ID = "device-1"


# ---------------------------------------------------------------------------
# Function-scoped: DB, 세션, 앱, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """테스트마다 새 인메모리 DB — single shared connection via StaticPool."""
    db_handle = Database(TEST_DATABASE_URL, poolclass=StaticPool)
    await db_handle.create_all()
    yield db_handle
    await db_handle.dispose()


@pytest_asyncio.fixture
async def db(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def app(database: Database, db: AsyncSession) -> FastAPI:
    """테스트용 앱 — 주입한 DB 핸들 사용, 요청 세션은 테스트 세션으로 오버라이드."""
    application = create_app(database=database)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = _override_get_db
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# 헬퍼: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def make_company(db: AsyncSession, name: str, legal_id: str, domain: str, **fields) -> Company:
    company = Company(
        name=name,
        legal_id=legal_id,
        email=f"contato@{domain}",
        email_domain=domain,
        is_active=fields.pop("is_active", True),
        **fields,
    )
    db.add(company)
    await db.flush()
    await db.refresh(company)
    return company


async def make_user(
    db: AsyncSession,
    company: Company,
    email: str,
    national_id: str,
    role: str = "employee",
    devices: tuple[str, ...] = (),
    **fields,
) -> User:
    user = User(
        company_id=company.id,
        name=fields.pop("name", email.split("@")[0].title()),
        email=email,
        password_hash=hash_password(PASSWORD),
        national_id=national_id,
        role=role,
        is_active=fields.pop("is_active", True),
        devices=[AuthorizedDevice(device_id=d, device_name=f"Phone {d}") for d in devices],
        **fields,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def make_record(
    db: AsyncSession,
    user: User,
    record_type: str,
    timestamp: datetime,
    status: str = "valid",
) -> TimeRecord:
    record = TimeRecord(
        user_id=user.id,
        company_id=user.company_id,
        type=record_type,
        timestamp=timestamp,
        location={"latitude": -23.5505, "longitude": -46.6333, "address": None},
        device_info={"device_id": DEVICE_ID, "device_name": "Phone", "platform": "android", "app_version": "1.0.0"},
        validation={
            "face_recognition": {"status": "skipped", "confidence": None, "image_url": None},
            "geolocation": {"status": "success", "distance_from_workplace": 0.0},
            "device_auth": {"status": "success"},
        },
        overall_status=status,
        is_synced=True,
    )
    db.add(record)
    await db.flush()
    await db.refresh(record)
    return record


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def company(db: AsyncSession) -> Company:
    """근무지 좌표가 있는 테스트 회사 (São Paulo, 반경 200m)."""
    return await make_company(
        db,
        "Acme Ltda",
        "11.111.111/0001-11",
        "acme.com.br",
        workplace_latitude=-23.5505,
        workplace_longitude=-46.6333,
        geofence_radius_m=200.0,
    )


@pytest_asyncio.fixture
async def other_company(db: AsyncSession) -> Company:
    """다른 테넌트 — 근무지 좌표 없음."""
    return await make_company(db, "Globex SA", "22.222.222/0001-22", "globex.com")


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, company: Company) -> User:
    return await make_user(db, company, "admin@acme.com.br", "000.000.000-01", role="admin")


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession, company: Company) -> User:
    return await make_user(db, company, "gerente@acme.com.br", "000.000.000-02", role="manager")


@pytest_asyncio.fixture
async def hr_user(db: AsyncSession, company: Company) -> User:
    return await make_user(db, company, "rh@acme.com.br", "000.000.000-03", role="hr")


@pytest_asyncio.fixture
async def employee_user(db: AsyncSession, company: Company) -> User:
    """인증 기기 1대(DEVICE_ID)를 가진 직원."""
    return await make_user(
        db, company, "joao@acme.com.br", "000.000.000-04", devices=(DEVICE_ID,), department="Vendas"
    )


@pytest_asyncio.fixture
async def other_employee(db: AsyncSession, other_company: Company) -> User:
    """다른 회사 직원."""
    return await make_user(
        db, other_company, "maria@globex.com", "000.000.000-05", devices=("device-x",), department="Suporte"
    )


@pytest_asyncio.fixture
async def other_manager(db: AsyncSession, other_company: Company) -> User:
    return await make_user(db, other_company, "chefe@globex.com", "000.000.000-06", role="manager")


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({
        "sub": str(user.id),
        "company": str(user.company_id),
        "role": user.role,
    })


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return make_token(admin_user)


@pytest.fixture
def manager_token(manager_user: User) -> str:
    return make_token(manager_user)


@pytest.fixture
def hr_token(hr_user: User) -> str:
    return make_token(hr_user)


@pytest.fixture
def employee_token(employee_user: User) -> str:
    return make_token(employee_user)


@pytest.fixture
def other_employee_token(other_employee: User) -> str:
    return make_token(other_employee)


@pytest.fixture
def other_manager_token(other_manager: User) -> str:
    return make_token(other_manager)


def auth_header(token: str, device_id: str | None = None) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {token}"}
    if device_id is not None:
        headers["X-Device-ID"] = device_id
    return headers
