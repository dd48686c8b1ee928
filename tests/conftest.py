import json
import os
import secrets
import sys
from pathlib import Path
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure project root on sys.path so 'app' package resolves without an install
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.main import app  # type: ignore
from app.database import Base  # type: ignore
from app.api import deps  # type: ignore
"""Pytest fixtures and factories.

All model modules are imported (via app.models.db) before create_all so the
self-referential user relationship and the ledger tables are registered.
"""
from app.models.db import User, Category, ProductClick, Transaction  # noqa: F401
from app.models.db.enums import UserRole, CategoryStatus
from app.integrations import Credentials, ProductAdvertisingClient

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///./test_storefront.db"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_CREDENTIALS = Credentials(
    access_key="AKIDEXAMPLE",
    secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
    partner_tag="storefront-21",
    marketplace="www.amazon.in",
)

@pytest.fixture(scope="session", autouse=True)
def create_test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    try:
        os.remove("test_storefront.db")
    except OSError:
        pass

@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(autouse=True)
def _clean_tables():
    """Category rules are global to resolution, so every test starts from empty tables."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())

# Override dependency
def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

app.dependency_overrides[deps.get_db] = _override_get_db

class RecordingCatalogClient(ProductAdvertisingClient):
    """Real client whose transport returns queued (status, body) pairs or raises queued exceptions."""

    def __init__(self, credentials: Credentials = TEST_CREDENTIALS):
        super().__init__(credentials, timeout=5)
        self.responses: list = []
        self.calls: list[dict] = []

    def queue(self, status: int, body) -> None:
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append((status, text))

    def queue_error(self, exc: BaseException) -> None:
        self.responses.append(exc)

    async def _send(self, url, headers, body):
        self.calls.append({"url": url, "headers": dict(headers), "body": json.loads(body)})
        if not self.responses:
            return 200, json.dumps({})
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

@pytest.fixture()
def catalog_client():
    fake = RecordingCatalogClient()
    app.dependency_overrides[deps.get_catalog_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(deps.get_catalog_client, None)

@pytest.fixture()
def client():
    return TestClient(app)

# ---------- Data factory helpers ----------

@pytest.fixture()
def user_factory(db_session):
    def _create(
        role: UserRole = UserRole.USER,
        *,
        name: str | None = None,
        referral_code: str | None = None,
        referred_by: User | None = None,
        is_active: bool = True,
    ) -> User:
        u = User(
            name=name or f"{role.value.title()} {secrets.token_hex(2)}",
            email=f"{secrets.token_hex(4)}@example.com",
            api_key=f"key_{secrets.token_hex(12)}",
            role=role,
            referral_code=referral_code,
            referred_by_id=referred_by.id if referred_by else None,
            is_active=is_active,
        )
        db_session.add(u)
        db_session.commit()
        db_session.refresh(u)
        return u
    return _create

@pytest.fixture()
def category_factory(db_session):
    def _create(
        name: str,
        *,
        search_index: str = "All",
        percentage: float = 0.0,
        search_queries: list[str] | None = None,
        status: CategoryStatus = CategoryStatus.ACTIVE,
    ) -> Category:
        c = Category(
            name=name,
            search_index=search_index,
            percentage=percentage,
            search_queries=search_queries or [],
            status=status,
        )
        db_session.add(c)
        db_session.commit()
        db_session.refresh(c)
        return c
    return _create

@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {user.api_key}"}
    return _headers

@pytest.fixture()
def admin_user(user_factory):
    return user_factory(UserRole.ADMIN, name="Admin")

@pytest.fixture()
def agent_user(user_factory):
    return user_factory(UserRole.AGENT, referral_code="AGENT42")

@pytest.fixture()
def make_catalog_client():
    def _create(credentials: Credentials = TEST_CREDENTIALS) -> RecordingCatalogClient:
        return RecordingCatalogClient(credentials)
    return _create
