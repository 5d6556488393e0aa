from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/portal` is importable as top-level `portal` for tests.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from portal.api.deps import get_db_session  # noqa: E402
from portal.core.base import Base  # noqa: E402
from portal.main import app  # noqa: E402
from portal.models.company_user import CompanyUser  # noqa: E402
from portal.models.country import Country  # noqa: E402
from portal.models.training_company import TrainingCompany  # noqa: E402
from portal.security.rate_limit import get_limiter  # noqa: E402
from portal.security.roles import CompanyUserRole  # noqa: E402


TEST_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def _auth_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PORTAL_JWT_SECRET", TEST_SECRET)
    get_limiter.cache_clear()
    yield
    get_limiter.cache_clear()


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory schema per test (one shared connection)."""
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory: sessionmaker[Session]) -> Generator[TestClient, None, None]:
    def _override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db_session, None)


def make_jwt(
    sub: int,
    user_type: str,
    secret: str,
    *,
    role: Optional[str] = None,
    company_id: Optional[int] = None,
    exp: Optional[int] = None,
) -> str:
    """HS256 JWT generator for API tests (independent of the code under test)."""
    import base64, hashlib, hmac, json  # noqa: E401

    def b64url(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    header = {"alg": "HS256", "typ": "JWT"}
    payload: dict[str, object] = {"sub": sub, "user_type": user_type}
    if role is not None:
        payload["role"] = role
    if company_id is not None:
        payload["company_id"] = company_id
    if exp is not None:
        payload["exp"] = exp

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"


def auth_header(
    sub: int,
    *,
    user_type: str = "TRAINING_COMPANY",
    role: Optional[str] = None,
    company_id: Optional[int] = None,
) -> dict[str, str]:
    token = make_jwt(sub, user_type, TEST_SECRET, role=role, company_id=company_id)
    return {"Authorization": f"Bearer {token}"}


def add_company(session: Session, name: str = "Muster Akademie GmbH") -> TrainingCompany:
    company = TrainingCompany(company_name=name, email=f"{name.split()[0].lower()}@example.com")
    session.add(company)
    session.commit()
    return company


def add_user(
    session: Session,
    company: TrainingCompany,
    email: str,
    role: CompanyUserRole = CompanyUserRole.EDITOR,
    *,
    is_active: bool = True,
) -> CompanyUser:
    user = CompanyUser(
        company_id=company.id,
        email=email,
        first_name=email.split("@")[0].capitalize(),
        last_name="Tester",
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    return user


def add_country(session: Session, name: str, code: str) -> Country:
    country = Country(name=name, code=code)
    session.add(country)
    session.commit()
    return country
