"""Special pytest fixture configuration file.

Environment variables are set before anything under ``app`` is imported so
that the module-level settings and engine point at a throwaway SQLite file.
"""
import os
from pathlib import Path

DB_FILE = "./pytest.db"
SERVICE_DB_FILE = "./pytest_service.db"

os.environ["JWT_SECRET_KEY"] = "testing_secret"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_FILE}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_AUTHENTICATED_CAPACITY"] = "10000"
os.environ["RATE_LIMIT_ANONYMOUS_CAPACITY"] = "10000"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.database import Base, build_engine, drop_db
from app.main import create_app


@pytest.fixture
def secret():
    return "testing_secret"


@pytest.fixture
def settings():
    return get_settings()


def make_client(settings=None):
    """create_app()으로 새 앱을 만들고 lifespan(테이블 생성)까지 실행한 TestClient"""
    return TestClient(create_app(settings))


@pytest.fixture
def client():
    with make_client() as c:
        yield c
        c.portal.call(drop_db)
    Path(DB_FILE).unlink(missing_ok=True)


@pytest_asyncio.fixture
async def db_session():
    """서비스 계층 테스트용 AsyncSession (테스트마다 테이블 생성/삭제)"""
    from app.models import follow, post, user  # noqa: F401

    engine = build_engine(f"sqlite+aiosqlite:///{SERVICE_DB_FILE}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            yield session
    finally:
        await drop_db(engine)
        Path(SERVICE_DB_FILE).unlink(missing_ok=True)


# ─── API 헬퍼 ─────────────────────────────────────────────────────────

def register(client, username, password="pw12345678", email=None, display_name=None):
    body = {
        "username": username,
        "email": email or f"{username}@x.com",
        "password": password,
    }
    if display_name:
        body["displayName"] = display_name
    res = client.post("/api/auth/register", json=body)
    assert res.status_code == 201, res.text
    return res.json()["data"]["userId"]


def login(client, username, password="pw12345678"):
    res = client.post("/api/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["data"]["token"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    """(user_id, headers) 튜플"""
    user_id = register(client, "alice", email="alice@x.com")
    return user_id, auth_header(login(client, "alice"))


@pytest.fixture
def bob(client):
    user_id = register(client, "bob")
    return user_id, auth_header(login(client, "bob"))


@pytest.fixture
def carol(client):
    user_id = register(client, "carol")
    return user_id, auth_header(login(client, "carol"))
