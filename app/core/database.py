from pathlib import Path
from dotenv import load_dotenv
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.core.config import settings

# .env 파일 경로
ENV_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.env"

def load_env(env_path: Path = ENV_PATH) -> None:
    """
    지정된 .env 파일이 있으면 로드하여 환경 변수를 설정
    - 파일이 없으면 프로세스 환경 변수만 사용
    """
    if env_path.exists():
        load_dotenv(env_path, override=False)


def build_engine(url: str) -> AsyncEngine:
    """
    DB 종류에 맞는 connect_args로 비동기 엔진을 생성
    - MySQL: utf8mb4 문자셋 강제
    - SQLite(aiosqlite): 추가 옵션 없음 (테스트 용도)
    """
    if url.startswith("mysql"):
        return create_async_engine(
            url,
            echo=False,
            future=True,
            connect_args={
                "charset": "utf8mb4",
                "init_command": "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci",
            },
            pool_recycle=1800,
            pool_pre_ping=True,
        )
    return create_async_engine(url, echo=False, future=True)


# 환경 로드
load_env()

# 비동기 엔진 및 세션 팩토리 생성
async_engine = build_engine(settings.SQLALCHEMY_DATABASE_URI)
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# ORM 베이스
Base = declarative_base()

async def init_db(engine: AsyncEngine = async_engine) -> None:
    """
    애플리케이션 시작 시 호출하여 메타데이터 기반 테이블을 생성
    """
    # 모델 import로 메타데이터 등록
    from app.models import user, follow, post  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def drop_db(engine: AsyncEngine = async_engine) -> None:
    """
    모든 테이블을 삭제하고 커넥션 풀을 정리 (테스트 정리용)
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 종속성: 요청마다 새로운 DB 세션을 생성 후 반환
    """
    async with async_session_factory() as session:
        yield session
