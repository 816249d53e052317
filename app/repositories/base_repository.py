import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.exceptions import DatabaseCommitError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Repository 베이스 클래스"""

    def __init__(self, session: AsyncSession):
        """
        session: 비동기 SQLAlchemy 세션
        """
        self.session = session

    async def commit(self) -> None:
        """트랜잭션 커밋 (예외 처리 포함)"""
        try:
            await self.session.commit()
            logger.debug("DB 커밋 성공")
        except SQLAlchemyError as e:
            logger.error("DB 커밋 실패: %s", e)
            await self.session.rollback()
            raise DatabaseCommitError(f"DB 커밋 중 오류 발생: {e}")
