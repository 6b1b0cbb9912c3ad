"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration module.
The engine and session factory live on an explicit ``Database`` handle that
the application creates in its lifespan and disposes at shutdown, instead of
module-level globals.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from ponto.config import Settings


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    All models inherit from this class to register with the metadata.
    """

    pass


class Database:
    """DB 엔진과 세션 팩토리를 소유하는 핸들.

    Owns the async engine and session factory. Created once per application
    and closed with ``dispose()``.

    Attributes:
        engine: 비동기 엔진 (Async engine)
        session_factory: 비동기 세션 팩토리 (Async session factory)
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs: Any) -> None:
        # asyncpg 전용 풀 설정 — pool sizing only applies to the postgres driver
        if url.startswith("postgresql+asyncpg"):
            engine_kwargs.setdefault("pool_pre_ping", True)
            engine_kwargs.setdefault("pool_size", 5)
            engine_kwargs.setdefault("max_overflow", 10)
            # 트랜잭션 모드 풀러에서 prepared statement 비활성화
            # Disable prepared statement caches for transaction-mode poolers
            engine_kwargs.setdefault("connect_args", {"statement_cache_size": 0})

        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **engine_kwargs)
        # expire_on_commit=False: 커밋 후에도 객체 속성 접근 가능 (Allows attribute access after commit)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DEBUG)

    async def create_all(self) -> None:
        """모든 테이블을 생성합니다 (개발/테스트용).

        Create all tables from the ORM metadata. Production schemas are
        managed by Alembic.
        """
        import ponto.models  # noqa: F401 — register all models with metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """비동기 데이터베이스 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields an async database session from the
    application's ``Database`` handle (``app.state.database``).

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
