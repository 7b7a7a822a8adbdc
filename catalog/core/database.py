"""
카탈로그 데이터베이스 연결 관리
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from loguru import logger

from catalog.core.config import get_settings
from catalog.models.base import Base


# 설정 로드
settings = get_settings()

engine_args = {
    "pool_pre_ping": True,
    "echo": False,
}

# sqlite(로컬/테스트)는 연결 풀 옵션을 지원하지 않음
if settings.DATABASE_URL.startswith("postgresql"):
    engine_args.update({
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_use_lifo": True,  # LIFO 방식으로 유휴 연결 감소
    })

async_engine = create_async_engine(settings.DATABASE_URL, **engine_args)

# 비동기 세션 팩토리 생성
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    expire_on_commit=False,
    class_=AsyncSession
)

if "pool_size" in engine_args:
    logger.info(f"SQLAlchemy 연결 풀 설정 - 크기: {settings.DB_POOL_SIZE}, "
                f"최대 오버플로우: {settings.DB_MAX_OVERFLOW}, "
                f"타임아웃: {settings.DB_POOL_TIMEOUT}초, "
                f"재활용: {settings.DB_POOL_RECYCLE}초")


async def get_db_async() -> AsyncGenerator[AsyncSession, None]:
    """데이터베이스 세션 의존성"""
    async with AsyncSessionLocal() as session:
        yield session


async def init_models() -> None:
    """테이블 생성 (마이그레이션 도구 없이 로컬 실행할 때 사용)"""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("카탈로그 테이블 생성 확인 완료")


async def close_db_connections() -> None:
    """
    애플리케이션 종료 시 DB 연결 정리
    """
    logger.info("DB 연결 종료 중...")
    await async_engine.dispose()
    logger.info("DB 연결이 안전하게 종료되었습니다.")
