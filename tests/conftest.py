import fnmatch
import os
from typing import AsyncGenerator, Dict
from uuid import UUID

# catalog 모듈을 import하기 전에 테스트 환경 변수를 설정해야 함 (설정/엔진이 import 시점에 생성됨)
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catalog.core.database import get_db_async
from catalog.dependencies import get_cache_manager
from catalog.main import app
from catalog.models import Base
from catalog.seed import seed_data
from catalog.services.attribute_service import AttributeService
from catalog.services.cache_manager import CacheManager
from catalog.services.category_attribute_service import CategoryAttributeService
from catalog.services.category_service import CategoryService


class FakeRedis:
    """redis.asyncio.Redis 모킹 (메모리 저장)"""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.closed = False

    async def ping(self):
        return True

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value):
        self.store[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        deleted = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.ttls.pop(key, None)
                deleted += 1
        return deleted

    async def scan_iter(self, match=None, count=None):
        for key in list(self.store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def cache_manager(fake_redis) -> CacheManager:
    """메모리 Redis를 사용하는 캐시 매니저"""
    manager = CacheManager(redis_client=fake_redis)
    await manager.initialize()
    return manager


@pytest_asyncio.fixture
async def async_engine():
    """테스트마다 새로운 인메모리 SQLite 데이터베이스"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def category_service(async_session, cache_manager) -> CategoryService:
    return CategoryService(async_session, cache_manager)


@pytest.fixture
def link_service(async_session, cache_manager) -> CategoryAttributeService:
    return CategoryAttributeService(async_session, cache_manager)


@pytest.fixture
def attribute_service(async_session, cache_manager) -> AttributeService:
    return AttributeService(async_session, cache_manager)


@pytest_asyncio.fixture
async def catalog_ids(async_session, cache_manager) -> Dict[str, UUID]:
    """샘플 카탈로그 생성 후 이름별 ID 반환

    Food & Grocery > Beverages(Brand) > Flavoured Drinks(Color, Flavour) / Carbonated Drinks
    Food & Grocery > Snacks(Usage Instructions)
    Electronics > Phones > Smartphones(Storage Capacity, Brand)
    Material은 전역 속성
    """
    return await seed_data(async_session, cache_manager)


@pytest_asyncio.fixture
async def async_client(session_factory, cache_manager) -> AsyncGenerator[AsyncClient, None]:
    """테스트에서 사용할 비동기 클라이언트 (DB/캐시 의존성 교체)"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_async] = override_get_db
    app.dependency_overrides[get_cache_manager] = lambda: cache_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
