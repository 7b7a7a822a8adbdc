"""
샘플 카탈로그 데이터 생성

기존 데이터를 모두 지우고 예시 카테고리/속성/링크를 다시 만든다.

    python -m catalog.seed
"""
import asyncio
from typing import Dict
from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from catalog.core.database import AsyncSessionLocal, close_db_connections, init_models
from catalog.core.logger import setup_loguru
from catalog.models.catalog import Attribute, Category, CategoryAttribute
from catalog.services.attribute_service import AttributeService
from catalog.services.cache_manager import CacheManager
from catalog.services.category_attribute_service import CategoryAttributeService
from catalog.services.category_service import CategoryService


# (이름, 상위 카테고리 이름) - 상위가 먼저 나와야 함
SEED_CATEGORIES = [
    ("Food & Grocery", None),
    ("Beverages", "Food & Grocery"),
    ("Flavoured Drinks", "Beverages"),
    ("Carbonated Drinks", "Beverages"),
    ("Snacks", "Food & Grocery"),
    ("Electronics", None),
    ("Phones", "Electronics"),
    ("Smartphones", "Phones"),
]

# Material은 어디에도 연결하지 않아 전역 속성이 된다
SEED_ATTRIBUTES = [
    ("Color", "Short Text"),
    ("Flavour", "Dropdown"),
    ("Brand", "Short Text"),
    ("Material", "Short Text"),
    ("Usage Instructions", "Long Text"),
    ("Storage Capacity", "Short Text"),
]

SEED_LINKS = [
    ("Flavoured Drinks", "Color"),
    ("Flavoured Drinks", "Flavour"),
    ("Beverages", "Brand"),
    ("Snacks", "Usage Instructions"),
    ("Smartphones", "Storage Capacity"),
    ("Smartphones", "Brand"),
]


async def clear_data(db: AsyncSession) -> None:
    """링크, 카테고리, 속성 순으로 전체 삭제"""
    try:
        await db.execute(delete(CategoryAttribute))
        # 자식부터 지우지 않아도 되도록 부모 참조를 먼저 끊는다
        await db.execute(update(Category).values(parent_id=None))
        await db.execute(delete(Category))
        await db.execute(delete(Attribute))
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"기존 데이터 삭제 중 오류: {e}")
        raise


async def seed_data(db: AsyncSession, cache: CacheManager) -> Dict[str, UUID]:
    """샘플 데이터를 생성하고 이름별 ID를 반환합니다."""
    logger.info("샘플 데이터 생성 시작")

    await clear_data(db)
    await cache.reset_all()
    logger.info("기존 데이터 삭제 완료")

    category_service = CategoryService(db, cache)
    attribute_service = AttributeService(db, cache)
    link_service = CategoryAttributeService(db, cache)

    ids: Dict[str, UUID] = {}
    for name, parent_name in SEED_CATEGORIES:
        category = await category_service.create_category(
            name, ids[parent_name] if parent_name else None
        )
        ids[name] = category.id

    for name, attribute_type in SEED_ATTRIBUTES:
        attribute = await attribute_service.create_attribute(name, attribute_type)
        ids[name] = attribute.id

    for category_name, attribute_name in SEED_LINKS:
        await link_service.create_direct_link(ids[category_name], ids[attribute_name])

    logger.info("샘플 데이터 생성 완료")
    for name, entity_id in ids.items():
        logger.info(f"  {name}: {entity_id}")
    return ids


async def main() -> None:
    setup_loguru()
    await init_models()

    cache = CacheManager()
    await cache.initialize()
    try:
        async with AsyncSessionLocal() as db:
            await seed_data(db, cache)
    finally:
        await cache.close()
        await close_db_connections()


if __name__ == "__main__":
    asyncio.run(main())
