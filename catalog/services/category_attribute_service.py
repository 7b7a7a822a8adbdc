"""
카테고리-속성 직접 연결 서비스
"""
from typing import Iterable, List, Set
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger

from catalog.core.exceptions import NotFoundError
from catalog.models.catalog import Attribute, Category, CategoryAttribute
from catalog.services.cache_manager import CacheManager


class CategoryAttributeService:
    """카테고리-속성 직접 연결 서비스

    직접 연결만 저장한다. 상속/전역 관계는 AttributeService에서 계산한다.
    """

    def __init__(self, db: AsyncSession, cache: CacheManager):
        self.db = db
        self.cache = cache

    async def find_direct_links_by_category_id(self, category_id: UUID) -> List[CategoryAttribute]:
        """카테고리에 직접 연결된 링크 목록"""
        result = await self.db.execute(
            select(CategoryAttribute)
            .where(CategoryAttribute.category_id == category_id)
            .order_by(CategoryAttribute.created_at)
        )
        return list(result.scalars().all())

    async def find_all_category_attribute_links(self) -> List[CategoryAttribute]:
        result = await self.db.execute(select(CategoryAttribute))
        return list(result.scalars().all())

    async def linked_attribute_ids(self, category_ids: Iterable[UUID]) -> Set[UUID]:
        """주어진 카테고리들에 직접 연결된 속성 ID 집합"""
        category_ids = list(category_ids)
        if not category_ids:
            return set()
        result = await self.db.execute(
            select(CategoryAttribute.attribute_id)
            .where(CategoryAttribute.category_id.in_(category_ids))
        )
        return set(result.scalars().all())

    async def get_directly_linked_attributes(self, category_id: UUID) -> List[Attribute]:
        """카테고리에 직접 연결된 속성 목록 (이름순)"""
        if await self.db.get(Category, category_id) is None:
            raise NotFoundError(f"Category with ID {category_id} not found.")

        result = await self.db.execute(
            select(Attribute)
            .join(CategoryAttribute, CategoryAttribute.attribute_id == Attribute.id)
            .where(CategoryAttribute.category_id == category_id)
            .order_by(Attribute.name)
        )
        return list(result.scalars().all())

    async def create_direct_link(self, category_id: UUID, attribute_id: UUID) -> CategoryAttribute:
        """카테고리와 속성을 직접 연결합니다.

        이미 연결되어 있으면 기존 링크를 그대로 반환합니다.

        Raises:
            NotFoundError: 카테고리 또는 속성이 없는 경우
        """
        if await self.db.get(Category, category_id) is None:
            raise NotFoundError(f"Category with ID {category_id} not found.")
        if await self.db.get(Attribute, attribute_id) is None:
            raise NotFoundError(f"Attribute with ID {attribute_id} not found.")

        existing_link = await self._find_link(category_id, attribute_id)
        if existing_link:
            logger.debug(f"이미 존재하는 링크 반환: {category_id} - {attribute_id}")
            return existing_link

        link = CategoryAttribute(category_id=category_id, attribute_id=attribute_id)
        try:
            self.db.add(link)
            await self.db.commit()
            await self.db.refresh(link)
        except IntegrityError:
            # 동시에 같은 링크가 생성된 경우 먼저 들어간 행을 반환
            await self.db.rollback()
            logger.warning(f"중복 링크 생성 시도: {category_id} - {attribute_id}")
            existing_link = await self._find_link(category_id, attribute_id)
            if existing_link is None:
                raise
            return existing_link
        except Exception as e:
            await self.db.rollback()
            logger.error(f"링크 생성 중 오류: {e}")
            raise

        logger.info(f"카테고리 {category_id}에 속성 {attribute_id} 직접 연결")
        await self._invalidate_attribute_caches()
        return link

    async def delete_direct_link(self, category_id: UUID, attribute_id: UUID) -> None:
        """직접 연결을 삭제합니다.

        Raises:
            NotFoundError: 해당 링크가 없는 경우
        """
        try:
            result = await self.db.execute(
                delete(CategoryAttribute).where(
                    CategoryAttribute.category_id == category_id,
                    CategoryAttribute.attribute_id == attribute_id
                )
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"링크 삭제 중 오류: {e}")
            raise

        if result.rowcount == 0:
            raise NotFoundError(
                f"Link between category {category_id} and attribute {attribute_id} not found."
            )

        logger.info(f"카테고리 {category_id}와 속성 {attribute_id} 연결 해제")
        await self._invalidate_attribute_caches()

    async def _find_link(self, category_id: UUID, attribute_id: UUID):
        return await self.db.scalar(
            select(CategoryAttribute).where(
                CategoryAttribute.category_id == category_id,
                CategoryAttribute.attribute_id == attribute_id
            )
        )

    async def _invalidate_attribute_caches(self) -> None:
        """링크가 바뀌면 모든 카테고리의 직접/상속/전역 구분이 바뀔 수 있어 전체를 비운다"""
        logger.debug("링크 변경으로 전체 캐시 무효화")
        await self.cache.reset_all()
