"""
속성 서비스

속성 CRUD와 카테고리 기준 속성 조회(직접/상속/전역 계산)를 처리합니다.
"""
from typing import Dict, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from catalog.core.config import get_settings
from catalog.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from catalog.models.catalog import Attribute, CategoryAttribute
from catalog.schemas.attribute import (
    AttributeLinkType,
    AttributeQuery,
    AttributeResponse,
    SortOrder,
)
from catalog.services.cache_manager import CacheManager
from catalog.services.category_attribute_service import CategoryAttributeService
from catalog.services.category_service import CategoryService


# 정렬 가능한 필드 (camelCase 별칭 포함)
SORTABLE_FIELDS = {
    "name": Attribute.name,
    "type": Attribute.type,
    "created_at": Attribute.created_at,
    "createdAt": Attribute.created_at,
    "updated_at": Attribute.updated_at,
    "updatedAt": Attribute.updated_at,
}


class AttributeService:
    """속성 서비스"""

    def __init__(
        self,
        db: AsyncSession,
        cache: CacheManager,
        category_service: Optional[CategoryService] = None,
        link_service: Optional[CategoryAttributeService] = None
    ):
        self.db = db
        self.cache = cache
        self.category_service = category_service or CategoryService(db, cache)
        self.link_service = link_service or CategoryAttributeService(db, cache)
        self.settings = get_settings()

    async def get_attributes(self, query: AttributeQuery) -> List[AttributeResponse]:
        """필터/정렬/페이지네이션 조건으로 속성 목록을 조회합니다.

        Args:
            query: 조회 조건

        Returns:
            조건에 맞는 속성 목록

        Raises:
            InvalidArgumentError: category_id 없이 exclude_category_id를 쓰거나
                지원하지 않는 정렬 필드를 지정한 경우
            NotFoundError: 존재하지 않는 카테고리 ID가 포함된 경우
        """
        if query.exclude_category_id and not query.category_id:
            raise InvalidArgumentError(
                "exclude_category_id filter requires category_id parameter to be supplied."
            )
        if query.sort_by is not None and query.sort_by not in SORTABLE_FIELDS:
            raise InvalidArgumentError(f"Unsupported sort field: {query.sort_by}")

        cache_key = self.cache.attributes_key(query.cache_key_payload())
        cached = await self.cache.get_cache(cache_key)
        if cached is not None:
            logger.debug(f"속성 목록 캐시 조회: {cache_key}")
            return [AttributeResponse.model_validate(item) for item in cached]

        logger.info(f"속성 목록을 DB에서 조회합니다: {query.cache_key_payload()}")

        attribute_ids: Optional[Set[UUID]] = None
        if query.category_id:
            attribute_ids = await self._resolve_candidate_ids(query)

        if attribute_ids is not None and not attribute_ids:
            attributes: List[AttributeResponse] = []
        else:
            attributes = await self._query_attributes(query, attribute_ids)

        await self.cache.set_cache(
            cache_key,
            [attribute.model_dump(mode="json") for attribute in attributes],
            ttl=self.settings.CACHE_TTL_ATTRIBUTES
        )
        return attributes

    async def _resolve_candidate_ids(self, query: AttributeQuery) -> Set[UUID]:
        """카테고리 필터로 후보 속성 ID 집합을 계산"""
        direct_ids: Set[UUID] = set()
        inherited_ids: Set[UUID] = set()
        for category_id in dict.fromkeys(query.category_id):
            direct, inherited = await self._applicable_attribute_ids(category_id)
            direct_ids |= direct
            inherited_ids |= inherited

        global_ids = await self.get_global_attribute_ids()

        sets_by_type: Dict[AttributeLinkType, Set[UUID]] = {
            AttributeLinkType.DIRECT: direct_ids,
            AttributeLinkType.INHERITED: inherited_ids,
            AttributeLinkType.GLOBAL: global_ids,
        }
        requested_types = set(query.link_type) if query.link_type else set(sets_by_type)

        attribute_ids: Set[UUID] = set()
        for link_type in requested_types:
            attribute_ids |= sets_by_type[link_type]

        if query.exclude_category_id:
            excluded_ids: Set[UUID] = set(global_ids)
            for category_id in dict.fromkeys(query.exclude_category_id):
                direct, inherited = await self._applicable_attribute_ids(category_id)
                excluded_ids |= direct | inherited
            attribute_ids -= excluded_ids

        return attribute_ids

    async def _applicable_attribute_ids(self, category_id: UUID) -> Tuple[Set[UUID], Set[UUID]]:
        """카테고리의 (직접 연결, 상속) 속성 ID 집합"""
        ancestors = await self.category_service.get_ancestors(category_id)
        direct = await self.link_service.linked_attribute_ids([category_id])
        inherited = await self.link_service.linked_attribute_ids(a.id for a in ancestors)
        return direct, inherited

    async def get_global_attribute_ids(self) -> Set[UUID]:
        """어떤 카테고리에도 직접 연결되지 않은 속성 ID 집합"""
        all_ids = set((await self.db.execute(select(Attribute.id))).scalars().all())
        links = await self.link_service.find_all_category_attribute_links()
        return all_ids - {link.attribute_id for link in links}

    async def _query_attributes(
        self,
        query: AttributeQuery,
        attribute_ids: Optional[Set[UUID]]
    ) -> List[AttributeResponse]:
        stmt = select(Attribute)

        if attribute_ids is not None:
            stmt = stmt.where(Attribute.id.in_(list(attribute_ids)))

        if query.keyword:
            stmt = stmt.where(Attribute.name.icontains(query.keyword, autoescape=True))

        if query.sort_by:
            column = SORTABLE_FIELDS[query.sort_by]
            stmt = stmt.order_by(column.desc() if query.sort_order == SortOrder.DESC else column.asc())
        else:
            stmt = stmt.order_by(Attribute.created_at.desc())
        stmt = stmt.order_by(Attribute.id)

        stmt = stmt.offset((query.page - 1) * query.limit).limit(query.limit)

        result = await self.db.execute(stmt)
        return [AttributeResponse.model_validate(attribute) for attribute in result.scalars().all()]

    async def get_attribute(self, attribute_id: UUID) -> Attribute:
        attribute = await self.db.get(Attribute, attribute_id)
        if attribute is None:
            raise NotFoundError(f"Attribute with ID {attribute_id} not found.")
        return attribute

    async def create_attribute(self, name: str, type: str) -> Attribute:
        """새 속성을 생성합니다.

        Raises:
            ConflictError: 같은 이름의 속성이 이미 있는 경우
        """
        await self._ensure_name_available(name)

        attribute = Attribute(name=name, type=type)
        try:
            self.db.add(attribute)
            await self.db.commit()
            await self.db.refresh(attribute)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"속성 생성 중 오류: {e}")
            raise

        logger.info(f"속성 생성: {attribute.name} ({attribute.id})")
        await self._invalidate_attribute_caches()
        return attribute

    async def update_attribute(
        self,
        attribute_id: UUID,
        name: Optional[str] = None,
        type: Optional[str] = None
    ) -> Attribute:
        """속성 이름/타입을 변경합니다. None인 값은 유지합니다."""
        attribute = await self.get_attribute(attribute_id)

        if name and name != attribute.name:
            await self._ensure_name_available(name, exclude_id=attribute_id)
            attribute.name = name
        if type:
            attribute.type = type

        try:
            await self.db.commit()
            await self.db.refresh(attribute)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"속성 수정 중 오류: {e}")
            raise

        logger.info(f"속성 수정: {attribute.name} ({attribute.id})")
        await self._invalidate_attribute_caches()
        return attribute

    async def delete_attribute(self, attribute_id: UUID) -> None:
        """속성과 해당 속성의 모든 링크를 삭제합니다."""
        attribute = await self.get_attribute(attribute_id)

        try:
            await self.db.execute(
                delete(CategoryAttribute).where(CategoryAttribute.attribute_id == attribute_id)
            )
            await self.db.delete(attribute)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"속성 삭제 중 오류: {e}")
            raise

        logger.info(f"속성 삭제 완료: {attribute_id}")
        await self._invalidate_attribute_caches()

    async def _ensure_name_available(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Attribute.id).where(Attribute.name == name)
        if exclude_id is not None:
            query = query.where(Attribute.id != exclude_id)
        if await self.db.scalar(query) is not None:
            raise ConflictError(f"Attribute with name '{name}' already exists.")

    async def _invalidate_attribute_caches(self) -> None:
        """속성 변경 시 전체 캐시 초기화 (세밀한 무효화 대신 전체 삭제)"""
        logger.debug("속성 변경으로 전체 캐시 무효화")
        await self.cache.reset_all()
