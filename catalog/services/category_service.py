"""
카테고리 서비스

카테고리 CRUD, 트리 조회, 상위/하위 카테고리 탐색을 처리합니다.
"""
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, delete, func, literal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from loguru import logger

from catalog.core.config import get_settings
from catalog.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from catalog.models.catalog import Category, CategoryAttribute
from catalog.schemas.category import CategoryTreeNode, CategoryUpdate
from catalog.services.cache_manager import CacheManager
from catalog.services.tree_builder import build_tree


ProductCounter = Callable[[Sequence[UUID]], Awaitable[Mapping[UUID, int]]]


async def zero_product_counts(category_ids: Sequence[UUID]) -> Dict[UUID, int]:
    """상품 서비스가 연결되지 않았을 때 사용하는 기본 카운터"""
    return {category_id: 0 for category_id in category_ids}


class CategoryService:
    """카테고리 서비스"""

    def __init__(
        self,
        db: AsyncSession,
        cache: CacheManager,
        product_counter: Optional[ProductCounter] = None
    ):
        self.db = db
        self.cache = cache
        self.product_counter = product_counter or zero_product_counts
        self.settings = get_settings()

    async def get_category(self, category_id: UUID) -> Category:
        """카테고리 단건 조회 (없으면 NotFoundError)"""
        category = await self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"Category with ID {category_id} not found.")
        return category

    async def get_category_tree(self, include_counts: bool = False) -> List[CategoryTreeNode]:
        """전체 카테고리 트리를 조회합니다.

        Args:
            include_counts: 직접 연결 속성 수와 상품 수 포함 여부

        Returns:
            루트 카테고리 목록 (children 포함)
        """
        cache_key = self.cache.tree_key(include_counts)
        cached_tree = await self.cache.get_cache(cache_key)
        if cached_tree is not None:
            logger.debug(f"카테고리 트리 캐시 조회 (include_counts={include_counts})")
            return [CategoryTreeNode.model_validate(item) for item in cached_tree]

        logger.info(f"카테고리 트리를 DB에서 조회합니다 (include_counts={include_counts})")
        result = await self.db.execute(select(Category).order_by(Category.name))
        categories = list(result.scalars().all())

        link_counts: Dict[UUID, int] = {}
        product_counts: Mapping[UUID, int] = {}
        if include_counts:
            count_query = select(
                CategoryAttribute.category_id,
                func.count(CategoryAttribute.id)
            ).group_by(CategoryAttribute.category_id)
            count_result = await self.db.execute(count_query)
            link_counts = {category_id: count for category_id, count in count_result.all()}
            product_counts = await self.product_counter([category.id for category in categories])

        tree = build_tree(categories, include_counts, link_counts, product_counts)

        await self.cache.set_cache(
            cache_key,
            [node.model_dump(mode="json") for node in tree],
            ttl=self.settings.CACHE_TTL_TREE
        )
        return tree

    async def get_ancestors(self, category_id: UUID) -> List[Category]:
        """상위 카테고리 목록 (가까운 부모부터 루트까지, 자기 자신 제외)"""
        await self.get_category(category_id)

        ancestors = select(
            Category.id,
            Category.parent_id,
            literal(0).label("depth")
        ).where(Category.id == category_id).cte("ancestors", recursive=True)

        parent = aliased(Category)
        ancestors = ancestors.union_all(
            select(
                parent.id,
                parent.parent_id,
                ancestors.c.depth + 1
            ).join(ancestors, parent.id == ancestors.c.parent_id)
        )

        query = (
            select(Category)
            .join(ancestors, Category.id == ancestors.c.id)
            .where(ancestors.c.depth > 0)
            .order_by(ancestors.c.depth)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_descendants(self, category_id: UUID) -> List[Category]:
        """하위 카테고리 전체 (자기 자신 제외, 형제 간 순서 보장 없음)"""
        await self.get_category(category_id)

        descendants = select(Category.id).where(
            Category.parent_id == category_id
        ).cte("descendants", recursive=True)

        child = aliased(Category)
        descendants = descendants.union_all(
            select(child.id).join(descendants, child.parent_id == descendants.c.id)
        )

        query = select(Category).join(descendants, Category.id == descendants.c.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_category(self, name: str, parent_id: Optional[UUID] = None) -> Category:
        """새 카테고리를 생성합니다.

        Raises:
            NotFoundError: 상위 카테고리가 없는 경우
            ConflictError: 같은 이름의 카테고리가 이미 있는 경우
        """
        if parent_id is not None:
            await self._ensure_parent_exists(parent_id)
        await self._ensure_name_available(name)

        category = Category(name=name, parent_id=parent_id)
        try:
            self.db.add(category)
            await self.db.commit()
            await self.db.refresh(category)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"카테고리 생성 중 오류: {e}")
            raise

        logger.info(f"카테고리 생성: {category.name} ({category.id}), 상위: {parent_id}")
        await self._invalidate_tree_caches()
        return category

    async def update_category(self, category_id: UUID, data: CategoryUpdate) -> Category:
        """카테고리 이름 또는 상위 카테고리를 변경합니다.

        data에 parent_id가 명시적으로 None으로 들어오면 루트로 이동합니다.

        Raises:
            NotFoundError: 카테고리 또는 새 상위 카테고리가 없는 경우
            InvalidArgumentError: 자기 자신이나 하위 카테고리를 상위로 지정한 경우
            ConflictError: 같은 이름의 다른 카테고리가 있는 경우
        """
        category = await self.get_category(category_id)

        rename = bool(data.name) and data.name != category.name
        if rename:
            await self._ensure_name_available(data.name, exclude_id=category_id)

        move = "parent_id" in data.model_fields_set
        new_parent_id = data.parent_id
        if move and new_parent_id is not None:
            if new_parent_id == category_id:
                raise InvalidArgumentError("A category cannot be its own parent.")
            await self._ensure_parent_exists(new_parent_id)
            # 하위 카테고리를 부모로 지정하면 순환이 생긴다
            descendant_ids = {d.id for d in await self.get_descendants(category_id)}
            if new_parent_id in descendant_ids:
                raise InvalidArgumentError(
                    f"Category {new_parent_id} is a descendant of {category_id} and cannot become its parent."
                )

        if rename:
            category.name = data.name
        if move:
            category.parent_id = new_parent_id

        try:
            await self.db.commit()
            await self.db.refresh(category)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"카테고리 수정 중 오류: {e}")
            raise

        logger.info(f"카테고리 수정: {category.name} ({category.id}), 상위: {category.parent_id}")
        # 상위가 바뀌면 상속 속성도 바뀌므로 전체 캐시를 비운다
        await self._invalidate_tree_caches()
        await self.cache.reset_all()
        return category

    async def delete_category(self, category_id: UUID) -> None:
        """카테고리를 삭제합니다. 자식이 있으면 삭제할 수 없습니다.

        Raises:
            NotFoundError: 카테고리가 없는 경우
            ConflictError: 하위 카테고리가 있는 경우
        """
        category = await self.get_category(category_id)

        children_count = await self.db.scalar(
            select(func.count(Category.id)).where(Category.parent_id == category_id)
        )
        if children_count:
            raise ConflictError(
                f'Category "{category.name}" has children and cannot be deleted. Delete children first.'
            )

        try:
            await self.db.execute(
                delete(CategoryAttribute).where(CategoryAttribute.category_id == category_id)
            )
            await self.db.delete(category)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"카테고리 삭제 중 오류: {e}")
            raise

        logger.info(f"카테고리 삭제 완료: {category_id}")
        await self._invalidate_tree_caches()
        await self.cache.reset_all()

    async def _ensure_parent_exists(self, parent_id: UUID) -> None:
        try:
            await self.get_category(parent_id)
        except NotFoundError:
            raise NotFoundError(f"Parent category with ID {parent_id} not found.")

    async def _ensure_name_available(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        if await self.db.scalar(query) is not None:
            raise ConflictError(f"Category with name '{name}' already exists.")

    async def _invalidate_tree_caches(self) -> None:
        """카테고리 트리 캐시 (카운트 포함/미포함) 삭제"""
        logger.debug("카테고리 트리 캐시 무효화")
        await self.cache.delete_cache_key(*self.cache.tree_keys())
