"""
의존성 주입 모듈
"""
from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db_async
from catalog.services.attribute_service import AttributeService
from catalog.services.cache_manager import CacheManager
from catalog.services.category_attribute_service import CategoryAttributeService
from catalog.services.category_service import CategoryService

# 전역 서비스 인스턴스
_cache_manager: CacheManager = None


def set_cache_manager(manager: CacheManager):
    """캐시 매니저 인스턴스 설정"""
    global _cache_manager
    _cache_manager = manager


def get_cache_manager() -> CacheManager:
    """캐시 매니저 인스턴스 반환"""
    if not _cache_manager:
        raise HTTPException(status_code=503, detail="캐시 매니저가 초기화되지 않았습니다.")
    return _cache_manager


def get_category_service(
    db: AsyncSession = Depends(get_db_async),
    cache: CacheManager = Depends(get_cache_manager)
) -> CategoryService:
    return CategoryService(db, cache)


def get_category_attribute_service(
    db: AsyncSession = Depends(get_db_async),
    cache: CacheManager = Depends(get_cache_manager)
) -> CategoryAttributeService:
    return CategoryAttributeService(db, cache)


def get_attribute_service(
    db: AsyncSession = Depends(get_db_async),
    cache: CacheManager = Depends(get_cache_manager)
) -> AttributeService:
    return AttributeService(db, cache)
