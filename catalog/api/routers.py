"""
카탈로그 서비스 API 라우터
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from pydantic import ValidationError

from catalog.core.config import get_settings
from catalog.core.exceptions import InvalidArgumentError
from catalog.dependencies import (
    get_attribute_service,
    get_category_attribute_service,
    get_category_service,
)
from catalog.schemas.attribute import (
    AttributeCreate,
    AttributeQuery,
    AttributeResponse,
    AttributeUpdate,
    CategoryAttributeResponse,
)
from catalog.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from catalog.services.attribute_service import AttributeService
from catalog.services.category_attribute_service import CategoryAttributeService
from catalog.services.category_service import CategoryService

settings = get_settings()

# 카테고리 라우터( /api/v1/categories )
category_router = APIRouter()

# 속성 라우터( /api/v1/attributes )
attribute_router = APIRouter()


@category_router.get("", response_model=List[CategoryTreeNode])
async def get_category_tree(
    include_counts: bool = Query(False, description="직접 연결 속성 수/상품 수 포함"),
    category_service: CategoryService = Depends(get_category_service)
):
    """전체 카테고리 트리 조회"""
    return await category_service.get_category_tree(include_counts)


@category_router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    category_in: CategoryCreate,
    category_service: CategoryService = Depends(get_category_service)
):
    """카테고리 생성"""
    return await category_service.create_category(category_in.name, category_in.parent_id)


@category_router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    category_in: CategoryUpdate,
    category_service: CategoryService = Depends(get_category_service)
):
    """카테고리 이름/상위 카테고리 변경"""
    return await category_service.update_category(category_id, category_in)


@category_router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: UUID,
    category_service: CategoryService = Depends(get_category_service)
):
    """카테고리 삭제 (하위 카테고리가 없어야 함)"""
    await category_service.delete_category(category_id)
    return Response(status_code=204)


@category_router.get("/{category_id}/ancestors", response_model=List[CategoryResponse])
async def get_ancestors(
    category_id: UUID,
    category_service: CategoryService = Depends(get_category_service)
):
    """상위 카테고리 목록 (가까운 부모부터)"""
    return await category_service.get_ancestors(category_id)


@category_router.get("/{category_id}/descendants", response_model=List[CategoryResponse])
async def get_descendants(
    category_id: UUID,
    category_service: CategoryService = Depends(get_category_service)
):
    """하위 카테고리 전체"""
    return await category_service.get_descendants(category_id)


@category_router.get("/{category_id}/attributes", response_model=List[AttributeResponse])
async def get_direct_attributes(
    category_id: UUID,
    link_service: CategoryAttributeService = Depends(get_category_attribute_service)
):
    """카테고리에 직접 연결된 속성 목록"""
    return await link_service.get_directly_linked_attributes(category_id)


@category_router.post("/{category_id}/attributes/{attribute_id}", response_model=CategoryAttributeResponse)
async def link_attribute(
    category_id: UUID,
    attribute_id: UUID,
    link_service: CategoryAttributeService = Depends(get_category_attribute_service)
):
    """카테고리-속성 직접 연결 (이미 있으면 기존 링크 반환)"""
    return await link_service.create_direct_link(category_id, attribute_id)


@category_router.delete("/{category_id}/attributes/{attribute_id}", status_code=204)
async def unlink_attribute(
    category_id: UUID,
    attribute_id: UUID,
    link_service: CategoryAttributeService = Depends(get_category_attribute_service)
):
    """카테고리-속성 직접 연결 해제"""
    await link_service.delete_direct_link(category_id, attribute_id)
    return Response(status_code=204)


@attribute_router.get("", response_model=List[AttributeResponse])
async def get_attributes(
    category_id: Optional[List[str]] = Query(None, description="카테고리 ID (반복 또는 콤마 구분)"),
    link_type: Optional[List[str]] = Query(None, description="direct / inherited / global"),
    exclude_category_id: Optional[List[str]] = Query(None, description="제외할 카테고리 ID"),
    keyword: Optional[str] = Query(None, description="속성명 검색어"),
    page: int = Query(1, ge=1, description="페이지 번호"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, description="페이지 크기"),
    sort_by: Optional[str] = Query(None, description="정렬 필드"),
    sort_order: str = Query("ASC", description="ASC / DESC"),
    attribute_service: AttributeService = Depends(get_attribute_service)
):
    """조건별 속성 목록 조회 (직접/상속/전역)"""
    try:
        query = AttributeQuery(
            category_id=category_id,
            link_type=link_type,
            exclude_category_id=exclude_category_id,
            keyword=keyword,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValidationError as e:
        raise InvalidArgumentError(f"잘못된 조회 조건: {e.errors()[0]['msg']}")
    return await attribute_service.get_attributes(query)


@attribute_router.post("", response_model=AttributeResponse, status_code=201)
async def create_attribute(
    attribute_in: AttributeCreate,
    attribute_service: AttributeService = Depends(get_attribute_service)
):
    """속성 생성"""
    return await attribute_service.create_attribute(attribute_in.name, attribute_in.type)


@attribute_router.put("/{attribute_id}", response_model=AttributeResponse)
async def update_attribute(
    attribute_id: UUID,
    attribute_in: AttributeUpdate,
    attribute_service: AttributeService = Depends(get_attribute_service)
):
    """속성 수정"""
    return await attribute_service.update_attribute(attribute_id, attribute_in.name, attribute_in.type)


@attribute_router.delete("/{attribute_id}", status_code=204)
async def delete_attribute(
    attribute_id: UUID,
    attribute_service: AttributeService = Depends(get_attribute_service)
):
    """속성 삭제 (연결된 링크도 함께 삭제)"""
    await attribute_service.delete_attribute(attribute_id)
    return Response(status_code=204)
