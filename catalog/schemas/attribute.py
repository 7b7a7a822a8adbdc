"""
속성 및 카테고리-속성 링크 관련 Pydantic 스키마
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from catalog.core.config import get_settings


class AttributeLinkType(str, Enum):
    """속성이 카테고리에 적용되는 방식"""
    DIRECT = "direct"
    INHERITED = "inherited"
    GLOBAL = "global"


class SortOrder(str, Enum):
    """정렬 방향"""
    ASC = "ASC"
    DESC = "DESC"


class AttributeBase(BaseModel):
    """속성 기본 스키마"""
    name: str = Field(..., description="속성 이름", min_length=1, max_length=255)
    type: str = Field(..., description="입력 타입 (예: Short Text, Dropdown)", min_length=1, max_length=100)


class AttributeCreate(AttributeBase):
    """속성 생성 스키마"""
    pass


class AttributeUpdate(BaseModel):
    """속성 수정 스키마 (보낸 필드만 변경)"""
    name: Optional[str] = Field(None, description="속성 이름", min_length=1, max_length=255)
    type: Optional[str] = Field(None, description="입력 타입", min_length=1, max_length=100)


class AttributeResponse(AttributeBase):
    """속성 응답 스키마"""
    id: UUID = Field(..., description="속성 ID")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")

    class Config:
        from_attributes = True


class CategoryAttributeResponse(BaseModel):
    """카테고리-속성 직접 연결 응답 스키마"""
    id: UUID = Field(..., description="링크 ID")
    category_id: UUID = Field(..., description="카테고리 ID")
    attribute_id: UUID = Field(..., description="속성 ID")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")

    class Config:
        from_attributes = True


class AttributeQuery(BaseModel):
    """속성 조회 필터

    목록형 필드는 리스트 또는 콤마로 구분된 문자열을 모두 받는다.
    """
    category_id: Optional[List[UUID]] = Field(None, description="카테고리 ID (복수 가능)")
    link_type: Optional[List[AttributeLinkType]] = Field(None, description="연결 방식 필터 (direct/inherited/global)")
    exclude_category_id: Optional[List[UUID]] = Field(None, description="제외할 카테고리 ID (category_id 필요)")
    keyword: Optional[str] = Field(None, description="속성명 검색어 (대소문자 무시 부분 일치)")
    page: int = Field(1, ge=1, description="페이지 번호")
    limit: int = Field(default_factory=lambda: get_settings().DEFAULT_PAGE_LIMIT, ge=1, description="페이지 크기")
    sort_by: Optional[str] = Field(None, description="정렬 필드")
    sort_order: SortOrder = Field(SortOrder.ASC, description="정렬 방향")

    @field_validator("category_id", "link_type", "exclude_category_id", mode="before")
    @classmethod
    def split_comma_values(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (str, UUID)):
            value = [value]
        items = []
        for item in value:
            if isinstance(item, str):
                items.extend(part.strip() for part in item.split(",") if part.strip())
            else:
                items.append(item)
        return items or None

    @field_validator("keyword", "sort_by", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def upper_sort_order(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    def cache_key_payload(self) -> Dict[str, Any]:
        """동일한 조회 조건이면 항상 같은 값이 나오도록 정규화한 필터"""
        def _normalize(values):
            if not values:
                return None
            return sorted({v.value if isinstance(v, Enum) else str(v) for v in values})

        return {
            "category_id": _normalize(self.category_id),
            "link_type": _normalize(self.link_type),
            "exclude_category_id": _normalize(self.exclude_category_id),
            "keyword": self.keyword.lower() if self.keyword else None,
            "page": self.page,
            "limit": self.limit,
            "sort_by": self.sort_by,
            "sort_order": self.sort_order.value,
        }
