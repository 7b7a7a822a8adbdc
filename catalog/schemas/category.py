"""
카테고리 관련 Pydantic 스키마
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CategoryBase(BaseModel):
    """카테고리 기본 스키마"""
    name: str = Field(..., description="카테고리 이름", min_length=1, max_length=255)


class CategoryCreate(CategoryBase):
    """카테고리 생성 스키마"""
    parent_id: Optional[UUID] = Field(None, description="상위 카테고리 ID")


class CategoryUpdate(BaseModel):
    """카테고리 수정 스키마

    parent_id를 명시적으로 null로 보내면 루트로 이동한다.
    필드를 아예 보내지 않으면 기존 값을 유지한다.
    """
    name: Optional[str] = Field(None, description="카테고리 이름", min_length=1, max_length=255)
    parent_id: Optional[UUID] = Field(None, description="상위 카테고리 ID")


class CategoryResponse(CategoryBase):
    """카테고리 응답 스키마"""
    id: UUID = Field(..., description="카테고리 ID")
    parent_id: Optional[UUID] = Field(None, description="상위 카테고리 ID")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")

    class Config:
        from_attributes = True


class CategoryTreeNode(CategoryResponse):
    """트리 조회용 카테고리 노드"""
    children: List["CategoryTreeNode"] = Field(default_factory=list, description="하위 카테고리")
    associated_attributes_count: Optional[int] = Field(None, description="직접 연결된 속성 수")
    products_count: Optional[int] = Field(None, description="상품 수")


CategoryTreeNode.model_rebuild()
