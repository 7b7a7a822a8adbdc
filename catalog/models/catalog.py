"""
카테고리/속성/카테고리-속성 링크 데이터 모델
"""
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import String, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.models.base import Base


class Category(Base):
    """계층형 카테고리

    자식 목록은 저장하지 않는다. parent_id 역참조만 저장하고
    트리는 조회 시점에 다시 조립한다.
    """
    __tablename__ = "categories"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, comment="카테고리명")
    parent_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
        comment="상위 카테고리 ID (없으면 루트)"
    )

    def __repr__(self) -> str:
        return f"<Category {self.name} ({self.id})>"


class Attribute(Base):
    """속성 정의 (이름, 입력 타입)"""
    __tablename__ = "attributes"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, comment="속성명")
    type: Mapped[str] = mapped_column(String(100), comment="입력 타입 (예: Short Text, Dropdown)")

    def __repr__(self) -> str:
        return f"<Attribute {self.name} ({self.id})>"


class CategoryAttribute(Base):
    """카테고리-속성 직접 연결

    상속/전역 관계는 저장하지 않고 조회 시 계산한다.
    """
    __tablename__ = "category_attributes"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    category_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="CASCADE"),
        index=True
    )
    attribute_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("attributes.id", ondelete="CASCADE"),
        index=True
    )

    __table_args__ = (
        UniqueConstraint('category_id', 'attribute_id', name='uq_category_attribute'),
    )
