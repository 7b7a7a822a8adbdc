"""
모든 모델 클래스를 한 곳에서 임포트합니다.
"""
from catalog.models.base import Base
from catalog.models.catalog import Category, Attribute, CategoryAttribute

__all__ = [
    "Base",
    "Category",
    "Attribute",
    "CategoryAttribute",
]
