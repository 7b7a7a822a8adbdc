"""
평면 카테고리 목록을 트리(포레스트)로 조립
"""
import unicodedata
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from catalog.models.catalog import Category
from catalog.schemas.category import CategoryTreeNode


def collation_key(name: str) -> str:
    """악센트와 대소문자를 무시한 비교용 문자열 (Électronique -> electronique)"""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def name_sort_key(node: CategoryTreeNode):
    """이름 정렬 키 (비교 문자열이 같으면 원래 이름으로 비교)"""
    return (collation_key(node.name), node.name)


def build_tree(
    categories: Iterable[Category],
    include_counts: bool = False,
    link_counts: Optional[Mapping[UUID, int]] = None,
    product_counts: Optional[Mapping[UUID, int]] = None,
) -> List[CategoryTreeNode]:
    """카테고리 목록으로 루트 노드 리스트를 만든다.

    Args:
        categories: 전체 카테고리 평면 목록
        include_counts: 직접 연결 속성 수/상품 수 포함 여부
        link_counts: 카테고리별 직접 연결 속성 수
        product_counts: 카테고리별 상품 수

    Returns:
        이름순으로 정렬된 루트 노드 리스트 (children 채워짐)

    상위 카테고리가 목록에 없는 노드는 루트로 취급한다.
    입력 객체는 변경하지 않는다.
    """
    link_counts = link_counts or {}
    product_counts = product_counts or {}

    node_map: Dict[UUID, CategoryTreeNode] = {}
    for category in categories:
        node = CategoryTreeNode.model_validate(category)
        node.children = []
        if include_counts:
            node.associated_attributes_count = link_counts.get(node.id, 0)
            node.products_count = product_counts.get(node.id, 0)
        node_map[node.id] = node

    roots: List[CategoryTreeNode] = []
    for node in node_map.values():
        parent = node_map.get(node.parent_id) if node.parent_id else None
        if parent is not None and parent is not node:
            parent.children.append(node)
        else:
            roots.append(node)

    for node in node_map.values():
        node.children.sort(key=name_sort_key)
    roots.sort(key=name_sort_key)
    return roots
