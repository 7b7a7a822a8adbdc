import pytest
from uuid import uuid4

from catalog.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from catalog.schemas.category import CategoryUpdate
from catalog.services.category_service import CategoryService


def names(categories):
    return [category.name for category in categories]


def shape(nodes):
    return [(node.id, node.name, shape(node.children)) for node in nodes]


@pytest.mark.asyncio
async def test_create_category(category_service):
    """카테고리 생성 테스트"""
    root = await category_service.create_category("Home")
    child = await category_service.create_category("Kitchen", root.id)

    assert root.parent_id is None
    assert child.parent_id == root.id
    assert child.created_at is not None


@pytest.mark.asyncio
async def test_create_category_with_missing_parent(category_service):
    with pytest.raises(NotFoundError):
        await category_service.create_category("Orphan", uuid4())


@pytest.mark.asyncio
async def test_create_category_duplicate_name(category_service):
    await category_service.create_category("Home")

    with pytest.raises(ConflictError):
        await category_service.create_category("Home")


@pytest.mark.asyncio
async def test_get_ancestors_nearest_first(category_service, catalog_ids):
    """상위 카테고리는 가까운 부모부터 루트 순서"""
    ancestors = await category_service.get_ancestors(catalog_ids["Smartphones"])
    assert names(ancestors) == ["Phones", "Electronics"]

    ancestors = await category_service.get_ancestors(catalog_ids["Flavoured Drinks"])
    assert names(ancestors) == ["Beverages", "Food & Grocery"]


@pytest.mark.asyncio
async def test_root_has_no_ancestors(category_service, catalog_ids):
    assert await category_service.get_ancestors(catalog_ids["Electronics"]) == []


@pytest.mark.asyncio
async def test_get_descendants(category_service, catalog_ids):
    """하위 카테고리 전체 (자기 자신 제외)"""
    descendants = await category_service.get_descendants(catalog_ids["Food & Grocery"])
    assert set(names(descendants)) == {"Beverages", "Flavoured Drinks", "Carbonated Drinks", "Snacks"}

    assert await category_service.get_descendants(catalog_ids["Snacks"]) == []


@pytest.mark.asyncio
async def test_ancestors_of_unknown_category(category_service):
    with pytest.raises(NotFoundError):
        await category_service.get_ancestors(uuid4())
    with pytest.raises(NotFoundError):
        await category_service.get_descendants(uuid4())


@pytest.mark.asyncio
async def test_category_tree(category_service, catalog_ids):
    """트리 구조 및 이름순 정렬 확인"""
    tree = await category_service.get_category_tree()

    assert names(tree) == ["Electronics", "Food & Grocery"]
    food = tree[1]
    assert names(food.children) == ["Beverages", "Snacks"]
    assert names(food.children[0].children) == ["Carbonated Drinks", "Flavoured Drinks"]
    assert food.associated_attributes_count is None


@pytest.mark.asyncio
async def test_category_tree_with_counts(category_service, catalog_ids):
    tree = await category_service.get_category_tree(include_counts=True)

    food = tree[1]
    beverages = food.children[0]
    flavoured = beverages.children[1]
    assert food.associated_attributes_count == 0
    assert beverages.associated_attributes_count == 1
    assert flavoured.associated_attributes_count == 2
    assert flavoured.products_count == 0


@pytest.mark.asyncio
async def test_category_tree_uses_product_counter(async_session, cache_manager, catalog_ids):
    async def count_products(category_ids):
        return {category_id: 5 for category_id in category_ids}

    service = CategoryService(async_session, cache_manager, product_counter=count_products)
    tree = await service.get_category_tree(include_counts=True)

    assert all(node.products_count == 5 for node in tree)


@pytest.mark.asyncio
async def test_category_tree_is_cached_and_invalidated(category_service, cache_manager, fake_redis, catalog_ids):
    """트리 캐시 저장 후 카테고리 생성 시 무효화"""
    await category_service.get_category_tree()
    key = cache_manager.tree_key(False)
    assert key in fake_redis.store
    assert fake_redis.ttls[key] == 300

    await category_service.create_category("Garden")
    assert key not in fake_redis.store

    tree = await category_service.get_category_tree()
    assert "Garden" in names(tree)


@pytest.mark.asyncio
async def test_delete_category_with_children(category_service, catalog_ids):
    """하위 카테고리가 있으면 삭제 불가, 트리는 그대로"""
    before = await category_service.get_category_tree()

    with pytest.raises(ConflictError):
        await category_service.delete_category(catalog_ids["Beverages"])

    after = await category_service.get_category_tree()
    assert shape(after) == shape(before)


@pytest.mark.asyncio
async def test_delete_leaf_category_removes_links(category_service, link_service, catalog_ids):
    await category_service.delete_category(catalog_ids["Snacks"])

    with pytest.raises(NotFoundError):
        await category_service.get_category(catalog_ids["Snacks"])
    assert await link_service.find_direct_links_by_category_id(catalog_ids["Snacks"]) == []


@pytest.mark.asyncio
async def test_delete_unknown_category(category_service):
    with pytest.raises(NotFoundError):
        await category_service.delete_category(uuid4())


@pytest.mark.asyncio
async def test_update_category_rename(category_service, catalog_ids):
    updated = await category_service.update_category(
        catalog_ids["Snacks"], CategoryUpdate(name="Chips & Snacks")
    )
    assert updated.name == "Chips & Snacks"
    assert updated.parent_id == catalog_ids["Food & Grocery"]


@pytest.mark.asyncio
async def test_update_category_rename_conflict(category_service, catalog_ids):
    with pytest.raises(ConflictError):
        await category_service.update_category(catalog_ids["Snacks"], CategoryUpdate(name="Beverages"))


@pytest.mark.asyncio
async def test_update_category_move_to_root(category_service, catalog_ids):
    """parent_id를 명시적으로 None으로 보내면 루트로 이동"""
    await category_service.update_category(catalog_ids["Phones"], CategoryUpdate(parent_id=None))

    ancestors = await category_service.get_ancestors(catalog_ids["Smartphones"])
    assert names(ancestors) == ["Phones"]


@pytest.mark.asyncio
async def test_update_category_without_parent_keeps_parent(category_service, catalog_ids):
    updated = await category_service.update_category(catalog_ids["Phones"], CategoryUpdate(name="Mobile"))
    assert updated.parent_id == catalog_ids["Electronics"]


@pytest.mark.asyncio
async def test_update_category_rejects_cycles(category_service, catalog_ids):
    """자기 자신이나 하위 카테고리를 상위로 지정할 수 없음"""
    with pytest.raises(InvalidArgumentError):
        await category_service.update_category(
            catalog_ids["Beverages"], CategoryUpdate(parent_id=catalog_ids["Beverages"])
        )
    with pytest.raises(InvalidArgumentError):
        await category_service.update_category(
            catalog_ids["Food & Grocery"], CategoryUpdate(parent_id=catalog_ids["Flavoured Drinks"])
        )

    ancestors = await category_service.get_ancestors(catalog_ids["Flavoured Drinks"])
    assert names(ancestors) == ["Beverages", "Food & Grocery"]


@pytest.mark.asyncio
async def test_update_category_move_clears_attribute_cache(category_service, fake_redis, catalog_ids):
    fake_redis.store["catalog:attributes:stale"] = "[]"

    await category_service.update_category(
        catalog_ids["Snacks"], CategoryUpdate(parent_id=catalog_ids["Electronics"])
    )

    assert "catalog:attributes:stale" not in fake_redis.store
