import pytest

from services.models import Category
from utils.state import (
    AppState, CategoryAdded, CategoryDeleted, DataLoaded, ImportApplied, ProductDeleted, ProductSaved,
    SetCategoryFilter, SetPage, SetQuery, SetSort, init_state, reduce,
)


@pytest.fixture
def many_products(make_product):
    return [make_product(f"p{i}", f"C{i:02d}", category="Lampu" if i % 2 else "Interior") for i in range(45)]


@pytest.fixture
def state(many_products, categories):
    return init_state(many_products, categories, page_size=20)


def test_init_state_defaults(state):
    assert state.page == 1
    assert state.query == ""
    assert state.sort_by == "updated-desc"
    assert len(state.products) == 45


def test_reduce_returns_new_state(state):
    new_state = reduce(state, SetPage(2))
    assert new_state is not state
    assert state.page == 1
    assert new_state.page == 2


def test_set_page_is_clamped(state):
    assert reduce(state, SetPage(10)).page == 3
    assert reduce(state, SetPage(-1)).page == 1


def test_filter_changes_reset_page(state):
    on_page_3 = reduce(state, SetPage(3))
    assert reduce(on_page_3, SetQuery("C1")).page == 1
    assert reduce(on_page_3, SetCategoryFilter("Lampu")).page == 1
    assert reduce(on_page_3, SetSort("name-asc")).page == 1


def test_same_filter_value_keeps_page(state):
    on_page_2 = reduce(state, SetPage(2))
    assert reduce(on_page_2, SetQuery("")).page == 2
    assert reduce(on_page_2, SetSort("updated-desc")).page == 2


def test_set_sort_rejects_unknown_option(state):
    with pytest.raises(ValueError):
        reduce(state, SetSort("random"))


def test_product_saved_replaces_existing(state, make_product):
    edited = make_product("p3", "C03", "Edited")
    new_state = reduce(state, ProductSaved(edited))
    assert len(new_state.products) == 45
    assert new_state.products[3].name == "Edited"


def test_product_saved_prepends_new(state, make_product):
    new_state = reduce(state, ProductSaved(make_product("new", "NEW")))
    assert len(new_state.products) == 46
    assert new_state.products[0].id == "new"


def test_product_deleted_clamps_page(make_product, categories):
    products = [make_product(f"p{i}", f"C{i}") for i in range(21)]
    state = reduce(init_state(products, categories, page_size=20), SetPage(2))
    assert state.page == 2
    new_state = reduce(state, ProductDeleted("p20"))
    assert new_state.page == 1
    assert len(new_state.products) == 20


def test_category_actions(state):
    added = reduce(state, CategoryAdded(Category(id="c9", name="Velg")))
    assert [c.name for c in added.categories][-1] == "Velg"
    removed = reduce(added, CategoryDeleted("c9"))
    assert "Velg" not in [c.name for c in removed.categories]


def test_data_loaded_and_import_applied_replace_collections(state, make_product, categories):
    loaded = reduce(state, DataLoaded([make_product("x", "X")], categories))
    assert [p.id for p in loaded.products] == ["x"]
    assert loaded.page == 1
    imported = reduce(loaded, ImportApplied([make_product("y", "Y")], categories[:1]))
    assert [p.id for p in imported.products] == ["y"]
    assert len(imported.categories) == 1


def test_unknown_action_raises(state):
    with pytest.raises(ValueError):
        reduce(state, object())


def test_state_is_immutable():
    with pytest.raises(Exception):
        AppState().page = 2
