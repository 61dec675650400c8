import pytest

from services.catalog_service import (
    ALL_CATEGORIES, admin_list_view, catalog_stats, clamp_page, collation_key, filter_admin_list,
    filter_catalog, page_count, paginate, share_message, sort_products, whatsapp_share_url,
)


# --- filtering ---
def test_filter_catalog_all_returns_everything(products):
    assert filter_catalog(products, "", ALL_CATEGORIES) == products


def test_filter_catalog_matches_name_or_code_case_insensitive(products):
    assert [p.code for p in filter_catalog(products, "led")] == ["LED-H4"]
    assert [p.code for p in filter_catalog(products, "mat-01")] == ["MAT-01"]


def test_filter_catalog_combines_category_and_query(products):
    result = filter_catalog(products, "lamp", "Lampu")
    assert [p.code for p in result] == ["LED-H4", "FOG-02"]
    assert filter_catalog(products, "karpet", "Lampu") == []


def test_filter_catalog_does_not_search_description(products):
    assert filter_catalog(products, "rubber") == []


def test_filter_admin_list_searches_description(products):
    assert [p.code for p in filter_admin_list(products, "rubber")] == ["MAT-01"]


def test_filter_keeps_input_order(products):
    result = filter_catalog(products, "", "Lampu")
    assert [p.id for p in result] == ["p1", "p3"]


def test_category_filter_is_exact(products):
    assert filter_catalog(products, "", "lampu") == []


# --- sorting ---
def test_sort_price_ascending(make_product):
    a = make_product("1", "A", price=100)
    b = make_product("2", "B", price=50)
    assert [p.code for p in sort_products([a, b], "price-asc")] == ["B", "A"]


def test_sort_is_stable_for_equal_keys(make_product):
    items = [make_product(str(i), f"C{i}", price=100) for i in range(5)]
    assert sort_products(items, "price-asc") == items
    assert sort_products(items, "price-desc") == items


def test_sort_by_name_ignores_case_and_accents(make_product):
    items = [make_product("1", "A", "zebra"), make_product("2", "B", "Émbed"), make_product("3", "C", "apple")]
    assert [p.name for p in sort_products(items, "name-asc")] == ["apple", "Émbed", "zebra"]
    assert [p.name for p in sort_products(items, "name-desc")] == ["zebra", "Émbed", "apple"]


def test_sort_updated_desc_is_newest_first(products):
    assert [p.id for p in sort_products(products, "updated-desc")] == ["p2", "p3", "p1", "p4"]


def test_sort_unknown_option_raises(products):
    with pytest.raises(ValueError):
        sort_products(products, "color-asc")


def test_collation_key_falls_back_to_raw_text():
    assert collation_key("abc") != collation_key("ABC")
    assert collation_key("abc")[0] == collation_key("ABC")[0]


# --- pagination ---
@pytest.mark.parametrize("total, size, expected", [(0, 20, 0), (1, 20, 1), (20, 20, 1), (21, 20, 2)])
def test_page_count(total, size, expected):
    assert page_count(total, size) == expected


def test_page_count_rejects_zero_page_size():
    with pytest.raises(ValueError):
        page_count(10, 0)


def test_clamp_page_stays_in_range():
    assert clamp_page(5, 45, 20) == 3
    assert clamp_page(0, 45, 20) == 1
    assert clamp_page(3, 0, 20) == 1


def test_paginate_returns_slice_and_clamped_page():
    items = list(range(45))
    page_items, page = paginate(items, 3, 20)
    assert page == 3
    assert page_items == list(range(40, 45))
    page_items, page = paginate(items, 9, 20)
    assert page == 3


def test_admin_list_view_counts(products):
    view = admin_list_view(products, query="", category="Lampu", sort_by="price-asc", page=1, page_size=1)
    assert [p.code for p in view.items] == ["FOG-02"]
    assert view.page_count == 2
    assert view.filtered_count == 2
    assert view.total == 4
    assert (view.first_index, view.last_index) == (1, 1)


def test_admin_list_view_last_page_indexes(products):
    view = admin_list_view(products, sort_by="name-asc", page=2, page_size=3)
    assert len(view.items) == 1
    assert (view.first_index, view.last_index) == (4, 4)


def test_admin_list_view_empty(products):
    view = admin_list_view(products, query="nothing matches this")
    assert view.items == []
    assert view.page == 1
    assert view.page_count == 0
    assert (view.first_index, view.last_index) == (0, 0)


# --- stats and sharing ---
def test_catalog_stats(products, categories):
    products[0].image_url = "https://example.com/a.jpg"
    stats = catalog_stats(products, categories)
    assert stats["total_products"] == 4
    assert stats["total_categories"] == 3
    assert stats["products_with_image"] == 1
    assert stats["per_category"] == {"Lampu": 2, "Interior": 1, "Aksesoris Truk": 1}


def test_share_message_contains_product_details(products):
    message = share_message(products[0], "Sumber Jaya")
    assert "Lampu LED H4" in message
    assert "LED-H4" in message
    assert "Rp 350.000" in message
    assert message.endswith("Sumber Jaya")


def test_whatsapp_share_url_is_encoded(products):
    url = whatsapp_share_url(products[0])
    assert url.startswith("https://wa.me/?text=")
    assert " " not in url
    assert "%0A" in url


def test_query_whitespace_is_part_of_the_match(products):
    assert filter_catalog(products, " MAT") == []
    assert [p.code for p in filter_catalog(products, "MAT")] == ["MAT-01"]
    assert [p.code for p in filter_catalog(products, "LED ")] == ["LED-H4"]


def test_category_named_all_is_a_real_category(make_product):
    items = [make_product("1", "A", category="All"), make_product("2", "B", category="Lampu")]
    assert [p.code for p in filter_catalog(items, "", "All")] == ["A"]
    assert [p.code for p in filter_catalog(items, "", ALL_CATEGORIES)] == ["A", "B"]
