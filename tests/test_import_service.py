import itertools

import pytest

from services.import_service import CREATED, ERROR, SKIPPED, UPDATED, ImportRow, coerce_price, reconcile
from services.models import DEFAULT_CATEGORY

NOW = "2024-05-01T00:00:00+00:00"


def id_factory():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


def test_existing_code_is_updated_not_duplicated(make_product, categories):
    existing = [make_product("p1", "A", "X", 100, "Lampu")]
    result = reconcile([ImportRow(code="A", name="X2")], existing, categories, now=NOW)

    assert result.summary.updated_products == 1
    assert result.summary.new_products == 0
    assert len(result.products) == 1
    updated = result.products[0]
    assert updated.name == "X2"
    assert updated.id == "p1"
    assert updated.price == 100
    assert updated.category == "Lampu"
    assert updated.updated_at == NOW


def test_inputs_are_not_mutated(make_product, categories):
    existing = [make_product("p1", "A", "X", 100)]
    reconcile([ImportRow(code="A", name="X2"), ImportRow(code="B")], existing, categories)
    assert existing[0].name == "X"
    assert len(existing) == 1
    assert len(categories) == 3


def test_new_code_creates_product_with_defaults(categories):
    result = reconcile([ImportRow(code="NEW-1", line=2)], [], categories, now=NOW, id_factory=id_factory())
    product = result.products[0]
    assert product.id == "new-1"
    assert product.name == ""
    assert product.price == 0
    assert product.category == DEFAULT_CATEGORY
    assert result.rows[0].status == CREATED
    assert result.rows[0].line == 2


def test_row_without_code_is_skipped(categories):
    result = reconcile([ImportRow(name="Nameless", price=1000, line=5)], [], categories)
    assert result.products == []
    assert result.summary.total_products == 0
    assert [(r.line, r.status) for r in result.skipped] == [(5, SKIPPED)]


def test_unknown_category_is_created_once_case_insensitive(categories):
    rows = [
        ImportRow(code="A", category="Velg"),
        ImportRow(code="B", category="velg"),
        ImportRow(code="C", category="lampu"),
    ]
    result = reconcile(rows, [], categories, id_factory=id_factory())
    assert [c.name for c in result.new_categories] == ["Velg"]
    assert result.summary.new_categories == 1
    assert len(result.categories) == 4


def test_duplicate_code_in_same_file_updates_the_created_product(categories):
    rows = [ImportRow(code="A", name="First", price=100), ImportRow(code="A", name="Second")]
    result = reconcile(rows, [], categories, id_factory=id_factory())
    assert len(result.products) == 1
    assert result.products[0].name == "Second"
    assert result.products[0].price == 100
    assert [r.status for r in result.rows] == [CREATED, UPDATED]


def test_invalid_price_marks_row_as_error_and_continues(categories):
    rows = [ImportRow(code="A", price="abc", line=2), ImportRow(code="B", price="1.500", line=3)]
    result = reconcile(rows, [], categories)
    assert [r.status for r in result.rows] == [ERROR, CREATED]
    assert result.errors[0].code == "A"
    assert result.products[0].price == 1500


def test_bad_price_does_not_stage_category(categories):
    result = reconcile([ImportRow(code="A", price=-5, category="Velg")], [], categories)
    assert result.new_categories == []


def test_numeric_codes_lose_float_suffix(categories):
    result = reconcile([ImportRow(code=1001.0)], [], categories)
    assert result.products[0].code == "1001"


@pytest.mark.parametrize("value, expected", [
    (None, None),
    ("", None),
    (float("nan"), None),
    (350000, 350000),
    (350000.0, 350000),
    ("350000", 350000),
    ("350.000", 350000),
    ("Rp 350,000", 350000),
    ("Rp. 1.250.000", 1250000),
    ("150000.00", 150000),
])
def test_coerce_price(value, expected):
    assert coerce_price(value) == expected


@pytest.mark.parametrize("value", ["abc", -1, "-100", True, float("inf")])
def test_coerce_price_rejects_invalid(value):
    with pytest.raises(ValueError):
        coerce_price(value)
