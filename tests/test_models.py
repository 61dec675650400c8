from datetime import datetime, timezone

import pytest

from services.models import (
    DEFAULT_CATEGORY, EPOCH, HistoryAction, HistoryLogEntry, Product, format_rupiah, parse_timestamp,
)


@pytest.mark.parametrize("amount, expected", [(0, "Rp 0"), (350000, "Rp 350.000"), (1250000, "Rp 1.250.000"),
                                              (None, "Rp 0")])
def test_format_rupiah(amount, expected):
    assert format_rupiah(amount) == expected


def test_parse_timestamp_variants():
    expected = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2024-03-01T10:00:00Z") == expected
    assert parse_timestamp("2024-03-01T10:00:00") == expected
    assert parse_timestamp("2024-03-01T17:00:00+07:00") == expected
    assert parse_timestamp("") == EPOCH
    assert parse_timestamp("yesterday") == EPOCH


def test_product_from_record_fills_defaults():
    product = Product.from_record({"id": 7, "code": "A", "name": "X", "price": "1500.0", "category": None,
                                   "created_at": "2024-01-01T00:00:00Z"})
    assert product.id == "7"
    assert product.price == 1500
    assert product.category == DEFAULT_CATEGORY
    assert product.updated_at == "2024-01-01T00:00:00Z"
    assert "id" not in product.to_record(include_id=False)


def test_history_entry_maps_column_names():
    entry = HistoryLogEntry.from_record({"id": 1, "username": "admin", "action": "HAPUS_KATEGORI",
                                         "product_name": "Velg", "product_code": "CATEGORY",
                                         "timestamp": "2024-01-01T00:00:00Z"})
    assert entry.action is HistoryAction.DELETE_CATEGORY
    assert entry.target_name == "Velg"
    assert entry.to_record()["product_code"] == "CATEGORY"
