# catalog_dashboard/services/catalog_service.py
"""
Search, filtering, sorting and pagination over the in-memory product list.

Both the public catalog and the admin product table work on the full list
loaded from the backend, so everything here is pure and order preserving.
"""
import math
import unicodedata
from collections import Counter
from dataclasses import dataclass
from urllib.parse import quote

from services.models import format_rupiah, parse_timestamp

ALL_CATEGORIES = "all"
DEFAULT_SORT = "updated-desc"
DEFAULT_PAGE_SIZE = 20

# sort option -> (product field, descending)
SORT_OPTIONS = {
    "name-asc": ("name", False),
    "name-desc": ("name", True),
    "price-asc": ("price", False),
    "price-desc": ("price", True),
    "updated-asc": ("updated_at", False),
    "updated-desc": ("updated_at", True),
}

SORT_LABELS = {
    "updated-desc": "Recently updated",
    "updated-asc": "Oldest update",
    "name-asc": "Name (A-Z)",
    "name-desc": "Name (Z-A)",
    "price-asc": "Price (low to high)",
    "price-desc": "Price (high to low)",
}


def _is_all(category) -> bool:
    return category in (None, "", ALL_CATEGORIES)


def matches_query(product, query, include_description=False) -> bool:
    query = (query or "").lower()
    if not query:
        return True
    haystacks = [product.name, product.code]
    if include_description:
        haystacks.append(product.description)
    return any(query in (text or "").lower() for text in haystacks)


def matches_category(product, category) -> bool:
    return _is_all(category) or product.category == category


def filter_catalog(products, query="", category=ALL_CATEGORIES):
    """Public catalog filter: category AND (name or code contains the query)."""
    return [p for p in products if matches_category(p, category) and matches_query(p, query)]


def filter_admin_list(products, query="", category=ALL_CATEGORIES):
    """Same as the catalog filter but the query also searches the description."""
    return [
        p for p in products
        if matches_category(p, category) and matches_query(p, query, include_description=True)
    ]


def collation_key(text: str):
    """
    Case- and accent-insensitive ordering key, with the raw string as a
    tie-breaker so the order stays total.
    """
    normalized = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return (stripped.casefold(), text or "")


def sort_products(products, sort_by=DEFAULT_SORT):
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {sort_by}")
    field_name, descending = SORT_OPTIONS[sort_by]

    if field_name == "name":
        key = lambda p: collation_key(p.name)
    elif field_name == "price":
        key = lambda p: p.price
    else:
        key = lambda p: parse_timestamp(p.updated_at)

    # sorted() stays stable with reverse=True: equal keys keep their input order
    return sorted(products, key=key, reverse=descending)


def page_count(total, page_size) -> int:
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    return math.ceil(total / page_size)


def clamp_page(page, total, page_size) -> int:
    pages = page_count(total, page_size)
    if pages == 0:
        return 1
    return max(1, min(int(page), pages))


def paginate(items, page, page_size):
    page = clamp_page(page, len(items), page_size)
    start = (page - 1) * page_size
    return items[start:start + page_size], page


@dataclass
class AdminListView:
    items: list
    page: int
    page_count: int
    filtered_count: int
    total: int
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def first_index(self) -> int:
        """1-based position of the first row on this page (0 when empty)."""
        return 0 if not self.items else (self.page - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        return 0 if not self.items else self.first_index + len(self.items) - 1


def admin_list_view(products, query="", category=ALL_CATEGORIES, sort_by=DEFAULT_SORT,
                    page=1, page_size=DEFAULT_PAGE_SIZE) -> AdminListView:
    filtered = sort_products(filter_admin_list(products, query, category), sort_by)
    items, page = paginate(filtered, page, page_size)
    return AdminListView(
        items=items,
        page=page,
        page_count=page_count(len(filtered), page_size),
        filtered_count=len(filtered),
        total=len(products),
        page_size=page_size,
    )


def catalog_stats(products, categories) -> dict:
    per_category = Counter(p.category for p in products)
    return {
        "total_products": len(products),
        "total_categories": len(categories),
        "products_with_image": sum(1 for p in products if p.image_url),
        "per_category": dict(per_category),
    }


def share_message(product, store_name="Sumber Jaya") -> str:
    return (
        "Hello, here are the details of our product.\n\n"
        f"Name: {product.name}\n"
        f"Code: {product.code}\n"
        f"Price: {format_rupiah(product.price)}\n\n"
        f"Description:\n{product.description}\n\n"
        f"{store_name}"
    )


def whatsapp_share_url(product, store_name="Sumber Jaya") -> str:
    return "https://wa.me/?text=" + quote(share_message(product, store_name), safe="")
