# catalog_dashboard/services/import_service.py
"""
Merges spreadsheet rows into the product and category collections.

Rows are matched to products by exact code. The function is pure: it
returns new lists and leaves the inputs untouched, so the caller decides
what to persist.
"""
import logging
import math
import re
from dataclasses import dataclass, field, replace

from services.models import Category, Product, DEFAULT_CATEGORY, new_id, utc_now_iso

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
SKIPPED = "skipped"
ERROR = "error"


@dataclass
class ImportRow:
    """A loosely typed spreadsheet row. Every field may be missing."""
    code: object = None
    name: object = None
    price: object = None
    category: object = None
    description: object = None
    image_url: object = None
    line: int | None = None


@dataclass
class RowResult:
    line: int | None
    code: str
    status: str
    message: str = ""
    product_id: str | None = None


@dataclass
class ImportSummary:
    new_products: int = 0
    updated_products: int = 0
    new_categories: int = 0

    @property
    def total_products(self) -> int:
        return self.new_products + self.updated_products


@dataclass
class ImportResult:
    products: list
    categories: list
    summary: ImportSummary
    rows: list = field(default_factory=list)
    created: list = field(default_factory=list)
    updated: list = field(default_factory=list)
    new_categories: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    @property
    def errors(self):
        return [r for r in self.rows if r.status == ERROR]

    @property
    def skipped(self):
        return [r for r in self.rows if r.status == SKIPPED]


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _text(value):
    """Cell -> stripped string, or None when the cell is empty."""
    if _is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # codes like 1001 come back from Excel as 1001.0
        value = int(value)
    return str(value).strip()


def coerce_price(value):
    """
    Cell -> non-negative int, or None when the cell is empty.
    Accepts numbers and strings such as '350000', '350.000' or 'Rp 350,000'.
    """
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid price: {value!r}")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Invalid price: {value!r}")
        price = int(round(value))
    else:
        text = str(value).strip()
        text = re.sub(r"(?i)^rp\.?\s*", "", text)
        negative = text.startswith("-")
        # '.' and ',' are both thousands separators in rupiah amounts; drop decimals
        text = re.sub(r"[.,]\d{1,2}$", "", text.lstrip("-"))
        digits = re.sub(r"[.,\s]", "", text)
        if not digits.isdigit():
            raise ValueError(f"Invalid price: {value!r}")
        price = -int(digits) if negative else int(digits)
    if price < 0:
        raise ValueError(f"Price cannot be negative: {value!r}")
    return price


def reconcile(rows, products, categories, now=None, id_factory=None) -> ImportResult:
    """
    Applies import rows to the current collections.

    :param rows: iterable of ImportRow.
    :param products: current list of Product.
    :param categories: current list of Category.
    :param now: timestamp used for updated_at (defaults to the current time).
    :param id_factory: callable producing identifiers for new products/categories.
    :return: ImportResult with the new collections, the summary and per-row results.
    """
    now = now or utc_now_iso()
    id_factory = id_factory or new_id

    result_products = list(products)
    index_by_code = {p.code: i for i, p in enumerate(result_products)}
    known_categories = {c.name.strip().lower() for c in categories}
    staged_categories = []
    summary = ImportSummary()
    row_results, created, updated = [], [], []

    for position, row in enumerate(rows, start=1):
        line = row.line if row.line is not None else position
        code = None
        try:
            code = _text(row.code)
            if not code:
                row_results.append(RowResult(line, "", SKIPPED, "Missing product code"))
                continue

            name = _text(row.name)
            price = coerce_price(row.price)
            category = _text(row.category)
            description = _text(row.description)
            image_url = _text(row.image_url)

            if category and category.lower() not in known_categories:
                known_categories.add(category.lower())
                staged = Category(id=id_factory(), name=category)
                staged_categories.append(staged)

            if code in index_by_code:
                position_in_list = index_by_code[code]
                current = result_products[position_in_list]
                changes = {
                    "name": name,
                    "price": price,
                    "category": category,
                    "description": description,
                    "image_url": image_url,
                }
                merged = replace(
                    current,
                    updated_at=now,
                    **{k: v for k, v in changes.items() if v is not None},
                )
                result_products[position_in_list] = merged
                updated.append(merged)
                summary.updated_products += 1
                row_results.append(RowResult(line, code, UPDATED, product_id=merged.id))
            else:
                product = Product(
                    id=id_factory(),
                    code=code,
                    name=name or "",
                    price=price or 0,
                    category=category or DEFAULT_CATEGORY,
                    description=description or "",
                    image_url=image_url or "",
                    updated_at=now,
                )
                index_by_code[code] = len(result_products)
                result_products.append(product)
                created.append(product)
                summary.new_products += 1
                row_results.append(RowResult(line, code, CREATED, product_id=product.id))
        except (TypeError, ValueError) as e:
            logger.warning(f"Import row {line} ({code or 'no code'}) failed: {e}")
            row_results.append(RowResult(line, code or "", ERROR, str(e)))

    summary.new_categories = len(staged_categories)
    logger.info(
        f"Import reconciled: {summary.new_products} new, {summary.updated_products} updated, "
        f"{summary.new_categories} new categories, {sum(1 for r in row_results if r.status == ERROR)} errors."
    )
    return ImportResult(
        products=result_products,
        categories=list(categories) + staged_categories,
        summary=summary,
        rows=row_results,
        created=created,
        updated=updated,
        new_categories=staged_categories,
    )
