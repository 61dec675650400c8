# catalog_dashboard/utils/state.py
"""
Dashboard state held in st.session_state.

Pages never mutate the lists in place: they dispatch an action and store
the state returned by reduce(state, action).
"""
from dataclasses import dataclass, field, replace

from services.catalog_service import (
    ALL_CATEGORIES, DEFAULT_PAGE_SIZE, DEFAULT_SORT, SORT_OPTIONS, clamp_page, filter_admin_list,
)

STATE_KEY = "catalog_state"


@dataclass(frozen=True)
class AppState:
    products: tuple = ()
    categories: tuple = ()
    query: str = ""
    category_filter: str = ALL_CATEGORIES
    sort_by: str = DEFAULT_SORT
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


# --- actions ---
@dataclass(frozen=True)
class DataLoaded:
    products: list
    categories: list


@dataclass(frozen=True)
class ProductSaved:
    product: object


@dataclass(frozen=True)
class ProductDeleted:
    product_id: str


@dataclass(frozen=True)
class CategoryAdded:
    category: object


@dataclass(frozen=True)
class CategoryDeleted:
    category_id: str


@dataclass(frozen=True)
class ImportApplied:
    products: list
    categories: list


@dataclass(frozen=True)
class SetQuery:
    query: str


@dataclass(frozen=True)
class SetCategoryFilter:
    category: str


@dataclass(frozen=True)
class SetSort:
    sort_by: str


@dataclass(frozen=True)
class SetPage:
    page: int


def init_state(products=(), categories=(), page_size=DEFAULT_PAGE_SIZE) -> AppState:
    return AppState(products=tuple(products), categories=tuple(categories), page_size=page_size)


def _filtered_count(state) -> int:
    return len(filter_admin_list(state.products, state.query, state.category_filter))


def _with_clamped_page(state) -> AppState:
    return replace(state, page=clamp_page(state.page, _filtered_count(state), state.page_size))


def reduce(state: AppState, action) -> AppState:
    if isinstance(action, DataLoaded):
        state = replace(state, products=tuple(action.products), categories=tuple(action.categories))
        return _with_clamped_page(state)

    if isinstance(action, ProductSaved):
        product = action.product
        if any(p.id == product.id for p in state.products):
            products = tuple(product if p.id == product.id else p for p in state.products)
        else:
            products = (product,) + state.products
        return _with_clamped_page(replace(state, products=products))

    if isinstance(action, ProductDeleted):
        products = tuple(p for p in state.products if p.id != action.product_id)
        return _with_clamped_page(replace(state, products=products))

    if isinstance(action, CategoryAdded):
        return replace(state, categories=state.categories + (action.category,))

    if isinstance(action, CategoryDeleted):
        return replace(state, categories=tuple(c for c in state.categories if c.id != action.category_id))

    if isinstance(action, ImportApplied):
        state = replace(state, products=tuple(action.products), categories=tuple(action.categories))
        return _with_clamped_page(state)

    # changing what is listed always goes back to the first page
    if isinstance(action, SetQuery):
        if action.query == state.query:
            return state
        return replace(state, query=action.query, page=1)

    if isinstance(action, SetCategoryFilter):
        if action.category == state.category_filter:
            return state
        return replace(state, category_filter=action.category, page=1)

    if isinstance(action, SetSort):
        if action.sort_by not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option: {action.sort_by}")
        if action.sort_by == state.sort_by:
            return state
        return replace(state, sort_by=action.sort_by, page=1)

    if isinstance(action, SetPage):
        return _with_clamped_page(replace(state, page=action.page))

    raise ValueError(f"Unknown action: {type(action).__name__}")
