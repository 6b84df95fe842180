from __future__ import annotations

import math

from .models import NormalizedProduct, SearchResult, StoreGroup

NO_PRODUCTS_ERROR = "No matching products found"


def _sort_key(p: NormalizedProduct) -> tuple:
    return (
        p.store is None,
        p.store or "",
        p.distance if p.distance is not None else math.inf,
        p.price_value,
    )


def sort_products(products: list[NormalizedProduct]) -> list[NormalizedProduct]:
    """Order by store name, then distance (unknown last), then price."""
    return sorted(products, key=_sort_key)


def group_by_store(products: list[NormalizedProduct]) -> list[StoreGroup]:
    """Group already-sorted products; each group takes its first member's distance."""
    groups: dict[str, StoreGroup] = {}
    for p in products:
        if not p.name or not p.price or not p.store:
            continue
        group = groups.get(p.store)
        if group is None:
            group = groups[p.store] = StoreGroup(name=p.store, distance=p.distance)
        group.items.append(p)
    return list(groups.values())


def build_result(products: list[NormalizedProduct]) -> SearchResult:
    ordered = sort_products(products)
    stores = group_by_store(ordered)
    if not stores:
        return SearchResult.failure(NO_PRODUCTS_ERROR)
    return SearchResult(success=True, stores=stores, products=ordered)
