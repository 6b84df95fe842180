from __future__ import annotations

from .models import SearchRequest


def build_search_query(request: SearchRequest) -> str:
    """Turn an item into a shopping search phrase with price/location qualifiers.

    Qualifiers already present in the item text are not repeated:

    - "milk price nearby"  -> as is
    - "milk price"         -> "milk price near me" (coordinates) / "milk price Target"
    - "milk nearby"        -> "milk nearby price"
    - "milk"               -> "milk price near me" / "milk price Target" / "milk price nearby"
    """
    item = request.item.strip()
    hint = (request.location_hint or "").strip()
    lowered = item.lower()

    has_price = "price" in lowered
    has_nearby = "nearby" in lowered or "nearby" in hint.lower()

    if has_price and has_nearby:
        return item

    where = "near me" if request.has_coordinates else (hint or "nearby")

    if has_price:
        return f"{item} {where}"
    if has_nearby:
        return f"{item} price"
    return f"{item} price {where}"
