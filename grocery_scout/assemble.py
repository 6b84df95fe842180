from __future__ import annotations

import logging

from .classify import is_ui_chrome
from .dom import Node
from .extract import Field, find_distance, find_name, find_price, find_store
from .models import RawProductCandidate
from .rules import DEFAULT_RULES, ExtractionRules

logger = logging.getLogger(__name__)


def matches_store_filter(store: str | None, store_filter: str | None) -> bool:
    """Cards with no detected store pass; the normalizer rejects them later."""
    if not store_filter or not store:
        return True
    return store_filter.lower() in store.lower()


def assemble_candidate(
    card: Node,
    *,
    method: str,
    rules: ExtractionRules = DEFAULT_RULES,
    store_filter: str | None = None,
    price: Field | None = None,
    name: Field | None = None,
) -> RawProductCandidate | None:
    """Extract the fields of one card into a candidate.

    *price* / *name* may be passed in when the caller already located them
    (the price-anchored tier starts from a price element). Returns None when
    the card has no price, its name is UI chrome, or its store does not match
    *store_filter*.
    """
    if price is None:
        price = find_price(card, rules)
    if price is None:
        logger.debug("No price found, skipping card")
        return None

    if name is None:
        name = find_name(card, rules, price_node=price.node)
    if is_ui_chrome(name.value, rules):
        logger.debug("Skipping UI element: %s", name.value)
        return None

    store = find_store(card, rules, price_node=price.node, name_node=name.node)
    store_text = store.value if store else None
    if not matches_store_filter(store_text, store_filter):
        logger.debug("Skipping non-matching store: %s", store_text)
        return None

    return RawProductCandidate(
        name=name.value,
        price=price.value,
        store=store_text,
        distance=find_distance(card, rules),
        method=method,
    )
