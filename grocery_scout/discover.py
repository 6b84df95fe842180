"""Card discovery: find product containers in a results page.

Three tiers, tried in order until one yields candidates:

1. standard       known card selectors
2. aggressive     any reasonably sized div holding a price and a card's worth of text
3. price-anchored start at each price and walk up to a container with a name

The ``method`` tag on every candidate records the tier; lower tiers carry
"fallback" in the tag so consumers can flag them.
"""

from __future__ import annotations

import logging

from .assemble import assemble_candidate
from .classify import PRICE_RE, clean_price, is_ui_chrome
from .dom import Node
from .extract import UNKNOWN_PRODUCT, Field, find_name
from .models import RawProductCandidate
from .rules import DEFAULT_RULES, ExtractionRules

logger = logging.getLogger(__name__)

AGGRESSIVE_METHOD = "aggressive-fallback"
PRICE_ANCHORED_METHOD = "price-based-fallback"


def standard_tier(
    root: Node,
    rules: ExtractionRules = DEFAULT_RULES,
    store_filter: str | None = None,
) -> list[RawProductCandidate]:
    for sel in rules.card_selectors:
        cards = root.select(sel)
        if not cards:
            continue

        logger.info("Found %d potential products with selector %s", len(cards), sel)
        results: list[RawProductCandidate] = []
        for card in cards:
            if not card.has_min_size(rules.min_card_size):
                logger.debug("Skipping small element")
                continue
            candidate = assemble_candidate(
                card,
                method=f"standard-{sel}",
                rules=rules,
                store_filter=store_filter,
            )
            if candidate is not None:
                results.append(candidate)

        if results:
            return results
    return []


def aggressive_tier(
    root: Node,
    rules: ExtractionRules = DEFAULT_RULES,
    store_filter: str | None = None,
) -> list[RawProductCandidate]:
    low, high = rules.container_text_range
    containers = []
    for div in root.select("div"):
        if not div.has_min_size(rules.min_container_size):
            continue
        text = div.text()
        if PRICE_RE.search(text) and low < len(text) < high:
            containers.append(div)

    logger.info("Found %d potential product containers", len(containers))

    results: list[RawProductCandidate] = []
    for container in containers:
        candidate = assemble_candidate(
            container,
            method=AGGRESSIVE_METHOD,
            rules=rules,
            store_filter=store_filter,
        )
        if candidate is not None:
            results.append(candidate)
    return results


def _plausible_name(container: Node, rules: ExtractionRules, price_node: Node) -> Field | None:
    name = find_name(container, rules, price_node=price_node)
    if name.value == UNKNOWN_PRODUCT or is_ui_chrome(name.value, rules):
        return None
    return name


def price_anchored_tier(
    root: Node,
    rules: ExtractionRules = DEFAULT_RULES,
    store_filter: str | None = None,
) -> list[RawProductCandidate]:
    results: list[RawProductCandidate] = []
    for node in root.descendants():
        price_text = clean_price(node.own_text())
        if price_text is None:
            continue
        price = Field(price_text, node)

        container = node.parent()
        depth = 0
        while container is not None and depth < rules.max_ancestor_depth:
            if container.has_min_size(rules.min_card_size):
                name = _plausible_name(container, rules, node)
                if name is not None:
                    candidate = assemble_candidate(
                        container,
                        method=PRICE_ANCHORED_METHOD,
                        rules=rules,
                        store_filter=store_filter,
                        price=price,
                        name=name,
                    )
                    if candidate is not None:
                        results.append(candidate)
                    break
            container = container.parent()
            depth += 1
    return results


TIERS = (
    ("standard", standard_tier),
    ("aggressive", aggressive_tier),
    ("price-anchored", price_anchored_tier),
)


def discover_candidates(
    root: Node,
    rules: ExtractionRules = DEFAULT_RULES,
    *,
    store_filter: str | None = None,
) -> list[RawProductCandidate]:
    """Run the discovery tiers in order; the first tier with results wins."""
    for label, tier in TIERS:
        found = tier(root, rules, store_filter)
        if found:
            logger.info("Discovery tier %s produced %d candidates", label, len(found))
            return found
        logger.info("Discovery tier %s found no products", label)
    return []
