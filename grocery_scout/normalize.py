from __future__ import annotations

import logging
import re
from collections import Counter

from .classify import (
    format_price,
    has_boilerplate,
    is_plausible_price,
    is_ui_chrome,
    is_valid_store_name,
    normalize_store_name,
    parse_price_value,
)
from .models import NormalizedProduct, RawProductCandidate
from .rules import DEFAULT_RULES, ExtractionRules

logger = logging.getLogger(__name__)

_DISCOUNT_RE = re.compile(r"^(\d+%)\s*OFF")
# "4.5(1.2k)", "2.3(152)"
_RATING_RE = re.compile(r"^\d+\.\d+\(\d+.*\)$")
_DELIVERY_DATE_RE = re.compile(
    r"^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) \d+",
    re.IGNORECASE,
)


def _discard(candidate: RawProductCandidate, reason: str) -> None:
    candidate.discard_reason = reason
    return None


def is_generic_name(name: str, item: str) -> bool:
    """The name is just the search term ("apples" for item "apple")."""
    n = name.strip().lower()
    i = item.strip().lower()
    return n == i or n == i + "s"


def normalize_candidate(
    candidate: RawProductCandidate,
    item: str,
    rules: ExtractionRules = DEFAULT_RULES,
) -> NormalizedProduct | None:
    """Validate and clean one candidate.

    Steps run in a fixed order and the first failing step rejects the
    candidate (recording ``discard_reason``):

    1. store name validity        5. generic-name flag (never rejects)
    2. store name normalization   6. leading "NN% OFF" in the name
    3. price plausibility         7. store text that is a rating, date or policy
    4. boilerplate, empty or UI   8. price formatting
       chrome as name
    """
    if not is_valid_store_name(candidate.store, rules):
        candidate.store = None
        return _discard(candidate, "invalid-store")

    candidate.store = normalize_store_name(candidate.store, rules)
    if not candidate.store:
        return _discard(candidate, "invalid-store")

    if not is_plausible_price(candidate.price, item, rules):
        return _discard(candidate, "implausible-price")

    name = candidate.name or ""
    if has_boilerplate(name, rules):
        return _discard(candidate, "boilerplate-name")
    if not name.strip():
        return _discard(candidate, "missing-name")
    if is_ui_chrome(name, rules):
        return _discard(candidate, "chrome-name")

    generic = is_generic_name(name, item)

    m = _DISCOUNT_RE.match(name)
    if m:
        candidate.discount = m.group(1)
        return _discard(candidate, "discount-name")

    store = candidate.store
    if _RATING_RE.match(store):
        candidate.rating = store
        candidate.store = None
        return _discard(candidate, "rating-as-store")
    if _DELIVERY_DATE_RE.match(store):
        candidate.delivery_info = store
        candidate.store = None
        return _discard(candidate, "date-as-store")
    if store == name:
        return _discard(candidate, "store-is-name")
    lowered = store.lower()
    if any(k in lowered for k in rules.return_keywords):
        candidate.return_policy = store
        candidate.store = None
        return _discard(candidate, "policy-as-store")

    price = format_price(candidate.price or "")
    value = parse_price_value(price)
    if price is None or value is None or value <= 0:
        return _discard(candidate, "unparsable-price")

    distance_text = None
    if candidate.distance is not None:
        distance_text = f"{candidate.distance:g} mi"

    return NormalizedProduct(
        name=name,
        price=price,
        price_value=value,
        store=store,
        distance=candidate.distance,
        method=candidate.method,
        is_generic_name=generic,
        distance_text=distance_text,
    )


def normalize_candidates(
    candidates: list[RawProductCandidate],
    item: str,
    rules: ExtractionRules = DEFAULT_RULES,
) -> list[NormalizedProduct]:
    kept: list[NormalizedProduct] = []
    for candidate in candidates:
        product = normalize_candidate(candidate, item, rules)
        if product is not None:
            kept.append(product)

    dropped = len(candidates) - len(kept)
    logger.info("Filtered %d invalid products, kept %d", dropped, len(kept))
    if dropped:
        reasons = Counter(c.discard_reason for c in candidates if c.discard_reason)
        logger.debug("Discard reasons: %s", dict(reasons))
    return kept
