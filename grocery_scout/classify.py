from __future__ import annotations

import re

from .rules import DEFAULT_RULES, ExtractionRules

PRICE_RE = re.compile(r"\$\d+(\.\d{1,2})?")
_CLEAN_PRICE_RE = re.compile(r"\$(\d+\.\d{1,2}|\d+)")
_CANONICAL_PRICE_RE = re.compile(r"^\$\d+(\.\d{1,2})?$")


def clean_price(text: str | None) -> str | None:
    """First dollar amount in *text*, e.g. "Now $2.99/lb" -> "$2.99"."""
    if not text:
        return None
    m = _CLEAN_PRICE_RE.search(text)
    return m.group(0) if m else None


def parse_price_value(price: str | None) -> float | None:
    if not price:
        return None
    digits = re.sub(r"[^\d.]", "", price)
    try:
        return float(digits)
    except ValueError:
        return None


def format_price(price: str) -> str | None:
    """Canonical "$N" / "$N.NN" form, or None if the text holds no number."""
    if not price.startswith("$"):
        price = "$" + price
    if _CANONICAL_PRICE_RE.match(price):
        return price
    value = parse_price_value(price)
    if value is None:
        return None
    return f"${value:.2f}"


def _squash(text: str | None) -> str:
    return " ".join((text or "").split())


def is_ui_chrome(text: str | None, rules: ExtractionRules = DEFAULT_RULES) -> bool:
    """True for navigation/interface text ("Sort by", "View all", "Sponsored")."""
    text = _squash(text)
    if len(text) < 3:
        return True

    lowered = text.lower()
    for term in rules.ui_terms:
        if (
            lowered == term
            or lowered.startswith(term + " ")
            or lowered.endswith(" " + term)
            or f" {term} " in lowered
        ):
            return True
    return False


def has_boilerplate(text: str | None, rules: ExtractionRules = DEFAULT_RULES) -> bool:
    """Page phrases like "Nearby, 2 mi" that are never a product name."""
    if not text:
        return False
    if any(phrase in text for phrase in rules.name_boilerplate):
        return True
    lowered = text.lower()
    return any(phrase in lowered for phrase in rules.name_metadata)


def is_valid_store_name(name: str | None, rules: ExtractionRules = DEFAULT_RULES) -> bool:
    if not name:
        return False

    lowered = name.lower()

    if any(term in lowered for term in rules.invalid_store_terms):
        return False

    if len(name) > 50:
        return False

    # phone numbers, ratings, zip codes
    digits = sum(ch.isdigit() for ch in name)
    if digits > len(name) / 2:
        return False

    if not re.search(r"[a-zA-Z]", name):
        return False

    if any(store in lowered for store in rules.known_stores):
        return True

    if len(name) < 3 or len(name) > 30:
        return False

    return not any(word in lowered for word in rules.product_words)


def price_range_for(item: str, rules: ExtractionRules = DEFAULT_RULES) -> tuple[float, float]:
    return rules.item_price_limits.get(item.strip().lower(), rules.default_price_range)


def is_plausible_price(
    price: str | None,
    item: str,
    rules: ExtractionRules = DEFAULT_RULES,
) -> bool:
    """Check a price against the range expected for the *searched* item.

    Bounds are inclusive: "$0.25" is plausible for apples, "$0.24" is not.
    """
    value = parse_price_value(price)
    if value is None:
        return False
    low, high = price_range_for(item, rules)
    return low <= value <= high


def _title_case(name: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in name.split(" "))


def normalize_store_name(name: str | None, rules: ExtractionRules = DEFAULT_RULES) -> str | None:
    """Map known chain spellings to one display name; title-case the rest."""
    if name is None:
        return None

    lowered = name.lower().strip()
    for canonical, variations in rules.store_aliases.items():
        if any(v in lowered for v in variations):
            return canonical

    return _title_case(name.strip())
