"""Per-card field extractors.

Each field is found by an ordered chain of strategies (specific selectors
first, then a regex or whole-card scan). A strategy returns a ``Field`` or
``None``; ``first_of`` runs the chain. Missing data is never an error here:
extractors return ``None`` (or the name sentinel) and the normalizer decides.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, NamedTuple, TypeVar

from .classify import PRICE_RE, clean_price, has_boilerplate, is_ui_chrome
from .dom import Node
from .rules import DEFAULT_RULES, ExtractionRules

T = TypeVar("T")

UNKNOWN_PRODUCT = "Unknown Product"

_NEARBY_RE = re.compile(r"Nearby,\s+(\d+(?:\.\d+)?)\s*mi\b", re.IGNORECASE)
_MI_AWAY_RE = re.compile(r"(\d+(?:\.\d+)?)\s*mi away\b", re.IGNORECASE)
_DISTANCE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:miles|mi)\b", re.IGNORECASE)


class Field(NamedTuple):
    value: str
    # Element the value came from; None when it came from a text regex.
    node: Node | None


def first_of(strategies: Iterable[Callable[[], T | None]]) -> T | None:
    """Run strategies in order and return the first non-empty result."""
    for strategy in strategies:
        result = strategy()
        if result:
            return result
    return None


# ---- price ---------------------------------------------------------------

def _price_by_selectors(card: Node, rules: ExtractionRules) -> Field | None:
    for sel in rules.price_selectors:
        el = card.select_one(sel)
        if el is None:
            continue
        text = el.text()
        if PRICE_RE.search(text):
            return Field(clean_price(text), el)
    return None


def _price_by_scan(card: Node) -> Field | None:
    for el in card.descendants():
        text = el.text()
        if PRICE_RE.search(text):
            return Field(clean_price(text), el)
    return None


def find_price(card: Node, rules: ExtractionRules = DEFAULT_RULES) -> Field | None:
    return first_of([
        lambda: _price_by_selectors(card, rules),
        lambda: _price_by_scan(card),
    ])


# ---- name ----------------------------------------------------------------

def _name_by_selectors(card: Node, rules: ExtractionRules, price_node: Node | None) -> Field | None:
    for sel in rules.name_selectors:
        el = card.select_one(sel)
        if el is None or el == price_node:
            continue
        name = el.text()
        if is_ui_chrome(name, rules):
            continue
        if len(name) > 3 and not has_boilerplate(name, rules):
            return Field(name, el)
    return None


def _name_by_scan(card: Node, rules: ExtractionRules, price_node: Node | None) -> Field | None:
    for el in card.descendants():
        if el == price_node:
            continue
        text = el.text()
        if (
            len(text) > 5
            and "$" not in text
            and not has_boilerplate(text, rules)
            and not is_ui_chrome(text, rules)
        ):
            return Field(text, el)
    return None


def find_name(
    card: Node,
    rules: ExtractionRules = DEFAULT_RULES,
    *,
    price_node: Node | None = None,
) -> Field:
    found = first_of([
        lambda: _name_by_selectors(card, rules, price_node),
        lambda: _name_by_scan(card, rules, price_node),
    ])
    return found or Field(UNKNOWN_PRODUCT, None)


# ---- store ---------------------------------------------------------------

def _looks_like_store_text(text: str, rules: ExtractionRules) -> bool:
    if "$" in text or " mi" in text:
        return False
    if has_boilerplate(text, rules):
        return False
    if any(noise in text for noise in rules.store_noise):
        return False
    return not is_ui_chrome(text, rules)


def _store_by_selectors(card: Node, rules: ExtractionRules, exclude: tuple[Node | None, ...]) -> Field | None:
    for sel in rules.store_selectors:
        el = card.select_one(sel)
        if el is None or el in exclude:
            continue
        text = el.text()
        if len(text) > 2 and _looks_like_store_text(text, rules):
            return Field(text, el)
    return None


def _store_by_text_pattern(card: Node, rules: ExtractionRules) -> Field | None:
    text = card.text()
    for pattern in rules.store_text_patterns:
        m = re.search(pattern, text, re.IGNORECASE)
        if m and len(m.group(1).strip()) > 2:
            return Field(m.group(1).strip(), None)
    return None


def _store_by_length(card: Node, rules: ExtractionRules, exclude: tuple[Node | None, ...]) -> Field | None:
    candidates = []
    for el in card.descendants():
        if el in exclude:
            continue
        text = el.text()
        if len(text) > 2 and _looks_like_store_text(text, rules):
            candidates.append((el, text))
    if not candidates:
        return None
    target = rules.store_name_target_length
    el, text = min(candidates, key=lambda c: abs(len(c[1]) - target))
    return Field(text, el)


def find_store(
    card: Node,
    rules: ExtractionRules = DEFAULT_RULES,
    *,
    price_node: Node | None = None,
    name_node: Node | None = None,
) -> Field | None:
    exclude = (price_node, name_node)
    return first_of([
        lambda: _store_by_selectors(card, rules, exclude),
        lambda: _store_by_text_pattern(card, rules),
        lambda: _store_by_length(card, rules, exclude),
    ])


# ---- distance ------------------------------------------------------------

def parse_distance(text: str | None) -> float | None:
    if not text:
        return None
    for pattern in (_MI_AWAY_RE, _NEARBY_RE, _DISTANCE_RE):
        m = pattern.search(text)
        if m:
            return float(m.group(1))
    return None


def _distance_by_nearby(card: Node) -> float | None:
    m = _NEARBY_RE.search(card.text())
    return float(m.group(1)) if m else None


def _distance_by_selectors(card: Node, rules: ExtractionRules) -> float | None:
    for sel in rules.distance_selectors:
        el = card.select_one(sel)
        if el is not None and _DISTANCE_RE.search(el.text()):
            return parse_distance(el.text())
    return None


def _distance_by_scan(card: Node) -> float | None:
    for el in card.descendants():
        text = el.text()
        if _DISTANCE_RE.search(text):
            return parse_distance(text)
    return None


def find_distance(card: Node, rules: ExtractionRules = DEFAULT_RULES) -> float | None:
    """Distance in miles, or None (distance is optional)."""
    strategies = [
        lambda: _distance_by_nearby(card),
        lambda: _distance_by_selectors(card, rules),
        lambda: _distance_by_scan(card),
    ]
    for strategy in strategies:
        distance = strategy()
        # 0.0 is a valid distance
        if distance is not None:
            return distance
    return None
