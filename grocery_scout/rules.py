"""Heuristic constants for the extraction pipeline.

Selector lists, keyword lists and price tables track a third-party page that
changes without notice, so they live here as one versioned, injectable value
rather than inside the algorithms. Tests build a minimal ``ExtractionRules``;
production can override the defaults with a JSON file (``load_rules``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

RULES_VERSION = "2024.04"

# Product card containers, most specific first.
CARD_SELECTORS = (
    ".sh-dgr__grid-result",
    ".sh-dlr__list-result",
    "div.KZmu8e",
    ".MUWJ8c",
    ".sh-dla__hover-container",
    "div[data-item-id]",
    "c-wiz[data-node-index] > div > div:not([jscontroller])",
)

PRICE_SELECTORS = (
    '[aria-label*="price"]',
    "[data-price]",
    "span[aria-label]",
    "span.a8Pemb",
    "span.YdtKid",
    ".EE56Ke",
)

NAME_SELECTORS = (
    "h3",
    '[role="heading"]',
    'a[href*="shopping/product"]',
    ".EI11Pd",
    ".sh-np__product-title",
    ".Xjkr3b",
    ".BvQan",
    ".fObmGc",
)

STORE_SELECTORS = (
    '[aria-label*="from"]',
    ".b5LS6",
    'span[dir="ltr"]',
    ".E5ocAb",
    ".aULzUe",
    ".BXIkFb",
)

DISTANCE_SELECTORS = (
    '[aria-label*="miles"]',
    '[aria-label*="mi away"]',
    ".BOo5Bd",
)

# "from Walmart", "at Kroger", "by Target" anywhere in a card's text.
STORE_TEXT_PATTERNS = (
    r"\bfrom\s+([^,]+)",
    r"\bat\s+([^,]+)",
    r"\bby\s+([^,]+)",
)

UI_TERMS = (
    "search",
    "results",
    "refine",
    "sort",
    "filter",
    "view",
    "all",
    "more",
    "less",
    "price",
    "rating",
    "map",
    "ads",
    "sponsored",
    "shopping",
    "directions",
    "website",
    "home",
    "search results",
    "accessibility links",
    "menu",
    "about this result",
    "about these results",
)

# Page metadata that shows up where a product name is expected.
NAME_BOILERPLATE = ("Nearby,", "Also nearby")
NAME_METADATA = ("about this result", "about these results")

# Shipping/returns text that gets picked up as a store name.
STORE_NOISE = ("Free delivery", "returns", "Get it by")
RETURN_KEYWORDS = ("returns", "get it by", "delivery")

INVALID_STORE_TERMS = (
    "report",
    "violation",
    "other",
    "about",
    "search",
    "feedback",
    "help",
    "support",
    "contact",
    "menu",
    "navigation",
    "skip",
    "main",
    "content",
    "header",
    "footer",
    "sidebar",
    "cart",
    "checkout",
    "account",
    # apple varieties and produce descriptors
    "apple",
    "gala",
    "cosmic",
    "crisp",
    "fresh",
    "organic",
    "conventional",
    "premium",
    "select",
    # generic commerce terms
    "product",
    "item",
    "results",
    "price",
    "sale",
)

KNOWN_STORES = (
    "walmart",
    "target",
    "kroger",
    "publix",
    "costco",
    "sams",
    "sam's club",
    "whole foods",
    "trader",
    "food lion",
    "harris teeter",
    "aldi",
    "lidl",
    "giant",
    "safeway",
    "wegmans",
    "shoprite",
    "stop & shop",
    "meijer",
)

PRODUCT_WORDS = ("lb", "oz", "pack", "bag", "box", "count", "ct", "fresh")

# canonical name -> lower-case spellings seen on the page
STORE_ALIASES = {
    "Walmart": ("walmart supercenter", "walmart neighborhood market", "walmart grocery"),
    "Target": ("target store", "super target"),
    "Kroger": ("kroger marketplace", "kroger grocery"),
    "Publix": ("publix super market", "publix grocery"),
    "Costco": ("costco wholesale", "costco warehouse"),
    "Sam's Club": ("sam's club", "sams club"),
    "Whole Foods": ("whole foods", "whole foods market"),
    "Trader Joe's": ("trader joe's", "trader joes"),
    "Food Lion": ("food lion",),
    "Harris Teeter": ("harris teeter",),
    "Aldi": ("aldi market", "aldi grocery"),
    "Dollar General": ("dollar general",),
    "Family Dollar": ("family dollar",),
}

# searched item -> (min, max) plausible unit price in dollars
ITEM_PRICE_LIMITS = {
    "apple": (0.25, 10.0),
    "apples": (0.25, 10.0),
    "banana": (0.10, 8.0),
    "bananas": (0.10, 8.0),
    "milk": (1.0, 12.0),
    "bread": (1.0, 15.0),
    "eggs": (1.0, 12.0),
    "meat": (2.0, 30.0),
    "chicken": (2.0, 25.0),
    "fish": (3.0, 40.0),
}

DEFAULT_PRICE_RANGE = (0.10, 50.0)


@dataclass(frozen=True)
class ExtractionRules:
    version: str = RULES_VERSION

    card_selectors: tuple[str, ...] = CARD_SELECTORS
    price_selectors: tuple[str, ...] = PRICE_SELECTORS
    name_selectors: tuple[str, ...] = NAME_SELECTORS
    store_selectors: tuple[str, ...] = STORE_SELECTORS
    distance_selectors: tuple[str, ...] = DISTANCE_SELECTORS
    store_text_patterns: tuple[str, ...] = STORE_TEXT_PATTERNS

    ui_terms: tuple[str, ...] = UI_TERMS
    name_boilerplate: tuple[str, ...] = NAME_BOILERPLATE
    name_metadata: tuple[str, ...] = NAME_METADATA
    store_noise: tuple[str, ...] = STORE_NOISE
    return_keywords: tuple[str, ...] = RETURN_KEYWORDS

    invalid_store_terms: tuple[str, ...] = INVALID_STORE_TERMS
    known_stores: tuple[str, ...] = KNOWN_STORES
    product_words: tuple[str, ...] = PRODUCT_WORDS
    # Read-only views; left out of the hash.
    store_aliases: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(STORE_ALIASES)), hash=False
    )
    item_price_limits: Mapping[str, tuple[float, float]] = field(
        default_factory=lambda: MappingProxyType(dict(ITEM_PRICE_LIMITS)), hash=False
    )
    default_price_range: tuple[float, float] = DEFAULT_PRICE_RANGE

    # (width, height) in CSS pixels
    min_card_size: tuple[int, int] = (100, 50)
    min_container_size: tuple[int, int] = (150, 100)
    container_text_range: tuple[int, int] = (20, 500)
    max_ancestor_depth: int = 4

    # Store names are usually about this long.
    store_name_target_length: int = 15

    def __post_init__(self):
        for name in ("store_aliases", "item_price_limits"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))


DEFAULT_RULES = ExtractionRules()


def rules_to_dict(rules: ExtractionRules) -> dict[str, Any]:
    data = {f.name: getattr(rules, f.name) for f in fields(rules)}
    data["store_aliases"] = {k: list(v) for k, v in rules.store_aliases.items()}
    data["item_price_limits"] = {k: list(v) for k, v in rules.item_price_limits.items()}
    return data


def load_rules(path: str | Path, *, base: ExtractionRules = DEFAULT_RULES) -> ExtractionRules:
    """Overlay the keys of a JSON file onto *base*.

    Only keys present in the file are replaced, so a file can carry just the
    selectors that changed.
    """
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise RuntimeError(f"Failed to read rules file {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {path} must contain a JSON object")

    known = {f.name for f in fields(ExtractionRules)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown rule keys in {path}: {', '.join(unknown)}")

    overrides: dict[str, Any] = {}
    for key, value in data.items():
        if key == "store_aliases":
            overrides[key] = {str(k): tuple(v) for k, v in value.items()}
        elif key == "item_price_limits":
            overrides[key] = {str(k).lower(): (float(v[0]), float(v[1])) for k, v in value.items()}
        elif isinstance(value, list):
            overrides[key] = tuple(value)
        else:
            overrides[key] = value
    return replace(base, **overrides)
