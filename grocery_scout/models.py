from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchRequest:
    item: str

    # Free-form location text ("Target", "Raleigh NC", "nearby").
    location_hint: str | None = None

    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def store_filter(self) -> str | None:
        """The location hint doubles as a store filter unless it just says "nearby"."""
        hint = (self.location_hint or "").strip()
        if not hint or "nearby" in hint.lower():
            return None
        return hint.lower()


@dataclass
class RawProductCandidate:
    """A product hypothesized from one card, before normalization."""

    name: str | None
    price: str | None                # e.g. "$2.99"
    store: str | None
    distance: float | None
    method: str                      # discovery tier that produced it

    # Set by the normalizer when the candidate is rejected.
    discard_reason: str | None = None

    # Text captured from misattributed fields while rejecting.
    discount: str | None = None
    rating: str | None = None
    delivery_info: str | None = None
    return_policy: str | None = None


@dataclass(frozen=True)
class NormalizedProduct:
    name: str
    price: str                       # always "$" + number
    price_value: float               # > 0
    store: str
    distance: float | None
    method: str
    is_generic_name: bool = False
    distance_text: str | None = None

    def as_candidate(self) -> RawProductCandidate:
        return RawProductCandidate(
            name=self.name,
            price=self.price,
            store=self.store,
            distance=self.distance,
            method=self.method,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "price": self.price,
            "priceValue": self.price_value,
            "store": self.store,
            "distance": self.distance,
            "method": self.method,
            "isGenericName": self.is_generic_name,
        }
        if self.distance_text is not None:
            out["distanceText"] = self.distance_text
        return out


@dataclass
class StoreGroup:
    name: str
    distance: float | None
    items: list[NormalizedProduct] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "distance": self.distance,
            "items": [
                {
                    "name": p.name,
                    "price": p.price,
                    "method": p.method,
                    "isGenericName": p.is_generic_name,
                    "productDetail": None,
                }
                for p in self.items
            ],
        }


@dataclass
class SearchResult:
    success: bool
    stores: list[StoreGroup] = field(default_factory=list)
    products: list[NormalizedProduct] = field(default_factory=list)
    error: str | None = None

    @property
    def total_stores(self) -> int:
        return len(self.stores)

    @property
    def total_products(self) -> int:
        return len(self.products)

    @classmethod
    def failure(cls, error: str) -> "SearchResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "stores": [s.to_dict() for s in self.stores],
            "products": [p.to_dict() for p in self.products],
            "totalStores": self.total_stores,
            "totalProducts": self.total_products,
        }
        if self.error is not None:
            out["error"] = self.error
        return out
