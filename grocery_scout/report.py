from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .batch import BatchEntry
from .models import SearchResult


def format_result(result: SearchResult) -> str:
    """Human-readable per-store listing; "*" marks fallback extractions."""
    if not result.success:
        return f"Error: {result.error}"

    lines = [f"Found {result.total_products} products from {result.total_stores} stores.", ""]
    for store in result.stores:
        where = f" ({store.distance:g} mi away)" if store.distance is not None else ""
        lines.append(f"{store.name}{where}")
        lines.append("-" * 40)
        for p in store.items:
            mark = " *" if "fallback" in p.method else ""
            lines.append(f"{p.name} - {p.price}{mark}")
        lines.append("")
    return "\n".join(lines).rstrip()


@dataclass
class BatchReport:
    timestamp: str
    items: list[str]
    stores: list[str]
    include_nearby: bool
    entries: list[BatchEntry] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for e in self.entries if e.result.success)

    def summary(self) -> dict[str, dict[str, dict[str, Any]]]:
        out: dict[str, dict[str, dict[str, Any]]] = {}
        for e in self.entries:
            out.setdefault(e.item, {})[e.store] = {
                "success": e.result.success,
                "totalProducts": e.result.total_products,
                "totalStores": e.result.total_stores,
                "cached": e.cached,
                "timestamp": e.timestamp,
            }
        return out

    def summary_text(self) -> str:
        lines = [
            f"Run: {self.timestamp}",
            f"Searches: {len(self.entries)}  Succeeded: {self.succeeded}  "
            f"Failed: {len(self.entries) - self.succeeded}",
        ]
        for item, by_store in self.summary().items():
            lines.append("")
            lines.append(item.upper())
            for store, info in by_store.items():
                if info["success"]:
                    lines.append(
                        f"  {store}: {info['totalProducts']} products from {info['totalStores']} stores"
                    )
                else:
                    lines.append(f"  {store}: No results found")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "searchParams": {
                "products": self.items,
                "stores": self.stores,
                "includeNearby": self.include_nearby,
            },
            "timestamp": self.timestamp,
            "summary": self.summary(),
            "detailedResults": [
                {
                    "product": e.item,
                    "store": e.store,
                    "timestamp": e.timestamp,
                    "cached": e.cached,
                    "result": e.result.to_dict(),
                }
                for e in self.entries
            ],
        }

    def write_json(self, path: str = "artifacts/batch_results.json") -> str:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(self.to_dict(), indent=2))
        return str(out)


def build_batch_report(
    entries: list[BatchEntry],
    *,
    items: list[str],
    stores: list[str],
    include_nearby: bool,
) -> BatchReport:
    return BatchReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        items=items,
        stores=stores,
        include_nearby=include_nearby,
        entries=entries,
    )
