from __future__ import annotations

import logging
from typing import Any

import requests

from .assemble import matches_store_filter
from .group import build_result
from .http import HttpClient
from .models import RawProductCandidate, SearchRequest, SearchResult
from .normalize import normalize_candidates
from .query import build_search_query
from .rules import DEFAULT_RULES, ExtractionRules

logger = logging.getLogger(__name__)

ZENSERP_METHOD = "zenserp-api"


class ZenserpClient:
    """Google Shopping results as JSON, for when the browser route is blocked."""

    def __init__(self, *, api_key: str, base_url: str = "https://app.zenserp.com/api/v2"):
        self.http = HttpClient(base_url=base_url, api_key=api_key)

    def shopping_results(
        self,
        query: str,
        *,
        latitude: float | None = None,
        longitude: float | None = None,
        num: int = 10,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"q": query, "tbm": "shop", "device": "desktop", "num": num}
        if latitude is not None and longitude is not None:
            params["location"] = f"{latitude},{longitude}"
            params["gl"] = "us"
            params["lr"] = "lang_en"
        data = self._get_json("/search", params=params)
        results = data.get("shopping_results") or []
        logger.info("Found %d shopping results from Zenserp", len(results))
        return results

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        resp = self.http.get(path, params=params)
        if resp.status_code >= 400:
            raise RuntimeError(f"Zenserp API error {resp.status_code} for {path}: {resp.text[:500]}")
        try:
            return resp.json()
        except Exception as e:
            raise RuntimeError(f"Failed to decode JSON from Zenserp for {path}: {e}")


def candidates_from_results(results: list[dict[str, Any]]) -> list[RawProductCandidate]:
    out: list[RawProductCandidate] = []
    for row in results:
        price = row.get("price")
        out.append(
            RawProductCandidate(
                name=row.get("title"),
                price=str(price) if price is not None else None,
                store=row.get("source") or row.get("merchant"),
                distance=None,
                method=ZENSERP_METHOD,
            )
        )
    return out


def api_search_query(request: SearchRequest) -> str:
    """Query text for the API: "<item> price at <store>" when a store is named."""
    if request.store_filter:
        return f"{request.item.strip()} price at {request.location_hint.strip()}"
    return build_search_query(request)


def search_via_api(
    request: SearchRequest,
    client: ZenserpClient,
    *,
    rules: ExtractionRules = DEFAULT_RULES,
) -> SearchResult:
    query = api_search_query(request)
    try:
        results = client.shopping_results(query, latitude=request.latitude, longitude=request.longitude)
    except (RuntimeError, requests.RequestException) as exc:
        logger.error("Zenserp search for %r failed: %s", request.item, exc)
        return SearchResult.failure(str(exc))

    rows = candidates_from_results(results)
    candidates = [c for c in rows if matches_store_filter(c.store, request.store_filter)]
    if not candidates and rows:
        # The API already searched "at <store>"; keep its top row.
        logger.info("No exact store match found, using first result from %s", rows[0].store)
        candidates = rows[:1]
    products = normalize_candidates(candidates, request.item, rules)
    return build_result(products)
