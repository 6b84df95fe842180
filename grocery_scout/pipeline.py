from __future__ import annotations

import logging
from typing import Protocol

from .browser import RenderError
from .discover import discover_candidates
from .dom import Node
from .group import build_result
from .models import SearchRequest, SearchResult
from .normalize import normalize_candidates
from .query import build_search_query
from .rules import DEFAULT_RULES, ExtractionRules

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def render(self, query: str, request: SearchRequest) -> Node: ...


def extract_products(
    root: Node,
    request: SearchRequest,
    rules: ExtractionRules = DEFAULT_RULES,
) -> SearchResult:
    """Discover, assemble, normalize and group the products on one page."""
    candidates = discover_candidates(root, rules, store_filter=request.store_filter)
    logger.info("Found %d raw candidates for %r", len(candidates), request.item)
    products = normalize_candidates(candidates, request.item, rules)
    return build_result(products)


def run_search(
    request: SearchRequest,
    renderer: Renderer,
    *,
    rules: ExtractionRules = DEFAULT_RULES,
) -> SearchResult:
    query = build_search_query(request)
    logger.info("Searching for %r (query %r)", request.item, query)
    try:
        root = renderer.render(query, request)
    except RenderError as exc:
        logger.error("Error rendering results for %r: %s", request.item, exc)
        return SearchResult.failure(str(exc))
    return extract_products(root, request, rules)
