from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from .batch import (
    DEFAULT_ITEMS,
    DEFAULT_STORES,
    ResultCache,
    SearchThrottle,
    failed_entries,
    plan_searches,
    run_batch,
)
from .browser import RenderError, ShoppingSession
from .config import ENV_KEYS, Config
from .dom import parse_snapshot
from .models import SearchRequest, SearchResult
from .pipeline import extract_products, run_search
from .report import build_batch_report, format_result
from .rules import DEFAULT_RULES, ExtractionRules, load_rules, rules_to_dict
from .zenserp import ZenserpClient, search_via_api

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="grocery-scout")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)
    sub_config.add_parser("keys", help="List environment keys")

    p_rules = sub.add_parser("rules", help="Extraction rule commands")
    sub_rules = p_rules.add_subparsers(dest="rules_cmd", required=True)
    p_dump = sub_rules.add_parser("dump", help="Print the active rules as JSON")
    p_dump.add_argument("--rules", help="JSON file overriding the default rules")

    p_search = sub.add_parser("search", help="Search Google Shopping for an item")
    _add_request_args(p_search)
    p_search.add_argument("--rules", help="JSON file overriding the default rules")
    p_search.add_argument("--cdp", help="Attach to a browser at this CDP URL")
    p_search.add_argument("--screenshot-dir", help="Save a results screenshot here")
    p_search.add_argument("--settle-ms", type=int, help="Wait after search before extracting")
    p_search.add_argument("--json", action="store_true", help="Print the result as JSON")

    p_extract = sub.add_parser("extract", help="Extract products from a saved results page")
    p_extract.add_argument("html", help="Path to the saved HTML")
    p_extract.add_argument("item", help="The item that was searched")
    p_extract.add_argument("--near", help="Location hint / store filter")
    p_extract.add_argument("--rules", help="JSON file overriding the default rules")
    p_extract.add_argument("--json", action="store_true", help="Print the result as JSON")

    p_zenserp = sub.add_parser("zenserp", help="Search through the Zenserp API instead of a browser")
    _add_request_args(p_zenserp)
    p_zenserp.add_argument("--json", action="store_true", help="Print the result as JSON")

    p_batch = sub.add_parser("batch", help="Search several items across several stores")
    p_batch.add_argument("--items", default=",".join(DEFAULT_ITEMS), help="Comma-separated items")
    p_batch.add_argument("--stores", default=",".join(DEFAULT_STORES), help="Comma-separated stores")
    p_batch.add_argument("--no-nearby", action="store_true", help="Skip the store-less search per item")
    p_batch.add_argument("--delay", type=float, help="Minimum seconds between searches")
    p_batch.add_argument("--out", default="artifacts/batch_results.json", help="Report path")
    p_batch.add_argument("--cdp", help="Attach to a browser at this CDP URL")

    return p


def _add_request_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("item", help="Item to search for (e.g. 'apples')")
    p.add_argument("--near", help="Location hint; a store name also filters results")
    p.add_argument("--lat", type=float, help="Latitude")
    p.add_argument("--lon", type=float, help="Longitude")


def _request_from_args(args) -> SearchRequest:
    return SearchRequest(
        item=args.item,
        location_hint=args.near,
        latitude=getattr(args, "lat", None),
        longitude=getattr(args, "lon", None),
    )


def _load_rules(cfg: Config, path: str | None) -> ExtractionRules:
    path = path or cfg.rules_path
    return load_rules(path) if path else DEFAULT_RULES


def _print_result(result: SearchResult, *, as_json: bool) -> int:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0 if result.success else 1


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version:
        print(VERSION)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in ENV_KEYS:
                print(k)
            return 0

    cfg = Config.load_from_env()

    if args.cmd == "rules":
        if args.rules_cmd == "dump":
            rules = _load_rules(cfg, args.rules)
            print(json.dumps(rules_to_dict(rules), indent=2))
            return 0

    if args.cmd == "search":
        if args.cdp:
            cfg = replace(cfg, cdp_url=args.cdp)
        if args.screenshot_dir:
            cfg = replace(cfg, screenshot_dir=args.screenshot_dir)
        if args.settle_ms is not None:
            cfg = replace(cfg, settle_ms=args.settle_ms)
        rules = _load_rules(cfg, args.rules)
        request = _request_from_args(args)

        where = f" near {request.location_hint}" if request.location_hint else " nearby"
        if not args.json:
            print(f"Starting search for {request.item}{where}...")
        try:
            with ShoppingSession(cfg) as session:
                result = run_search(request, session, rules=rules)
        except RenderError as exc:
            result = SearchResult.failure(str(exc))
        return _print_result(result, as_json=args.json)

    if args.cmd == "extract":
        rules = _load_rules(cfg, args.rules)
        request = SearchRequest(item=args.item, location_hint=args.near)
        root = parse_snapshot(Path(args.html).read_text(encoding="utf-8"))
        result = extract_products(root, request, rules)
        return _print_result(result, as_json=args.json)

    if args.cmd == "zenserp":
        client = ZenserpClient(api_key=cfg.require_zenserp_key(), base_url=cfg.zenserp_url)
        result = search_via_api(_request_from_args(args), client, rules=_load_rules(cfg, None))
        return _print_result(result, as_json=args.json)

    if args.cmd == "batch":
        return _run_batch(args, cfg)

    raise RuntimeError("unreachable")


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _run_batch(args, cfg: Config) -> int:
    if args.cdp:
        cfg = replace(cfg, cdp_url=args.cdp)
    rules = _load_rules(cfg, None)
    items = _split_csv(args.items)
    stores = _split_csv(args.stores)
    include_nearby = not args.no_nearby

    requests = plan_searches(items, stores, include_nearby=include_nearby)
    print(f"Products: {', '.join(items)}")
    print(f"Stores: {', '.join(stores)}")
    print(f"Total searches to perform: {len(requests)}")

    delay = args.delay if args.delay is not None else cfg.search_interval_s
    throttle = SearchThrottle(delay)
    cache = ResultCache(cfg.cache_ttl_s)

    try:
        with ShoppingSession(cfg) as session:
            entries = run_batch(
                requests,
                lambda req: run_search(req, session, rules=rules),
                throttle=throttle,
                cache=cache,
            )
    except RenderError as exc:
        print(f"ERROR: {exc}")
        entries = failed_entries(requests, str(exc))

    report = build_batch_report(entries, items=items, stores=stores, include_nearby=include_nearby)
    print("\n" + report.summary_text())
    path = report.write_json(args.out)
    print(f"\nResults saved to {path}")
    return 0 if report.succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
