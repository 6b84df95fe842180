from grocery_scout.batch import (
    ResultCache,
    SearchThrottle,
    cache_key,
    failed_entries,
    plan_searches,
    run_batch,
)
from grocery_scout.models import NormalizedProduct, SearchResult, StoreGroup


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


def _ok_result(store="Walmart"):
    p = NormalizedProduct(
        name="Bananas", price="$0.59", price_value=0.59, store=store, distance=None, method="standard-x"
    )
    return SearchResult(success=True, stores=[StoreGroup(name=store, distance=None, items=[p])], products=[p])


def test_throttle_spaces_searches():
    clock = FakeClock()
    throttle = SearchThrottle(2.0, clock=clock, sleep=clock.sleep)
    assert throttle.wait() == 0.0
    clock.now += 0.5
    assert throttle.wait() == 1.5
    clock.now += 5.0
    assert throttle.wait() == 0.0
    assert clock.slept == [1.5]


def test_cache_expires_after_ttl():
    clock = FakeClock()
    cache = ResultCache(60.0, clock=clock)
    result = _ok_result()
    cache.put("k", result)
    clock.now += 59
    assert cache.get("k") is result
    clock.now += 2
    assert cache.get("k") is None
    assert len(cache) == 0


def test_cache_purge():
    clock = FakeClock()
    cache = ResultCache(10.0, clock=clock)
    cache.put("old", _ok_result())
    clock.now += 20
    cache.put("new", _ok_result())
    assert cache.purge() == 1
    assert len(cache) == 1


def test_cache_key():
    assert cache_key(" Apples ", None) == "apples_nearby"
    assert cache_key("Milk", "Harris Teeter") == "milk_harris teeter"


def test_plan_searches():
    reqs = plan_searches(["apples", "milk"], ["Walmart", "Target"])
    assert [(r.item, r.location_hint) for r in reqs] == [
        ("apples", None),
        ("apples", "Walmart"),
        ("apples", "Target"),
        ("milk", None),
        ("milk", "Walmart"),
        ("milk", "Target"),
    ]
    assert len(plan_searches(["apples"], ["Walmart"], include_nearby=False)) == 1


def test_run_batch_throttles_caches_and_isolates_errors():
    clock = FakeClock()
    throttle = SearchThrottle(1.0, clock=clock, sleep=clock.sleep)
    cache = ResultCache(900.0, clock=clock)
    calls = []

    def search_fn(req):
        calls.append((req.item, req.location_hint))
        if req.item == "eggs":
            raise ValueError("page exploded")
        return _ok_result()

    reqs = plan_searches(["bananas", "eggs", "bananas"], ["Aldi"], include_nearby=False)
    entries = run_batch(reqs, search_fn, throttle=throttle, cache=cache)

    assert calls == [("bananas", "Aldi"), ("eggs", "Aldi")]
    assert [e.store for e in entries] == ["Aldi", "Aldi", "Aldi"]
    assert [e.result.success for e in entries] == [True, False, True]
    assert entries[1].result.error == "page exploded"
    assert [e.cached for e in entries] == [False, False, True]
    assert clock.slept == [1.0]


def test_run_batch_does_not_cache_failures():
    clock = FakeClock()
    throttle = SearchThrottle(0.0, clock=clock, sleep=clock.sleep)
    cache = ResultCache(900.0, clock=clock)
    calls = []

    def search_fn(req):
        calls.append(req.item)
        return SearchResult.failure("No matching products found")

    entries = run_batch(plan_searches(["milk", "milk"], []), search_fn, throttle=throttle, cache=cache)
    assert calls == ["milk", "milk"]
    assert [e.store for e in entries] == ["nearby", "nearby"]
    assert len(cache) == 0


def test_failed_entries_cover_every_planned_search():
    entries = failed_entries(plan_searches(["eggs"], ["Publix"]), "Could not start browser")
    assert [(e.item, e.store) for e in entries] == [("eggs", "nearby"), ("eggs", "Publix")]
    assert all(not e.result.success and e.result.error == "Could not start browser" for e in entries)
