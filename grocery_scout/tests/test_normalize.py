from grocery_scout.models import RawProductCandidate
from grocery_scout.normalize import is_generic_name, normalize_candidate, normalize_candidates


def _cand(name="Gala Apples, 3 lb Bag", price="$2.99", store="Walmart Supercenter", distance=None, method="standard-.sh-dgr__grid-result"):
    return RawProductCandidate(name=name, price=price, store=store, distance=distance, method=method)


def test_kept_candidate_is_normalized():
    p = normalize_candidate(_cand(distance=1.5), "apples")
    assert p is not None
    assert p.store == "Walmart"
    assert p.price == "$2.99"
    assert p.price_value == 2.99
    assert p.distance_text == "1.5 mi"
    assert p.method == "standard-.sh-dgr__grid-result"
    assert not p.is_generic_name


def test_normalizer_is_idempotent():
    first = normalize_candidate(_cand(distance=2.0), "apples")
    again = normalize_candidate(first.as_candidate(), "apples")
    assert again == first
    assert first.distance_text == "2 mi"


def test_invalid_store_nulls_and_discards():
    c = _cand(store="Gala")
    assert normalize_candidate(c, "apples") is None
    assert c.store is None
    assert c.discard_reason == "invalid-store"


def test_missing_store_discarded():
    c = _cand(store=None)
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "invalid-store"


def test_rating_without_letters_never_survives():
    c = _cand(store="2.3(152)")
    assert normalize_candidate(c, "apples") is None
    assert c.store is None


def test_rating_as_store():
    c = _cand(store="4.5(1.2k)")
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "rating-as-store"
    assert c.rating == "4.5(1.2k)"
    assert c.store is None


def test_implausible_price_for_searched_item():
    c = _cand(price="$150")
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "implausible-price"
    # checked against the searched item, not the product name
    assert normalize_candidate(_cand(price="$15", name="Apple pie"), "pie") is not None


def test_missing_price_discarded():
    c = _cand(price=None)
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "implausible-price"


def test_boilerplate_name_discarded():
    c = _cand(name="Also nearby: Gala Apples")
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "boilerplate-name"
    assert normalize_candidate(_cand(name="About this result"), "apples") is None


def test_missing_name_discarded():
    for name in (None, "", "   "):
        c = _cand(name=name, store="Kroger")
        assert normalize_candidate(c, "apples") is None
        assert c.discard_reason == "missing-name"


def test_ui_chrome_name_discarded():
    c = _cand(name="Sponsored", store="Publix")
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "chrome-name"
    c = _cand(name="View all")
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "chrome-name"


def test_generic_name_flagged_but_kept():
    p = normalize_candidate(_cand(name="Apples"), "apple")
    assert p is not None and p.is_generic_name
    p = normalize_candidate(_cand(name=" apples "), "Apples")
    assert p is not None and p.is_generic_name


def test_is_generic_name():
    assert is_generic_name("Milk", "milk")
    assert is_generic_name("eggs", "egg")
    assert not is_generic_name("Whole Milk", "milk")


def test_leading_discount_discarded():
    c = _cand(name="20% OFF Gala Apples")
    assert normalize_candidate(c, "apples") is None
    assert c.discount == "20%"
    assert c.discard_reason == "discount-name"


def test_delivery_date_as_store():
    c = _cand(store="Apr 12")
    assert normalize_candidate(c, "apples") is None
    assert c.delivery_info == "Apr 12"
    assert c.discard_reason == "date-as-store"


def test_store_equal_to_name():
    c = _cand(name="Kroger", store="Kroger")
    assert normalize_candidate(c, "apples") is None
    assert c.discard_reason == "store-is-name"


def test_return_policy_as_store():
    c = _cand(store="Free 30-day returns")
    assert normalize_candidate(c, "apples") is None
    assert c.return_policy == "Free 30-day Returns"
    assert c.discard_reason == "policy-as-store"


def test_price_without_dollar_gets_one():
    p = normalize_candidate(_cand(price="2.49"), "apples")
    assert p.price == "$2.49"


def test_normalize_candidates_filters_and_records_reasons():
    cands = [_cand(), _cand(price="$150", store="Kroger"), _cand(store="Gala")]
    kept = normalize_candidates(cands, "apples")
    assert len(kept) == 1
    assert [c.discard_reason for c in cands] == [None, "implausible-price", "invalid-store"]
