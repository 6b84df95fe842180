import json

import pytest

from grocery_scout.classify import is_plausible_price
from grocery_scout.rules import DEFAULT_RULES, ExtractionRules, load_rules, rules_to_dict


def test_rules_to_dict_is_json_serializable():
    data = rules_to_dict(DEFAULT_RULES)
    text = json.dumps(data)
    assert "sh-dgr__grid-result" in text
    assert data["item_price_limits"]["apples"] == [0.25, 10.0]
    assert data["store_aliases"]["Walmart"]


def test_load_rules_overlays_only_given_keys(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({
        "card_selectors": [".product-tile"],
        "item_price_limits": {"Coffee": [4, 25]},
        "max_ancestor_depth": 6,
    }))
    rules = load_rules(path)
    assert rules.card_selectors == (".product-tile",)
    assert rules.max_ancestor_depth == 6
    assert rules.price_selectors == DEFAULT_RULES.price_selectors
    assert is_plausible_price("$19.99", "coffee", rules)
    assert not is_plausible_price("$19.99", "coffee", ExtractionRules(item_price_limits={"coffee": (1.0, 5.0)}))


def test_dumped_rules_load_back(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(rules_to_dict(DEFAULT_RULES)))
    assert load_rules(path) == DEFAULT_RULES


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"card_selector": [".x"]}))
    with pytest.raises(ValueError, match="card_selector"):
        load_rules(path)


def test_non_object_rejected(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_rules(path)


def test_unreadable_rules_file(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(RuntimeError):
        load_rules(bad)
    with pytest.raises(RuntimeError):
        load_rules(tmp_path / "missing.json")


def test_rules_are_hashable_and_read_only():
    assert hash(DEFAULT_RULES) == hash(ExtractionRules())
    with pytest.raises(TypeError):
        DEFAULT_RULES.store_aliases["Walmart"] = ("somewhere else",)
    with pytest.raises(TypeError):
        DEFAULT_RULES.item_price_limits["apples"] = (0.0, 1000.0)

    custom = ExtractionRules(item_price_limits={"coffee": (1.0, 5.0)})
    with pytest.raises(TypeError):
        custom.item_price_limits["tea"] = (1.0, 5.0)
    assert {DEFAULT_RULES, custom}
