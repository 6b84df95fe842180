import math

from grocery_scout.group import NO_PRODUCTS_ERROR, build_result, group_by_store, sort_products
from grocery_scout.models import NormalizedProduct


def _prod(store, price_value, distance=None, name="Milk"):
    return NormalizedProduct(
        name=name,
        price=f"${price_value:.2f}",
        price_value=price_value,
        store=store,
        distance=distance,
        method="standard-.sh-dgr__grid-result",
    )


def _dist(p):
    return p.distance if p.distance is not None else math.inf


def test_sort_by_store_distance_price():
    products = [
        _prod("Target", 3.99, 2.0),
        _prod("Kroger", 3.49, None),
        _prod("Kroger", 2.99, 4.0),
        _prod("Kroger", 1.99, 4.0),
        _prod("Aldi", 5.00, 9.0),
    ]
    ordered = sort_products(products)
    assert [(p.store, p.distance, p.price_value) for p in ordered] == [
        ("Aldi", 9.0, 5.00),
        ("Kroger", 4.0, 1.99),
        ("Kroger", 4.0, 2.99),
        ("Kroger", None, 3.49),
        ("Target", 2.0, 3.99),
    ]
    for a, b in zip(ordered, ordered[1:]):
        assert (a.store, _dist(a), a.price_value) <= (b.store, _dist(b), b.price_value)


def test_groups_take_first_member_distance():
    ordered = sort_products([_prod("Kroger", 2.0, None), _prod("Kroger", 3.0, 1.5)])
    groups = group_by_store(ordered)
    assert len(groups) == 1
    assert groups[0].distance == 1.5
    assert [p.price_value for p in groups[0].items] == [3.0, 2.0]


def test_every_product_in_exactly_one_matching_group():
    result = build_result([_prod("Target", 3.99), _prod("Kroger", 3.49), _prod("Target", 2.49)])
    assert result.success
    assert result.total_stores == 2
    assert result.total_products == 3
    for p in result.products:
        owners = [g for g in result.stores if p in g.items]
        assert len(owners) == 1
        assert owners[0].name == p.store


def test_no_products_is_failure():
    result = build_result([])
    assert not result.success
    assert result.error == NO_PRODUCTS_ERROR
    assert result.stores == [] and result.products == []
    assert result.to_dict() == {
        "success": False,
        "stores": [],
        "products": [],
        "totalStores": 0,
        "totalProducts": 0,
        "error": "No matching products found",
    }


def test_result_json_shape():
    result = build_result([_prod("Kroger", 3.49, 1.0, name="Whole Milk")])
    data = result.to_dict()
    assert data["success"] is True
    assert data["totalStores"] == 1 and data["totalProducts"] == 1
    assert data["stores"][0] == {
        "name": "Kroger",
        "distance": 1.0,
        "items": [
            {
                "name": "Whole Milk",
                "price": "$3.49",
                "method": "standard-.sh-dgr__grid-result",
                "isGenericName": False,
                "productDetail": None,
            }
        ],
    }
    assert data["products"][0]["priceValue"] == 3.49
    assert "error" not in data
