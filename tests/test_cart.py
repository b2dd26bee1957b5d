from decimal import Decimal

import pytest

from barberbook.services.cart import SelectionCart


def test_add_add_remove_leaves_one():
    cart = SelectionCart()
    cart.add("svc1")
    cart.add("svc1")
    cart.remove("svc1")
    assert cart.quantity("svc1") == 1
    assert cart.items == {"svc1": 1}


def test_removing_last_unit_drops_the_key():
    cart = SelectionCart()
    cart.add("svc1")
    cart.remove("svc1")
    assert "svc1" not in cart.items
    assert cart.is_empty()


def test_remove_of_absent_service_is_a_no_op():
    cart = SelectionCart()
    cart.remove("ghost")
    assert cart.items == {}


def test_total_price_and_items():
    cart = SelectionCart.from_mapping({"svc1": 2, "svc2": 1})
    assert cart.total_price({"svc1": 25, "svc2": 40}) == 90
    assert cart.total_items() == 3


def test_service_missing_from_catalog_counts_as_zero():
    cart = SelectionCart.from_mapping({"svc1": 2, "gone": 3})
    assert cart.total_price({"svc1": Decimal("12.50")}) == Decimal("25.00")
    assert cart.total_items() == 5


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_from_mapping_rejects_non_positive_or_non_integer_quantities(quantity):
    with pytest.raises(ValueError):
        SelectionCart.from_mapping({"svc1": quantity})


def test_items_is_a_copy():
    cart = SelectionCart.from_mapping({"svc1": 1})
    cart.items["svc1"] = 0
    assert cart.quantity("svc1") == 1
