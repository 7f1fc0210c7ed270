"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.manager import cart_manager
from ordering.cart.snapshot import Cart
from ordering.catalogue.inventory import AddProduct
from ordering.catalogue.product import Product
from ordering.errors import OutOfStock
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


def product_id_for(name):
    return name.lower().replace(" ", "-")


@pytest.fixture()
def product_id():
    """Catalog id the steps give a shoe, derived from its name."""
    return product_id_for


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error a When step captured."""
    return {"exc": None}


@pytest.fixture()
def guest_cart():
    return Cart()


# ---------------------------------------------------------------------------
# Given steps: catalog and sessions
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalog lists "{name}" at {price:g} with {stock:d} units'))
def catalog_lists(name, price, stock):
    current_domain.process(
        AddProduct(
            product_id=product_id_for(name),
            name=name,
            price=price,
            stock=stock,
            colors="Black,White",
            sizes="8,9,10",
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('a logged in customer "{user_id}"'), target_fixture="session")
def logged_in_customer(user_id):
    return cart_manager.login(user_id)


@given(parsers.cfparse('the customer adds {quantity:d} "{name}" to the cart'))
@when(parsers.cfparse('the customer adds {quantity:d} "{name}" to the cart'))
def customer_adds(session, error, quantity, name):
    try:
        cart_manager.add_item(session, product_id_for(name), "Black", "9", quantity)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps: shared assertions
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the "{name}" stock is {stock:d}'))
def stock_is(name, stock):
    product = current_domain.repository_for(Product).get(product_id_for(name))
    assert product.stock == stock


@then("the cart is empty")
def cart_is_empty(session):
    assert session.cart.is_empty


@then("the cart change is rejected as out of stock")
def cart_change_rejected(error):
    assert isinstance(error["exc"], OutOfStock)


@then(parsers.cfparse("only {count:d} order exists"))
def order_count(count):
    assert current_domain.repository_for(Order).count_orders() == count
