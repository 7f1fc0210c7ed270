"""BDD tests for checkout."""

from ordering.cart.manager import cart_manager
from ordering.errors import EmptyCart, InsufficientStock
from ordering.order.lifecycle import order_lifecycle
from ordering.session import ShopperSession
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/checkout.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('another customer bought every "{name}"'))
def _(name, product_id, stock_of):
    rival = ShopperSession(user_id="cust-rival")
    cart_manager.add_item(rival, product_id(name), "Black", "9", stock_of(product_id(name)))
    order_lifecycle.place_order(rival)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer checks out", target_fixture="receipt")
def _(session, error):
    try:
        return order_lifecycle.place_order(session)
    except ValidationError as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('order "{code}" is "{status}"'))
def _(receipt, staff, code, status):
    assert receipt.tracking_code == code
    assert order_lifecycle.track(staff, code).status == status


@then(parsers.cfparse("the order total is {total:g}"))
def _(receipt, total):
    assert receipt.total == total


@then(parsers.cfparse('checkout fails naming only "{name}"'))
def _(error, name):
    assert isinstance(error["exc"], InsufficientStock)
    assert [shortfall.name for shortfall in error["exc"].shortfalls] == [name]


@then("checkout fails because the cart is empty")
def _(error):
    assert isinstance(error["exc"], EmptyCart)
