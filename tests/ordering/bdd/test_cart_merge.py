"""BDD tests for cart persistence and the login merge."""

from ordering.cart.cart import ShoppingCart
from ordering.cart.manager import cart_manager
from ordering.cart.snapshot import Cart, CartLine
from ordering.catalogue.catalog import get_product, update_product
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/cart_merge.feature")


def _line(product_id, quantity):
    return CartLine(product_id=product_id, color="Black", size="9", quantity=quantity)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a saved cart for "{user_id}" with {quantity:d} "{name}"'))
def _(user_id, quantity, name, product_id):
    saved = cart_manager.load(user_id)
    cart_manager.persist(user_id, saved.with_line(_line(product_id(name), quantity)))


@given(parsers.cfparse('a guest cart with {quantity:d} "{name}"'), target_fixture="guest_cart")
def _(quantity, name, product_id):
    return Cart((_line(product_id(name), quantity),))


@given(parsers.cfparse('the guest cart also has {quantity:d} "{name}"'), target_fixture="guest_cart")
def _(guest_cart, quantity, name, product_id):
    return guest_cart.with_line(_line(product_id(name), quantity))


@given(parsers.cfparse('"{name}" is withdrawn from sale'))
def _(name, staff, product_id):
    product = get_product(product_id(name))
    update_product(staff, product.id, name=product.name, price=product.price, stock=product.stock, available=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user_id}" logs in'), target_fixture="session")
def _(user_id, guest_cart):
    return cart_manager.login(user_id, session_cart=guest_cart)


@when("the customer logs out", target_fixture="session")
def _(session):
    return cart_manager.logout(session)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart holds {quantity:d} "{name}"'))
def _(session, quantity, name, product_id):
    assert session.cart.quantity_of(product_id(name), "Black", "9") == quantity


@then(parsers.cfparse('the saved cart for "{user_id}" holds {quantity:d} units'))
def _(user_id, quantity):
    saved = current_domain.repository_for(ShoppingCart).find_by_customer(user_id)
    assert sum(item.quantity for item in saved.items) == quantity
