"""Cart Manager: the session cart and its synchronisation with storage.

Every operation that changes the cart saves it before returning, so the
persisted cart always matches what the customer last saw.
"""

import json

import structlog
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.persistence import ClearCart, SaveCart
from ordering.cart.snapshot import Cart, CartLine, merge
from ordering.catalogue.catalog import get_available_product, get_product
from ordering.errors import NotFound, OutOfStock, StockShortfall
from ordering.session import Role, ShopperSession
from ordering.utils.transactions import run_atomically

logger = structlog.get_logger(__name__)


def _check_quantity(product, quantity, color="", size=""):
    if quantity < 1:
        raise OutOfStock(message="Quantity must be at least 1")
    if quantity > product.stock:
        raise OutOfStock(
            [
                StockShortfall(
                    product_id=str(product.id),
                    name=product.name,
                    requested=quantity,
                    available=product.stock,
                    color=color,
                    size=str(size),
                )
            ]
        )


class CartManager:
    # -------------------------------------------------------------------
    # Session cart
    # -------------------------------------------------------------------
    def add_item(self, session: ShopperSession, product_id, color, size, quantity) -> Cart:
        """Add ``quantity`` units of a product variant, merging with an existing line."""
        product = get_available_product(product_id)
        if quantity < 1:
            raise OutOfStock(message="Quantity must be at least 1")
        product.check_options(color, size)

        merged_quantity = session.cart.quantity_of(product_id, color, size) + quantity
        _check_quantity(product, merged_quantity, color, size)

        cart = session.cart.with_line(
            CartLine(
                product_id=str(product.id),
                color=color,
                size=str(size),
                quantity=merged_quantity,
                name=product.name,
                unit_price=product.price,
            )
        )
        return self._commit(session, cart)

    def update_quantity(self, session: ShopperSession, product_id, color, size, quantity) -> Cart:
        line = session.cart.line_for(product_id, color, size)
        if line is None:
            raise NotFound("Cart line", f"{product_id}/{color}/{size}")
        product = get_available_product(product_id)
        _check_quantity(product, quantity, color, size)

        cart = session.cart.with_line(
            CartLine(
                product_id=line.product_id,
                color=line.color,
                size=line.size,
                quantity=quantity,
                name=product.name,
                unit_price=line.unit_price,
            )
        )
        return self._commit(session, cart)

    def remove_line(self, session: ShopperSession, product_id, color, size) -> Cart:
        if session.cart.line_for(product_id, color, size) is None:
            raise NotFound("Cart line", f"{product_id}/{color}/{size}")
        return self._commit(session, session.cart.without(product_id, color, size))

    def remove_all(self, session: ShopperSession) -> Cart:
        return self._commit(session, Cart())

    def _commit(self, session, cart):
        self.persist(session.user_id, cart)
        session.cart = cart
        return cart

    # -------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------
    @staticmethod
    def merge(cart_a: Cart, cart_b: Cart) -> Cart:
        return merge(cart_a, cart_b)

    def persist(self, user_id, cart: Cart):
        run_atomically(SaveCart(customer_id=user_id, items=json.dumps(cart.to_list())))
        logger.info("cart_persisted", user_id=str(user_id), lines=len(cart.lines))

    def _stored_rows(self, user_id):
        """Each stored cart row with its live product, or None once the product is gone."""
        stored = current_domain.repository_for(ShoppingCart).find_by_customer(user_id)
        if stored is None:
            return []

        rows = []
        for item in stored.items:
            try:
                product = get_product(item.product_id)
            except NotFound:
                product = None
            rows.append((item, product))
        return rows

    @staticmethod
    def _line(item, product) -> CartLine:
        return CartLine(
            product_id=str(item.product_id),
            color=item.color or "",
            size=str(item.size or ""),
            quantity=item.quantity,
            name=product.name if product is not None else str(item.product_id),
            unit_price=product.price if product is not None else 0.0,
        )

    def _usable(self, user_id, rows) -> Cart:
        lines = []
        for item, product in rows:
            if product is None or not product.available or product.stock < item.quantity:
                logger.info("cart_line_dropped", user_id=str(user_id), product_id=str(item.product_id))
                continue
            lines.append(self._line(item, product))
        return Cart(tuple(lines))

    def load(self, user_id) -> Cart:
        """Rebuild the stored cart against the live catalog.

        Lines whose product is gone, withdrawn or short on stock are dropped.
        """
        return self._usable(user_id, self._stored_rows(user_id))

    def resume(self, user_id) -> Cart:
        """The stored cart exactly as saved, named and priced from the live catalog.

        Nothing is dropped, so checkout can still name every line that stock
        no longer covers.
        """
        return Cart(tuple(self._line(item, product) for item, product in self._stored_rows(user_id)))

    def clear_persisted(self, user_id):
        run_atomically(ClearCart(customer_id=user_id))

    # -------------------------------------------------------------------
    # Login / logout
    # -------------------------------------------------------------------
    def open_session(self, user_id, role=Role.CUSTOMER) -> ShopperSession:
        """Resume a session from the stored cart without merging or filtering anything."""
        if role == Role.STAFF:
            return ShopperSession(user_id=user_id, role=role)
        return ShopperSession(user_id=user_id, role=role, cart=self.resume(user_id))

    def login(self, user_id, role=Role.CUSTOMER, session_cart: Cart | None = None) -> ShopperSession:
        """Start a session from the usable stored lines, folding any pre-login cart into them."""
        if role == Role.STAFF:
            logger.info("shopper_logged_in", user_id=str(user_id), role=role.value)
            return ShopperSession(user_id=user_id, role=role)

        rows = self._stored_rows(user_id)
        cart = self._usable(user_id, rows)
        session = ShopperSession(user_id=user_id, role=role, cart=cart)

        if session_cart and not session_cart.is_empty:
            self._commit(session, merge(session_cart, cart))
        elif len(cart.lines) != len(rows):
            self._commit(session, cart)

        logger.info("shopper_logged_in", user_id=str(user_id), role=role.value, lines=len(session.cart.lines))
        return session

    def logout(self, session: ShopperSession) -> ShopperSession:
        if not session.is_staff:
            self.persist(session.user_id, session.cart)
        logger.info("shopper_logged_out", user_id=str(session.user_id))
        return session.closed()


cart_manager = CartManager()
