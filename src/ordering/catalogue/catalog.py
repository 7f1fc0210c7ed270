"""Catalog store operations used by the cart, the order lifecycle and staff screens."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.inventory import AddProduct, DeleteProduct, UpdateProduct
from ordering.catalogue.product import Product, split_options
from ordering.errors import NotFound
from ordering.utils.transactions import run_atomically


def get_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise NotFound("Product", product_id) from exc


def get_available_product(product_id) -> Product:
    product = get_product(product_id)
    if not product.available:
        raise NotFound("Product", product_id, f"{product.name} is no longer available")
    return product


def decrement_stock(product_id, quantity) -> Product:
    """Take stock for an order. Call from inside a command handler's unit of work."""
    repo = current_domain.repository_for(Product)
    product = get_product(product_id)
    product.decrement_stock(quantity)
    repo.add(product)
    return product


def increment_stock(product_id, quantity) -> Product:
    """Put stock back for a cancelled order. Call from inside a unit of work."""
    repo = current_domain.repository_for(Product)
    product = get_product(product_id)
    product.increment_stock(quantity)
    repo.add(product)
    return product


def list_available(search=None, color=None, size=None) -> list[Product]:
    return current_domain.repository_for(Product).list_available(search=search, color=color, size=size)


def low_stock(threshold=None, limit=None) -> list[Product]:
    return current_domain.repository_for(Product).low_stock(threshold=threshold, limit=limit)


# ---------------------------------------------------------------------------
# Staff maintenance
# ---------------------------------------------------------------------------
def _options(value) -> str:
    return ",".join(split_options(value))


def add_product(session, name, price, stock, colors=None, sizes=None, image=None, available=True, product_id=None):
    session.require_staff("add products")
    return run_atomically(
        AddProduct(
            product_id=product_id,
            name=name,
            price=price,
            stock=stock,
            colors=_options(colors),
            sizes=_options(sizes),
            image=image,
            available=available,
        )
    )


def update_product(session, product_id, name, price, stock, colors=None, sizes=None, image=None, available=None):
    session.require_staff("edit products")
    get_product(product_id)
    run_atomically(
        UpdateProduct(
            product_id=product_id,
            name=name,
            price=price,
            stock=stock,
            colors=_options(colors),
            sizes=_options(sizes),
            image=image,
            available=available,
        ),
        serialised=True,
    )
    return get_product(product_id)


def delete_product(session, product_id) -> str:
    """Returns ``"soft"`` when the product was withdrawn, ``"hard"`` when removed."""
    session.require_staff("delete products")
    get_product(product_id)
    return run_atomically(DeleteProduct(product_id=product_id), serialised=True)
