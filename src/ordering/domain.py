"""Ordering bounded context: Shoe Catalog, Shopping Cart, Orders and Sales.

Handles the order lifecycle state machine, the stock invariants tied to cart
and order mutations, and cart persistence across login sessions. Catalog
stock, carts, orders and the sales ledger live in one context so that a
checkout, cancellation or completion commits as a single unit of work.
"""

import structlog
from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)


def setting(key, default=None):
    """Read an application setting from the ``[custom]`` table of domain.toml."""
    custom = ordering.config.get("custom") or {}
    return custom.get(key, default)
