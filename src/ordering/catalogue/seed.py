"""Starter catalog for a fresh shop."""

import structlog
from protean.utils.globals import current_domain

from ordering.catalogue.inventory import AddProduct
from ordering.catalogue.product import Product
from ordering.utils.queries import count

logger = structlog.get_logger(__name__)

SAMPLE_SHOES = [
    ("Nike Air Max", 129.99, 50, "Black,White,Blue", "7,8,9,10,11,12"),
    ("Adidas Ultraboost", 159.99, 30, "White,Black,Red", "8,9,10,11,12"),
    ("Puma RS-X", 89.99, 40, "Black,Blue,Green", "7,8,9,10"),
    ("Converse Chuck Taylor", 59.99, 100, "Black,White,Red,Navy", "6,7,8,9,10,11,12"),
    ("New Balance 574", 84.99, 25, "Gray,Navy,Green", "7,8,9,10,11"),
    ("Vans Old Skool", 64.99, 60, "Black,White,Checkerboard", "7,8,9,10,11,12"),
]


def seed_catalog() -> int:
    """Add the sample shoes when the catalog is empty. Returns how many were added."""
    if count(current_domain.repository_for(Product)._dao.query):
        logger.info("catalog_seed_skipped", reason="catalog not empty")
        return 0

    for name, price, stock, colors, sizes in SAMPLE_SHOES:
        current_domain.process(
            AddProduct(name=name, price=price, stock=stock, colors=colors, sizes=sizes),
            asynchronous=False,
        )
    logger.info("catalog_seeded", products=len(SAMPLE_SHOES))
    return len(SAMPLE_SHOES)
