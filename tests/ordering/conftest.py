import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer():
    from ordering.session import ShopperSession

    return ShopperSession(user_id="cust-001")


@pytest.fixture()
def other_customer():
    from ordering.session import ShopperSession

    return ShopperSession(user_id="cust-002")


@pytest.fixture()
def staff():
    from ordering.session import Role, ShopperSession

    return ShopperSession(user_id="staff-001", role=Role.STAFF)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
@pytest.fixture()
def add_shoe():
    """Return a helper that lists a shoe and returns its id."""
    from ordering.catalogue.inventory import AddProduct

    def _add(product_id, name="Runner", price=50.0, stock=5, colors="Black,White", sizes="8,9,10", available=True):
        return current_domain.process(
            AddProduct(
                product_id=product_id,
                name=name,
                price=price,
                stock=stock,
                colors=colors,
                sizes=sizes,
                available=available,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def shoes(add_shoe):
    """Two shoes: A with 5 units, B with 3 units."""
    add_shoe("prod-a", name="Nike Air Max", price=129.99, stock=5)
    add_shoe("prod-b", name="Puma RS-X", price=89.99, stock=3)
    return ("prod-a", "prod-b")


@pytest.fixture()
def stock_of():
    from ordering.catalogue.product import Product

    def _stock(product_id):
        return current_domain.repository_for(Product).get(product_id).stock

    return _stock
