import pytest
from protean.integrations.pytest import DomainFixture

P1 = "prod-p1"
P2 = "prod-p2"
P3 = "prod-p3"


@pytest.fixture(scope="session")
def carts_bed():
    from carts.domain import carts

    bed = DomainFixture(carts)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(carts_bed):
    with carts_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture
def products():
    """Catalogue with P1 at 10.0, P2 at 15.0 and P3 at 2.5."""
    from carts.catalogue.product import RegisterProduct
    from protean import current_domain

    for product_id, name, price in [
        (P1, "Notebook", 10.0),
        (P2, "Fountain pen", 15.0),
        (P3, "Eraser", 2.5),
    ]:
        current_domain.process(
            RegisterProduct(product_id=product_id, name=name, price=price),
            asynchronous=False,
        )
    return {P1: 10.0, P2: 15.0, P3: 2.5}
