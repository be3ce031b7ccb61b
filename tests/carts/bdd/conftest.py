"""Shared BDD fixtures and step definitions for the Carts domain."""

from datetime import datetime

import pytest
from carts.catalogue.product import RegisterProduct
from protean import current_domain
from pytest_bdd import given, parsers

NOW = datetime(2026, 3, 2, 12, 0, 0)


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def shopper():
    """The shopper's session: the bound cart id plus the last outcome."""
    return {"cart_id": None, "error": None, "report": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalogue has product "{product_id}" priced {price:f}'))
def catalogue_product(product_id, price):
    current_domain.process(
        RegisterProduct(product_id=product_id, name=product_id, price=price),
        asynchronous=False,
    )
