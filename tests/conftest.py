from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

import pytest

from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


# ---------------------------------------------------------------------------
# In-memory stand-ins for the Order aggregate
# ---------------------------------------------------------------------------


@dataclass
class StubItem:
    price: Decimal
    quantity: int = 1
    tax_rate: Decimal = Decimal("0")
    title: str = "Item"
    pk: Optional[int] = None


@dataclass
class StubOrder:
    items: List[StubItem] = field(default_factory=list)
    discount_amount: Decimal = Decimal("0")
    postage_cost: Decimal = Decimal("0")
    postage_tax: Decimal = Decimal("0")
    status: str = "pending"
    order_number: Optional[str] = None
    customer_id: Optional[int] = None
    pk: Optional[int] = 1

    def line_items(self) -> List[StubItem]:
        return list(self.items)


@pytest.fixture()
def make_item():
    def _make(price="0", quantity=1, tax_rate="0", title="Item", pk=None) -> StubItem:
        return StubItem(
            price=Decimal(price),
            quantity=quantity,
            tax_rate=Decimal(tax_rate),
            title=title,
            pk=pk,
        )

    return _make


@pytest.fixture()
def make_order():
    def _make(items=(), discount="0", postage_cost="0", postage_tax="0", **overrides) -> StubOrder:
        return StubOrder(
            items=list(items),
            discount_amount=Decimal(discount),
            postage_cost=Decimal(postage_cost),
            postage_tax=Decimal(postage_tax),
            **overrides,
        )

    return _make
