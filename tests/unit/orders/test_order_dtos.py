"""Unit tests for Order DTOs (Pydantic v2).

Covers:
- Line item boundary validation (negative price, zero quantity).
- Frozen immutability.
- ``changes()`` returns only provided detail fields.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.orders.dtos import (
    CreateOrderDTO,
    LineItemDTO,
    OrderDetailsDTO,
    OrderTotalsDTO,
    UpdateOrderDTO,
)

pytestmark = pytest.mark.unit


class TestLineItemDTO:
    def test_defaults(self):
        item = LineItemDTO()

        assert item.price == Decimal("0.00")
        assert item.quantity == 1
        assert item.tax_rate == Decimal("0.00")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            LineItemDTO(price=Decimal("-0.01"))

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            LineItemDTO(quantity=quantity)

    def test_frozen(self):
        item = LineItemDTO(title="Widget")

        with pytest.raises(ValidationError):
            item.title = "Gadget"


class TestOrderDetailsDTO:
    def test_changes_only_includes_sent_fields(self):
        dto = OrderDetailsDTO(first_name="Ada", discount_amount=Decimal("5"))

        assert dto.changes() == {"first_name": "Ada", "discount_amount": Decimal("5")}

    def test_blank_string_is_a_change(self):
        assert OrderDetailsDTO(address_2="").changes() == {"address_2": ""}

    def test_negative_discount_rejected(self):
        with pytest.raises(ValidationError):
            OrderDetailsDTO(discount_amount=Decimal("-1"))


class TestCreateOrderDTO:
    def test_guest_order_without_items(self):
        dto = CreateOrderDTO()

        assert dto.customer_id is None
        assert dto.items == []

    def test_changes_exclude_customer_and_items(self):
        dto = CreateOrderDTO(customer_id=3, email="a@example.com", items=[{"title": "A"}])

        assert dto.changes() == {"email": "a@example.com"}
        assert dto.items[0].title == "A"


class TestUpdateOrderDTO:
    def test_items_absent_means_keep(self):
        assert UpdateOrderDTO(city="York").items is None

    def test_empty_items_means_clear(self):
        assert UpdateOrderDTO(items=[]).items == []


def test_totals_dto_is_frozen():
    totals = OrderTotalsDTO(
        subtotal=Decimal("1"), postage=Decimal("0"), tax_total=Decimal("0"), total=Decimal("1")
    )

    with pytest.raises(ValidationError):
        totals.total = Decimal("2")
