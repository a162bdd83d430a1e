"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``LineItemDTO``: input for a single line item.
- ``OrderDetailsDTO``: billing, delivery, discount and postage fields.
- ``CreateOrderDTO``: input for order creation (nested items).
- ``UpdateOrderDTO``: partial edit of an existing order.
- ``OrderTotalsDTO``: computed totals of an order.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class LineItemDTO(BaseModel):
    """Immutable DTO for a single line item.

    Price and quantity are validated here, at the boundary; the valuation
    engine assumes validated input.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    price: Decimal = Field(default=Decimal("0.00"), ge=0)
    quantity: int = 1
    tax_rate: Decimal = Decimal("0.00")

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class OrderDetailsDTO(BaseModel):
    """Fields shared by creation and edit requests.

    Every field is optional so that an edit only touches what was sent;
    ``changes()`` returns just the fields that were provided.
    """

    model_config = ConfigDict(frozen=True)

    company: Optional[str] = None
    first_name: Optional[str] = None
    surname: Optional[str] = None
    address_1: Optional[str] = None
    address_2: Optional[str] = None
    city: Optional[str] = None
    post_code: Optional[str] = None
    country: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    delivery_first_names: Optional[str] = None
    delivery_surname: Optional[str] = None
    delivery_address_1: Optional[str] = None
    delivery_address_2: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_post_code: Optional[str] = None
    delivery_country: Optional[str] = None

    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    postage_type: Optional[str] = None
    postage_cost: Optional[Decimal] = None
    postage_tax: Optional[Decimal] = None

    payment_no: Optional[str] = None
    gateway_data: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if name in OrderDetailsDTO.model_fields and value is not None
        }


class CreateOrderDTO(OrderDetailsDTO):
    """Immutable DTO for order creation requests.

    ``customer_id`` is ``None`` for guest orders.  An order may be created
    without items and filled in later.
    """

    customer_id: Optional[int] = None
    items: List[LineItemDTO] = Field(default_factory=list)


class UpdateOrderDTO(OrderDetailsDTO):
    """Immutable DTO for edits.  ``items``, when given, replaces all items."""

    items: Optional[List[LineItemDTO]] = None


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderTotalsDTO(BaseModel):
    """Immutable DTO with the computed totals of an order."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    postage: Decimal
    tax_total: Decimal
    total: Decimal
