"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.valuation import ValuationEngine

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class LineItemInputSerializer(serializers.Serializer):
    """Validates a single line item; negative prices are rejected here."""

    title = serializers.CharField(required=False, default="", allow_blank=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), default=Decimal("0.00")
    )
    quantity = serializers.IntegerField(min_value=1, default=1)
    tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )


class OrderDetailsInputSerializer(serializers.Serializer):
    """Billing, delivery, discount and postage fields; all optional."""

    company = serializers.CharField(required=False, allow_blank=True)
    first_name = serializers.CharField(required=False, allow_blank=True)
    surname = serializers.CharField(required=False, allow_blank=True)
    address_1 = serializers.CharField(required=False, allow_blank=True)
    address_2 = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    post_code = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True, max_length=2)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone_number = serializers.CharField(required=False, allow_blank=True)

    delivery_first_names = serializers.CharField(required=False, allow_blank=True)
    delivery_surname = serializers.CharField(required=False, allow_blank=True)
    delivery_address_1 = serializers.CharField(required=False, allow_blank=True)
    delivery_address_2 = serializers.CharField(required=False, allow_blank=True)
    delivery_city = serializers.CharField(required=False, allow_blank=True)
    delivery_post_code = serializers.CharField(required=False, allow_blank=True)
    delivery_country = serializers.CharField(required=False, allow_blank=True, max_length=2)

    discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False
    )
    postage_type = serializers.CharField(required=False, allow_blank=True)
    postage_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    postage_tax = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)

    payment_no = serializers.CharField(required=False, allow_blank=True)
    gateway_data = serializers.CharField(required=False, allow_blank=True)


class CreateOrderSerializer(OrderDetailsInputSerializer):
    """Validates the order creation payload.  Items are optional."""

    items = LineItemInputSerializer(many=True, required=False)


class UpdateOrderSerializer(OrderDetailsInputSerializer):
    """Validates an edit.  When ``items`` is sent it replaces all items."""

    items = LineItemInputSerializer(many=True, required=False)


class ChangeStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "title", "price", "quantity", "tax_rate"]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with items and freshly computed totals."""

    items = OrderItemSerializer(many=True, read_only=True)
    totals = serializers.SerializerMethodField()
    has_discount = serializers.SerializerMethodField()
    item_summary = serializers.SerializerMethodField()
    translated_status = serializers.CharField(read_only=True)
    billing_address = serializers.CharField(read_only=True)
    delivery_address = serializers.CharField(read_only=True)
    country_full = serializers.CharField(read_only=True)
    delivery_country_full = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "status",
            "translated_status",
            "company",
            "first_name",
            "surname",
            "email",
            "phone_number",
            "billing_address",
            "country_full",
            "delivery_first_names",
            "delivery_surname",
            "delivery_address",
            "delivery_country_full",
            "discount_amount",
            "has_discount",
            "postage_type",
            "postage_cost",
            "postage_tax",
            "payment_no",
            "created_at",
            "updated_at",
            "items",
            "item_summary",
            "totals",
        ]
        read_only_fields = fields

    def _valuation(self) -> ValuationEngine:
        return self.context.get("valuation") or ValuationEngine()

    def get_totals(self, order: Order) -> dict:
        totals = self._valuation().compute_totals(order)
        return {name: str(value) for name, value in totals.model_dump().items()}

    def get_has_discount(self, order: Order) -> bool:
        return self._valuation().has_discount(order)

    def get_item_summary(self, order: Order) -> list[str]:
        return list(self._valuation().item_summary(order))
