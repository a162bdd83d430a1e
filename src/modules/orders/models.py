"""Order, OrderItem, NotificationRule and OrderStatusHistory models.

Business rules implemented:
- Order keeps the database-assigned integer ``id``; the human-readable
  ``order_number`` is derived from it once, after the first save (see
  ``modules.orders.lifecycle``), and is unique at the database level.
- No total is persisted: totals are always recomputed from the items,
  discount and postage by ``modules.orders.valuation``.
- Deleting an Order removes its items first (``LifecycleManager.before_delete``);
  the FK also cascades at the database level.
- ``customer`` is optional so guests can place orders.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, TimeStampedModel
from modules.orders.addresses import country_full, format_address
from modules.orders.conf import get_engine_config
from modules.orders.constants import NotificationRecipient


def default_order_status() -> str:
    """Configured initial status for new orders ("" when unset)."""
    return get_engine_config().default_status


class Order(TimeStampedModel):
    """Order aggregate root."""

    status: models.CharField = models.CharField(
        max_length=50, blank=True, default=default_order_status
    )
    order_number: models.CharField = models.CharField(
        max_length=64, unique=True, null=True, blank=True, editable=False
    )
    customer: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Billing details
    company: models.CharField = models.CharField(max_length=255, blank=True, default="")
    first_name: models.CharField = models.CharField(max_length=255, blank=True, default="")
    surname: models.CharField = models.CharField(max_length=255, blank=True, default="")
    address_1: models.CharField = models.CharField(max_length=255, blank=True, default="")
    address_2: models.CharField = models.CharField(max_length=255, blank=True, default="")
    city: models.CharField = models.CharField(max_length=255, blank=True, default="")
    post_code: models.CharField = models.CharField(max_length=32, blank=True, default="")
    country: models.CharField = models.CharField(max_length=2, blank=True, default="")
    email: models.EmailField = models.EmailField(blank=True, default="")
    phone_number: models.CharField = models.CharField(max_length=64, blank=True, default="")

    # Delivery details
    delivery_first_names: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    delivery_surname: models.CharField = models.CharField(max_length=255, blank=True, default="")
    delivery_address_1: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    delivery_address_2: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    delivery_city: models.CharField = models.CharField(max_length=255, blank=True, default="")
    delivery_post_code: models.CharField = models.CharField(
        max_length=32, blank=True, default=""
    )
    delivery_country: models.CharField = models.CharField(max_length=2, blank=True, default="")

    # Discount and postage
    discount_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    postage_type: models.CharField = models.CharField(max_length=255, blank=True, default="")
    postage_cost: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    postage_tax: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    # Payment gateway info
    payment_no: models.CharField = models.CharField(max_length=255, blank=True, default="")
    gateway_data: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        permissions = [
            ("change_order_status", "Can change the status of any order"),
            ("view_order_history", "Can view the status history of an order"),
        ]

    # ------------------------------------------------------------------
    # Aggregate access
    # ------------------------------------------------------------------

    def line_items(self) -> list[OrderItem]:
        """Items of this order; empty for an unsaved order."""
        if self.pk is None:
            return []
        return list(self.items.all())

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    @property
    def translated_status(self) -> str:
        return get_engine_config().status_label(self.status)

    @property
    def billing_address(self) -> str:
        return format_address(
            self.address_1, self.address_2, self.city, self.post_code, self.country
        )

    @property
    def country_full(self) -> str:
        return country_full(self.country, get_engine_config().country_names)

    @property
    def delivery_address(self) -> str:
        return format_address(
            self.delivery_address_1,
            self.delivery_address_2,
            self.delivery_city,
            self.delivery_post_code,
            self.delivery_country,
        )

    @property
    def delivery_country_full(self) -> str:
        return country_full(self.delivery_country, get_engine_config().country_names)

    def __str__(self) -> str:
        return f"{self.order_number or self.pk} ({self.status})"


class OrderItem(TimeStampedModel):
    """Line item owned by an Order.

    ``price`` is a per-unit price captured when the line was added;
    ``tax_rate`` is a percentage applied per unit.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    title: models.CharField = models.CharField(max_length=255, blank=True, default="")
    price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    tax_rate: models.DecimalField = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})

    def __str__(self) -> str:
        return f"{self.quantity} x {self.title}"


class NotificationRule(BaseModel):
    """Maps an order status to an email sent when an order enters it."""

    status: models.CharField = models.CharField(max_length=50, db_index=True)
    recipient: models.CharField = models.CharField(
        max_length=20,
        choices=NotificationRecipient.choices,
        default=NotificationRecipient.CUSTOMER,
    )
    from_email: models.EmailField = models.EmailField(blank=True, default="")
    vendor_email: models.EmailField = models.EmailField(blank=True, default="")
    custom_subject: models.CharField = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "order_notification_rules"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.status} -> {self.recipient}"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status changes.

    ``old_status`` is ``None`` for the entry recorded when the order is
    first written.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=50,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(max_length=50, blank=True)
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} : {self.old_status} -> {self.new_status}"
