"""Order domain constants.

Defines the default status set, the statuses that still allow editing,
the named capabilities checked by the authorization gate, and the
notification recipients.
"""

from enum import Enum

from django.db import models


class OrderStatus(models.TextChoices):
    INCOMPLETE = "incomplete", "Incomplete"
    FAILED = "failed", "Failed"
    CANCELLED = "cancelled", "Cancelled"
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    PROCESSING = "processing", "Processing"
    DISPATCHED = "dispatched", "Dispatched"
    REFUNDED = "refunded", "Refunded"


DEFAULT_STATUSES: dict[str, str] = dict(OrderStatus.choices)

# "" covers orders written before a default status was configured.
DEFAULT_EDITABLE_STATUSES: frozenset[str] = frozenset(
    {
        "",
        OrderStatus.INCOMPLETE,
        OrderStatus.PENDING,
        OrderStatus.PAID,
        OrderStatus.FAILED,
        OrderStatus.CANCELLED,
    }
)

DEFAULT_STATUS = OrderStatus.INCOMPLETE

ORDER_NUMBER_MAX_RETRIES = 5
ORDER_NUMBER_MIN_DIGITS = 8
ORDER_NUMBER_GROUP_SIZE = 4
ORDER_NUMBER_SUFFIX_MIN = 1000
ORDER_NUMBER_SUFFIX_MAX = 9999


class Capability(str, Enum):
    """Named capabilities resolved against the permission service."""

    ADMIN = "admin"
    VIEW = "view_orders"
    EDIT = "edit_orders"
    CHANGE_STATUS = "change_order_status"
    DELETE = "delete_orders"
    VIEW_HISTORY = "view_order_history"


class Operation(str, Enum):
    """Operations guarded by ``AuthorizationGate``."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    CHANGE_STATUS = "change_status"
    DELETE = "delete"
    VIEW_HISTORY = "view_history"


class NotificationRecipient(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    VENDOR = "vendor", "Vendor"
    BOTH = "both", "Both"
