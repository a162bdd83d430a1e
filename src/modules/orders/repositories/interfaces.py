"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate and
its lifecycle need: atomic creation with items, the persisted status
before an overwrite, order-number bookkeeping, per-item deletion and the
status history trail.

The Service Layer and ``LifecycleManager`` depend exclusively on this
contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items.

        ``data`` holds order field values plus ``items``: a list of dicts
        with ``title``, ``price``, ``quantity`` and ``tax_rate``.
        """

    @abstractmethod
    def update(self, order: Order, data: Dict[str, Any]) -> Order:
        """Apply field values to *order* and persist it."""

    @abstractmethod
    def get_persisted_status(self, id: int) -> Optional[str]:
        """Status currently stored for order *id* (``None`` if unsaved)."""

    @abstractmethod
    def order_number_exists(self, order_number: str) -> bool:
        """Whether *order_number* is already taken by another order."""

    @abstractmethod
    def save_order_number(self, order: Order) -> None:
        """Persist only ``order.order_number``, bypassing the lifecycle."""

    @abstractmethod
    def replace_items(self, order: Order, items: Sequence[Dict[str, Any]]) -> List[OrderItem]:
        """Replace every item of *order* with *items*."""

    @abstractmethod
    def delete_item(self, item: OrderItem) -> None:
        """Delete a single line item."""

    @abstractmethod
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def list_history(self, order: Order) -> List[OrderStatusHistory]:
        """Status history of *order*, newest first."""
