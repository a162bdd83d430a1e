"""Order service layer (Use Cases).

Orchestrates order creation, edits, status changes and deletion.  All
write operations are atomic; the service defines the unit-of-work
boundary and calls ``LifecycleManager`` at the defined points:

- after every successful write: ``after_write(order, previous_status)``
  (numbering, then status notifications);
- before deleting: ``before_delete(order)`` (item cascade).

Authorization is the caller's duty (see ``AuthorizationGate``); the
service only enforces data rules.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.orders.conf import OrderEngineConfig, get_engine_config
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound
from modules.orders.valuation import ValuationEngine

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO, OrderTotalsDTO, UpdateOrderDTO
    from modules.orders.lifecycle import LifecycleManager
    from modules.orders.models import Order, OrderStatusHistory
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        lifecycle: LifecycleManager,
        valuation: Optional[ValuationEngine] = None,
        config: Optional[OrderEngineConfig] = None,
    ) -> None:
        self._order_repo = order_repository
        self._lifecycle = lifecycle
        self._valuation = valuation if valuation is not None else ValuationEngine()
        self._config = config if config is not None else get_engine_config()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create an order with its items, then number it.

        The order starts in the configured default status, which counts
        as a status change for notifications and history.
        """
        data: Dict[str, Any] = dto.changes()
        data["customer_id"] = dto.customer_id
        data["items"] = [item.model_dump() for item in dto.items]

        order = self._order_repo.create(data)
        self._lifecycle.after_write(order, None, notes="Order created")

        logger.info(
            "order.creation_completed",
            order_id=order.pk,
            order_number=order.order_number,
            guest=dto.customer_id is None,
        )
        return self._order_repo.get_by_id(order.pk) or order

    @transaction.atomic
    def save_order(self, order: Order, notes: str = "") -> Order:
        """Persist *order* and run the after-write lifecycle."""
        previous_status = self._order_repo.get_persisted_status(order.pk)
        self._order_repo.save(order)
        self._lifecycle.after_write(order, previous_status, notes=notes)
        return order

    @transaction.atomic
    def update_order(self, order_id: int, dto: UpdateOrderDTO) -> Order:
        """Apply an edit.  ``dto.items``, when present, replaces every item.

        Raises:
            OrderNotFound: order does not exist.
        """
        order = self.get_order(order_id)
        previous_status = order.status

        self._order_repo.update(order, dto.changes())
        if dto.items is not None:
            self._order_repo.replace_items(order, [item.model_dump() for item in dto.items])

        self._lifecycle.after_write(order, previous_status)
        logger.info("order.edit_completed", order_id=order.pk)
        return self._order_repo.get_by_id(order.pk) or order

    @transaction.atomic
    def change_status(self, order_id: int, new_status: str, notes: str = "") -> Order:
        """Move an order to *new_status*.

        Any configured status may follow any other.  Setting the current
        status again is a no-op.

        Raises:
            InvalidOrderStatus: *new_status* is not configured.
            OrderNotFound: order does not exist.
        """
        if not self._config.is_valid_status(new_status):
            raise InvalidOrderStatus(f"Unknown order status: {new_status!r}.")

        order = self.get_order(order_id)
        log = logger.bind(order_id=order.pk, current_status=order.status, new_status=new_status)
        if order.status == new_status:
            log.info("order.status_unchanged")
            return order

        previous_status = order.status
        order.status = new_status
        self._order_repo.save(order)
        self._lifecycle.after_write(order, previous_status, notes=notes)

        log.info("order.status_updated")
        return order

    @transaction.atomic
    def delete_order(self, order_id: int) -> None:
        """Delete an order after removing each of its items.

        Raises:
            OrderNotFound: order does not exist.
        """
        order = self.get_order(order_id)
        self._lifecycle.before_delete(order)
        self._order_repo.delete(order.pk)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Return a list of orders, optionally filtered."""
        return self._order_repo.list(filters)

    def get_history(self, order_id: int) -> List[OrderStatusHistory]:
        return self._order_repo.list_history(self.get_order(order_id))

    def compute_totals(self, order: Order) -> OrderTotalsDTO:
        return self._valuation.compute_totals(order)


def build_order_service() -> OrderService:
    """Wire the service with the Django repository and email notifications."""
    from modules.orders.lifecycle import LifecycleManager
    from modules.orders.notifications import (
        EmailNotificationSender,
        NotificationRuleDjangoLookup,
    )
    from modules.orders.repositories.django_repository import OrderDjangoRepository

    repository = OrderDjangoRepository()
    lifecycle = LifecycleManager(
        order_repository=repository,
        rule_lookup=NotificationRuleDjangoLookup(),
        sender=EmailNotificationSender(),
    )
    return OrderService(order_repository=repository, lifecycle=lifecycle)
