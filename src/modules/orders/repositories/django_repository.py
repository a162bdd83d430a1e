"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Multi-row writes are wrapped in ``transaction.atomic()`` so the Order
aggregate (Order + OrderItems) is persisted atomically.

The repository never triggers lifecycle reactions itself; the service
calls ``LifecycleManager`` around the writes made here.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

ITEM_FIELDS = ("title", "price", "quantity", "tax_rate")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically."""
        fields = {key: value for key, value in data.items() if key != "items"}
        order = Order(**fields)
        order.save()

        items = data.get("items", [])
        self._create_items(order, items)

        logger.info("order.created", order_id=order.pk, item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, order: Order, data: Dict[str, Any]) -> Order:
        for field, value in data.items():
            setattr(order, field, value)
        order.save()
        logger.info("order.updated", order_id=order.pk, fields=sorted(data))
        return order

    @transaction.atomic
    def replace_items(self, order: Order, items: Sequence[Dict[str, Any]]) -> List[OrderItem]:
        order.items.all().delete()
        created = self._create_items(order, items)
        logger.info("order.items_replaced", order_id=order.pk, item_count=len(created))
        return created

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and customer.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("customer")
                .prefetch_related("items")
                .filter(pk=id)
                .first()
            )
        except (ValueError, TypeError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters and eager-loaded items.

        Supported filter keys: any ``Order`` lookup, e.g. ``status`` or
        ``customer_id``.
        """
        queryset = Order.objects.select_related("customer").prefetch_related("items")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def get_persisted_status(self, id: int) -> Optional[str]:
        if id is None:
            return None
        return Order.objects.filter(pk=id).values_list("status", flat=True).first()

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order."""
        entity.save()
        logger.info("order.saved", order_id=entity.pk)
        return entity

    def delete(self, id: int) -> bool:
        """Delete the order row.  Items must already be gone."""
        deleted, _ = Order.objects.filter(pk=id).delete()
        if deleted:
            logger.info("order.deleted", order_id=id)
        return bool(deleted)

    def delete_item(self, item: OrderItem) -> None:
        item_id = item.pk
        item.delete()
        logger.info("order.item_deleted", order_item_id=item_id)

    # ------------------------------------------------------------------
    # Order numbers
    # ------------------------------------------------------------------

    def order_number_exists(self, order_number: str) -> bool:
        return Order.objects.filter(order_number=order_number).exists()

    def save_order_number(self, order: Order) -> None:
        order.save(update_fields=["order_number"])

    # ------------------------------------------------------------------
    # Status history
    # ------------------------------------------------------------------

    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status or "",
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=order.pk,
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def list_history(self, order: Order) -> List[OrderStatusHistory]:
        return list(order.status_history.all())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _create_items(
        self, order: Order, items: Sequence[Dict[str, Any]]
    ) -> List[OrderItem]:
        created = [
            OrderItem(order=order, **{key: item[key] for key in ITEM_FIELDS if key in item})
            for item in items
        ]
        for item in created:
            item.save()
        # Drop any stale prefetch so valuation sees the new items.
        getattr(order, "_prefetched_objects_cache", {}).pop("items", None)
        return created
