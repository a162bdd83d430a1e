"""Order lifecycle reactions around persistence.

The orchestrating service calls these methods explicitly:

- ``before_delete(order)`` before the order row is removed;
- ``after_write(order, previous_status)`` after every successful save.

``after_write`` numbers the order first (a nested, narrow write) and only
then reacts to a status change, so numbering always happens before any
notification for the same write.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

import structlog

from modules.orders.conf import OrderEngineConfig, get_engine_config
from modules.orders.constants import ORDER_NUMBER_MAX_RETRIES
from modules.orders.exceptions import OrderNumberUnavailable
from modules.orders.hooks import HookPoint, HookRegistry, hook_registry
from modules.orders.numbering import OrderNumberGenerator
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class NotificationRuleLookup(Protocol):
    def find_by_status(self, status: str) -> Iterable[Any]: ...


class NotificationSender(Protocol):
    def send(self, rule: Any, order: Any) -> bool: ...


class LifecycleManager:
    def __init__(
        self,
        order_repository: IOrderRepository,
        rule_lookup: NotificationRuleLookup,
        sender: NotificationSender,
        config: Optional[OrderEngineConfig] = None,
        generator: Optional[OrderNumberGenerator] = None,
        hooks: Optional[HookRegistry] = None,
    ) -> None:
        self._order_repo = order_repository
        self._rule_lookup = rule_lookup
        self._sender = sender
        self._config = config if config is not None else get_engine_config()
        self._generator = generator if generator is not None else OrderNumberGenerator()
        self._hooks = hooks if hooks is not None else hook_registry

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def before_delete(self, order: Any) -> int:
        """Delete every item of *order*, one by one.

        A failing item deletion propagates; the caller must not go on to
        delete the order.
        """
        items = list(order.line_items())
        for item in items:
            self._order_repo.delete_item(item)
        logger.info("order.items_cascade_deleted", order_id=order.pk, item_count=len(items))
        return len(items)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def after_write(self, order: Any, previous_status: Optional[str], notes: str = "") -> None:
        self.ensure_order_number(order)
        if (previous_status or "") != (order.status or ""):
            self.on_status_changed(order, previous_status, notes=notes)

    def ensure_order_number(self, order: Any) -> bool:
        """Assign and persist an order number if the order has none.

        Returns ``True`` when a number was assigned.

        Raises:
            OrderNumberUnavailable: every candidate was already taken.
        """
        if order.order_number:
            return False
        if order.pk is None:
            raise ValueError("Order must be saved before it can be numbered.")

        for attempt in range(1, ORDER_NUMBER_MAX_RETRIES + 1):
            candidate = self._generator.generate(order.pk, self._config.order_prefix)
            if not self._order_repo.order_number_exists(candidate):
                break
            logger.warning(
                "order.number_collision", order_id=order.pk, candidate=candidate, attempt=attempt
            )
        else:
            raise OrderNumberUnavailable(
                f"Failed to generate unique order_number after "
                f"{ORDER_NUMBER_MAX_RETRIES} attempts"
            )

        order.order_number = candidate
        self._order_repo.save_order_number(order)
        logger.info("order.number_assigned", order_id=order.pk, order_number=candidate)
        self._hooks.notify(HookPoint.AFTER_ORDER_NUMBER_ASSIGNED, order)
        return True

    def on_status_changed(
        self, order: Any, previous_status: Optional[str], notes: str = ""
    ) -> int:
        """Record the change and send every notification for the new status.

        A notification that raises or reports failure is logged and the
        remaining ones are still sent.  Returns the number delivered.
        """
        log = logger.bind(
            order_id=order.pk, old_status=previous_status, new_status=order.status
        )
        self._order_repo.add_history(order, order.status, previous_status, notes=notes)

        delivered = 0
        for rule in self._rule_lookup.find_by_status(order.status):
            try:
                sent = self._sender.send(rule, order)
            except Exception:
                log.exception("order.notification_failed", rule_id=str(getattr(rule, "pk", "")))
                continue
            if sent:
                delivered += 1
            else:
                log.warning("order.notification_not_sent", rule_id=str(getattr(rule, "pk", "")))

        log.info("order.status_changed", notifications_sent=delivered)
        self._hooks.notify(HookPoint.AFTER_STATUS_CHANGED, order, previous_status)
        return delivered
