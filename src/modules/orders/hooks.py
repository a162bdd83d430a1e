"""Extension hooks for the order engine.

Collaborators register plain callables against a ``HookPoint``.  Callbacks
run in registration order and come in three flavours:

- *adjusters* (``UPDATE_*``) receive ``(order, value)`` and may return a
  replacement value; ``None`` keeps the current one.
- *overrides* (``CAN_*``) receive ``(actor_id, order)``; the first
  non-``None`` answer wins and the built-in rule is skipped.  An override
  that raises denies.
- *observers* (``AFTER_*``) receive event arguments and return nothing;
  a failing observer is logged and the remaining ones still run.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)

Hook = Callable[..., Any]


class HookPoint(str, Enum):
    UPDATE_SUBTOTAL = "update_subtotal"
    UPDATE_POSTAGE = "update_postage"
    UPDATE_TAX_TOTAL = "update_tax_total"
    UPDATE_TOTAL = "update_total"

    CAN_VIEW = "can_view"
    CAN_CREATE = "can_create"
    CAN_EDIT = "can_edit"
    CAN_CHANGE_STATUS = "can_change_status"
    CAN_DELETE = "can_delete"
    CAN_VIEW_HISTORY = "can_view_history"

    AFTER_ORDER_NUMBER_ASSIGNED = "after_order_number_assigned"
    AFTER_STATUS_CHANGED = "after_status_changed"


class HookRegistry:
    """In-process registry of extension callbacks."""

    def __init__(self) -> None:
        self._hooks: Dict[HookPoint, List[Hook]] = {}

    def register(self, point: HookPoint, hook: Hook) -> None:
        hooks = self._hooks.setdefault(point, [])
        if hook not in hooks:
            hooks.append(hook)

    def unregister(self, point: HookPoint, hook: Hook) -> None:
        hooks = self._hooks.get(point, [])
        if hook in hooks:
            hooks.remove(hook)

    def hooks_for(self, point: HookPoint) -> List[Hook]:
        return list(self._hooks.get(point, []))

    def adjust(self, point: HookPoint, order: Any, value: Any) -> Any:
        for hook in self.hooks_for(point):
            result = hook(order, value)
            if result is not None:
                value = result
        return value

    def decide(self, point: HookPoint, actor_id: Optional[int], order: Any) -> Optional[bool]:
        for hook in self.hooks_for(point):
            try:
                result = hook(actor_id, order)
            except Exception:
                logger.exception("hooks.override_failed", hook_point=point.value, actor_id=actor_id)
                return False
            if result is not None:
                return result
        return None

    def notify(self, point: HookPoint, *args: Any) -> None:
        for hook in self.hooks_for(point):
            try:
                hook(*args)
            except Exception:
                logger.exception("hooks.observer_failed", hook_point=point.value)


# Global registry instance (singleton)

hook_registry = HookRegistry()
