"""Access control for orders.

``AuthorizationGate`` answers view / create / edit / change-status /
delete / view-history questions for an actor and an order.  Every check
first consults the matching ``CAN_*`` override hooks; the first
non-``None`` answer is final.  Otherwise the built-in rule applies:

=============  =========================================================
create         always (guests may place orders)
view           admin or VIEW holder, or the actor is the order's customer
edit           admin or EDIT holder, and the status is editable
change_status  admin or CHANGE_STATUS holder, whatever the status
delete         admin or DELETE holder, whatever the status
view_history   admin or VIEW_HISTORY holder
=============  =========================================================

Roles are never evaluated here: they come from the permission service.
If that service fails the check denies.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Protocol, Set, Union

import structlog

from modules.orders.conf import OrderEngineConfig, get_engine_config
from modules.orders.constants import Capability, Operation
from modules.orders.hooks import HookPoint, HookRegistry, hook_registry

logger = structlog.get_logger(__name__)


class PermissionService(Protocol):
    def check(self, actor_id: int, capabilities: Set[Capability]) -> bool: ...


class ActorResolver(Protocol):
    def current_actor_id(self) -> Optional[int]: ...


OVERRIDE_HOOKS: Dict[Operation, HookPoint] = {
    Operation.VIEW: HookPoint.CAN_VIEW,
    Operation.CREATE: HookPoint.CAN_CREATE,
    Operation.EDIT: HookPoint.CAN_EDIT,
    Operation.CHANGE_STATUS: HookPoint.CAN_CHANGE_STATUS,
    Operation.DELETE: HookPoint.CAN_DELETE,
    Operation.VIEW_HISTORY: HookPoint.CAN_VIEW_HISTORY,
}


class AuthorizationGate:
    def __init__(
        self,
        permission_service: PermissionService,
        actor_resolver: ActorResolver,
        config: Optional[OrderEngineConfig] = None,
        hooks: Optional[HookRegistry] = None,
    ) -> None:
        self._permissions = permission_service
        self._actors = actor_resolver
        self._config = config if config is not None else get_engine_config()
        self._hooks = hooks if hooks is not None else hook_registry
        self._rules: Dict[Operation, Callable[[Optional[int], Any], bool]] = {
            Operation.VIEW: self._rule_view,
            Operation.CREATE: self._rule_create,
            Operation.EDIT: self._rule_edit,
            Operation.CHANGE_STATUS: self._rule_change_status,
            Operation.DELETE: self._rule_delete,
            Operation.VIEW_HISTORY: self._rule_view_history,
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def authorize(
        self, operation: Union[Operation, str], actor: Any = None, order: Any = None
    ) -> bool:
        operation = Operation(operation)
        actor_id = self.resolve_actor(actor)

        override = self._hooks.decide(OVERRIDE_HOOKS[operation], actor_id, order)
        if override is not None:
            logger.info(
                "authorization.overridden",
                operation=operation.value,
                actor_id=actor_id,
                allowed=bool(override),
            )
            return bool(override)

        allowed = self._rules[operation](actor_id, order)
        if not allowed:
            logger.info(
                "authorization.denied",
                operation=operation.value,
                actor_id=actor_id,
                order_id=getattr(order, "pk", None),
            )
        return allowed

    def can_view(self, actor: Any = None, order: Any = None) -> bool:
        return self.authorize(Operation.VIEW, actor, order)

    def can_create(self, actor: Any = None, order: Any = None) -> bool:
        return self.authorize(Operation.CREATE, actor, order)

    def can_edit(self, actor: Any = None, order: Any = None) -> bool:
        return self.authorize(Operation.EDIT, actor, order)

    def can_change_status(self, actor: Any = None, order: Any = None) -> bool:
        return self.authorize(Operation.CHANGE_STATUS, actor, order)

    def can_delete(self, actor: Any = None, order: Any = None) -> bool:
        return self.authorize(Operation.DELETE, actor, order)

    def can_view_history(self, actor: Any = None, order: Any = None) -> bool:
        return self.authorize(Operation.VIEW_HISTORY, actor, order)

    # ------------------------------------------------------------------
    # Actor resolution
    # ------------------------------------------------------------------

    def resolve_actor(self, actor: Any) -> Optional[int]:
        """Map an explicit actor (user, id or ``None``) to an identifier.

        ``None`` falls back to the current session actor; an anonymous
        user has no identifier.
        """
        if actor is None:
            return self._actors.current_actor_id()
        if isinstance(actor, bool):
            return None
        if isinstance(actor, int):
            return actor
        if hasattr(actor, "is_authenticated") and not actor.is_authenticated:
            return None
        return getattr(actor, "pk", None)

    # ------------------------------------------------------------------
    # Built-in rules
    # ------------------------------------------------------------------

    def _holds(self, actor_id: Optional[int], capability: Capability) -> bool:
        if not actor_id:
            return False
        try:
            return bool(self._permissions.check(actor_id, {Capability.ADMIN, capability}))
        except Exception:
            logger.exception(
                "authorization.permission_service_failed",
                actor_id=actor_id,
                capability=capability.value,
            )
            return False

    def _rule_create(self, actor_id: Optional[int], order: Any) -> bool:
        return True

    def _rule_view(self, actor_id: Optional[int], order: Any) -> bool:
        if self._holds(actor_id, Capability.VIEW):
            return True
        customer_id = getattr(order, "customer_id", None)
        return bool(actor_id) and customer_id is not None and actor_id == customer_id

    def _rule_edit(self, actor_id: Optional[int], order: Any) -> bool:
        if order is None or not self._config.is_editable_status(order.status):
            return False
        return self._holds(actor_id, Capability.EDIT)

    def _rule_change_status(self, actor_id: Optional[int], order: Any) -> bool:
        return self._holds(actor_id, Capability.CHANGE_STATUS)

    def _rule_delete(self, actor_id: Optional[int], order: Any) -> bool:
        return self._holds(actor_id, Capability.DELETE)

    def _rule_view_history(self, actor_id: Optional[int], order: Any) -> bool:
        return self._holds(actor_id, Capability.VIEW_HISTORY)
