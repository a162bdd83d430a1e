"""Django and DRF adapters for order access control.

- ``DjangoPermissionService`` resolves capabilities against
  ``django.contrib.auth`` permissions (``ADMIN`` means superuser).
- ``ContextActorResolver`` reads the user published by
  ``CurrentActorMiddleware``.
- ``OrderAccessPermission`` maps viewset actions onto the gate.
"""

from __future__ import annotations

from typing import Dict, Optional, Set

from django.contrib.auth import get_user_model
from rest_framework.permissions import BasePermission

from modules.core.middleware import current_actor_var
from modules.orders.authorization import AuthorizationGate
from modules.orders.constants import Capability, Operation

CAPABILITY_PERMISSIONS: Dict[Capability, str] = {
    Capability.VIEW: "orders.view_order",
    Capability.EDIT: "orders.change_order",
    Capability.CHANGE_STATUS: "orders.change_order_status",
    Capability.DELETE: "orders.delete_order",
    Capability.VIEW_HISTORY: "orders.view_order_history",
}


class DjangoPermissionService:
    def check(self, actor_id: int, capabilities: Set[Capability]) -> bool:
        user = get_user_model().objects.filter(pk=actor_id, is_active=True).first()
        if user is None:
            return False
        if Capability.ADMIN in capabilities and user.is_superuser:
            return True
        return any(
            user.has_perm(CAPABILITY_PERMISSIONS[capability])
            for capability in capabilities
            if capability in CAPABILITY_PERMISSIONS
        )


class ContextActorResolver:
    def current_actor_id(self) -> Optional[int]:
        return current_actor_var.get()


def build_authorization_gate() -> AuthorizationGate:
    return AuthorizationGate(
        permission_service=DjangoPermissionService(),
        actor_resolver=ContextActorResolver(),
    )


class OrderAccessPermission(BasePermission):
    """Delegates every order endpoint to ``AuthorizationGate``.

    The view exposes the gate as ``view.gate``.  Unknown actions are
    denied.
    """

    ACTION_OPERATIONS: Dict[str, Operation] = {
        "create": Operation.CREATE,
        "retrieve": Operation.VIEW,
        "partial_update": Operation.EDIT,
        "destroy": Operation.DELETE,
        "change_status": Operation.CHANGE_STATUS,
        "history": Operation.VIEW_HISTORY,
    }

    def has_permission(self, request, view) -> bool:
        operation = self.ACTION_OPERATIONS.get(view.action)
        if operation is None:
            return False
        if operation is Operation.CREATE:
            return view.gate.can_create(request.user)
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        operation = self.ACTION_OPERATIONS.get(view.action)
        if operation is None:
            return False
        return view.gate.authorize(operation, request.user, obj)
