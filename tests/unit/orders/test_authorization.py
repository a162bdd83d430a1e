"""Unit tests for AuthorizationGate.

Covers:
- Built-in rules per operation for anonymous, customer, admin and
  capability holders.
- Editability of the order status only constrains edits.
- Override hooks take precedence over the built-in rules.
- Actor resolution (explicit id, user objects, session fallback).
- A failing permission service denies.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from modules.orders.authorization import AuthorizationGate
from modules.orders.conf import OrderEngineConfig
from modules.orders.constants import Capability, Operation
from modules.orders.hooks import HookPoint, HookRegistry

pytestmark = pytest.mark.unit

ADMIN_ID = 1
CUSTOMER_ID = 2
STRANGER_ID = 3
EDITOR_ID = 4
STATUS_MANAGER_ID = 5
DELETER_ID = 6
AUDITOR_ID = 7
VIEWER_ID = 8


class FakePermissionService:
    """Grants each actor a fixed set of capabilities."""

    def __init__(self, grants):
        self.grants = grants
        self.calls = []

    def check(self, actor_id, capabilities):
        self.calls.append((actor_id, set(capabilities)))
        return bool(self.grants.get(actor_id, set()) & set(capabilities))


class BrokenPermissionService:
    def check(self, actor_id, capabilities):
        raise ConnectionError("directory unavailable")


class FixedActorResolver:
    def __init__(self, actor_id=None):
        self.actor_id = actor_id

    def current_actor_id(self):
        return self.actor_id


@pytest.fixture()
def permissions():
    return FakePermissionService(
        {
            ADMIN_ID: {Capability.ADMIN},
            EDITOR_ID: {Capability.EDIT},
            STATUS_MANAGER_ID: {Capability.CHANGE_STATUS},
            DELETER_ID: {Capability.DELETE},
            AUDITOR_ID: {Capability.VIEW_HISTORY},
            VIEWER_ID: {Capability.VIEW},
        }
    )


@pytest.fixture()
def hooks():
    return HookRegistry()


@pytest.fixture()
def resolver():
    return FixedActorResolver()


@pytest.fixture()
def gate(permissions, resolver, hooks):
    return AuthorizationGate(permissions, resolver, config=OrderEngineConfig(), hooks=hooks)


@pytest.fixture()
def pending_order(make_order):
    return make_order(status="pending", customer_id=CUSTOMER_ID)


@pytest.fixture()
def dispatched_order(make_order):
    return make_order(status="dispatched", customer_id=CUSTOMER_ID)


# ---------------------------------------------------------------------------
# Built-in rules
# ---------------------------------------------------------------------------


class TestCreate:
    @pytest.mark.parametrize("actor", [None, STRANGER_ID, ADMIN_ID])
    def test_anyone_may_create(self, gate, actor):
        assert gate.can_create(actor) is True


class TestView:
    def test_customer_views_own_order(self, gate, pending_order):
        assert gate.can_view(CUSTOMER_ID, pending_order) is True

    def test_stranger_cannot_view(self, gate, pending_order):
        assert gate.can_view(STRANGER_ID, pending_order) is False

    def test_anonymous_cannot_view(self, gate, pending_order):
        assert gate.can_view(None, pending_order) is False

    def test_anonymous_cannot_view_guest_order(self, gate, make_order):
        assert gate.can_view(None, make_order(customer_id=None)) is False

    @pytest.mark.parametrize("actor", [ADMIN_ID, VIEWER_ID])
    def test_admin_and_viewers_see_every_order(self, gate, dispatched_order, actor):
        assert gate.can_view(actor, dispatched_order) is True


class TestEdit:
    @pytest.mark.parametrize("actor", [ADMIN_ID, EDITOR_ID])
    def test_editors_edit_editable_orders(self, gate, pending_order, actor):
        assert gate.can_edit(actor, pending_order) is True

    @pytest.mark.parametrize("actor", [ADMIN_ID, EDITOR_ID])
    def test_nobody_edits_non_editable_orders(self, gate, dispatched_order, actor):
        assert gate.can_edit(actor, dispatched_order) is False

    def test_customer_cannot_edit_own_order(self, gate, pending_order):
        assert gate.can_edit(CUSTOMER_ID, pending_order) is False

    def test_edit_without_order_is_denied(self, gate):
        assert gate.can_edit(ADMIN_ID, None) is False

    def test_blank_status_is_editable(self, gate, make_order):
        assert gate.can_edit(EDITOR_ID, make_order(status="")) is True

    def test_editable_statuses_come_from_config(self, permissions, resolver, hooks, dispatched_order):
        gate = AuthorizationGate(
            permissions,
            resolver,
            config=OrderEngineConfig(editable_statuses=frozenset({"dispatched"})),
            hooks=hooks,
        )

        assert gate.can_edit(EDITOR_ID, dispatched_order) is True


class TestStatusDeleteHistory:
    @pytest.mark.parametrize("actor", [ADMIN_ID, STATUS_MANAGER_ID])
    def test_change_status_ignores_editability(self, gate, dispatched_order, actor):
        assert gate.can_change_status(actor, dispatched_order) is True

    @pytest.mark.parametrize("actor", [ADMIN_ID, DELETER_ID])
    def test_delete_ignores_editability(self, gate, dispatched_order, actor):
        assert gate.can_delete(actor, dispatched_order) is True

    @pytest.mark.parametrize("actor", [ADMIN_ID, AUDITOR_ID])
    def test_view_history(self, gate, pending_order, actor):
        assert gate.can_view_history(actor, pending_order) is True

    @pytest.mark.parametrize(
        "operation",
        [Operation.CHANGE_STATUS, Operation.DELETE, Operation.VIEW_HISTORY],
    )
    @pytest.mark.parametrize("actor", [None, CUSTOMER_ID, EDITOR_ID])
    def test_others_are_denied(self, gate, pending_order, operation, actor):
        assert gate.authorize(operation, actor, pending_order) is False

    def test_admin_capability_is_always_checked(self, gate, permissions, pending_order):
        gate.can_delete(STRANGER_ID, pending_order)

        assert permissions.calls == [(STRANGER_ID, {Capability.ADMIN, Capability.DELETE})]


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


class TestOverrides:
    def test_allow_override_beats_built_in_denial(self, gate, hooks, dispatched_order):
        hooks.register(HookPoint.CAN_EDIT, lambda actor_id, order: True)

        assert gate.can_edit(STRANGER_ID, dispatched_order) is True

    def test_deny_override_beats_admin(self, gate, hooks, pending_order):
        hooks.register(HookPoint.CAN_DELETE, lambda actor_id, order: False)

        assert gate.can_delete(ADMIN_ID, pending_order) is False

    def test_none_falls_through_to_rule(self, gate, hooks, pending_order):
        hooks.register(HookPoint.CAN_VIEW, lambda actor_id, order: None)

        assert gate.can_view(CUSTOMER_ID, pending_order) is True
        assert gate.can_view(STRANGER_ID, pending_order) is False

    def test_override_answer_is_coerced_to_bool(self, gate, hooks, pending_order):
        hooks.register(HookPoint.CAN_VIEW_HISTORY, lambda actor_id, order: 0)

        assert gate.can_view_history(ADMIN_ID, pending_order) is False

    def test_overrides_are_per_operation(self, gate, hooks, pending_order):
        hooks.register(HookPoint.CAN_EDIT, lambda actor_id, order: True)

        assert gate.can_delete(STRANGER_ID, pending_order) is False

    def test_override_receives_resolved_actor(self, gate, hooks, pending_order):
        seen = []
        hooks.register(HookPoint.CAN_VIEW, lambda actor_id, order: seen.append((actor_id, order)))

        gate.can_view(SimpleNamespace(pk=STRANGER_ID, is_authenticated=True), pending_order)

        assert seen == [(STRANGER_ID, pending_order)]


# ---------------------------------------------------------------------------
# Actor resolution
# ---------------------------------------------------------------------------


class TestActorResolution:
    def test_missing_actor_falls_back_to_session(self, gate, resolver, pending_order):
        resolver.actor_id = CUSTOMER_ID

        assert gate.can_view(order=pending_order) is True

    def test_no_session_actor_is_anonymous(self, gate, pending_order):
        assert gate.resolve_actor(None) is None
        assert gate.can_view(order=pending_order) is False

    def test_user_object_resolves_to_pk(self, gate):
        user = SimpleNamespace(pk=EDITOR_ID, is_authenticated=True)

        assert gate.resolve_actor(user) == EDITOR_ID

    def test_anonymous_user_resolves_to_none(self, gate):
        user = SimpleNamespace(pk=None, is_authenticated=False)

        assert gate.resolve_actor(user) is None

    def test_operation_accepts_plain_string(self, gate, pending_order):
        assert gate.authorize("view", CUSTOMER_ID, pending_order) is True


# ---------------------------------------------------------------------------
# Failure
# ---------------------------------------------------------------------------


def test_failing_permission_service_denies(resolver, hooks, pending_order):
    gate = AuthorizationGate(
        BrokenPermissionService(), resolver, config=OrderEngineConfig(), hooks=hooks
    )

    assert gate.can_edit(ADMIN_ID, pending_order) is False
    assert gate.can_delete(ADMIN_ID, pending_order) is False
    # The owner rule does not depend on the service.
    assert gate.can_view(CUSTOMER_ID, pending_order) is True


def test_failing_override_hook_denies(gate, hooks, pending_order):
    def broken(actor_id, order):
        raise RuntimeError("rules engine down")

    hooks.register(HookPoint.CAN_VIEW, broken)

    assert gate.can_view(CUSTOMER_ID, pending_order) is False
    assert gate.can_view(ADMIN_ID, pending_order) is False
