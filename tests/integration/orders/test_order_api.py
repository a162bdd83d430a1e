"""Integration tests for the Order HTTP API.

Covers:
- Guest and authenticated creation (201).
- Owner, staff and stranger access to a single order (200/401/403/404).
- Edits are refused once the status is no longer editable.
- Status changes, history and deletion require their own permissions.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from rest_framework.test import APIClient

from modules.orders.models import Order, OrderItem, OrderStatusHistory

pytestmark = pytest.mark.integration

User = get_user_model()

ORDERS_URL = "/api/v1/orders/"


def order_url(order_id, suffix=""):
    return f"{ORDERS_URL}{order_id}/{suffix}"


def grant(user, *codenames):
    user.user_permissions.add(
        *Permission.objects.filter(content_type__app_label="orders", codename__in=codenames)
    )
    return user


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer():
    return User.objects.create_user(username="customer", password="testpass123", email="c@example.com")


@pytest.fixture()
def stranger():
    return User.objects.create_user(username="stranger", password="testpass123")


@pytest.fixture()
def admin():
    return User.objects.create_superuser(username="admin", password="testpass123")


@pytest.fixture()
def clerk():
    user = User.objects.create_user(username="clerk", password="testpass123")
    return grant(
        user,
        "view_order",
        "change_order",
        "change_order_status",
        "view_order_history",
    )


@pytest.fixture()
def customer_order(customer):
    response = client_for(customer).post(
        ORDERS_URL,
        {
            "email": "c@example.com",
            "country": "GB",
            "address_1": "1 High St",
            "city": "Leeds",
            "postage_cost": "5.00",
            "items": [{"title": "Widget", "price": "100.00", "quantity": 2, "tax_rate": "10"}],
        },
        format="json",
    )
    assert response.status_code == 201
    return Order.objects.get(pk=response.data["id"])


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_guest_can_create(self, api_client):
        response = api_client.post(ORDERS_URL, {"email": "guest@example.com"}, format="json")

        assert response.status_code == 201
        assert response.data["customer_id"] is None
        assert response.data["order_number"]
        assert response.data["status"] == "incomplete"

    def test_authenticated_caller_becomes_customer(self, customer, customer_order):
        assert customer_order.customer_id == customer.pk
        assert customer_order.order_number

    def test_response_includes_totals_and_display_fields(self, customer):
        response = client_for(customer).post(
            ORDERS_URL,
            {
                "country": "GB",
                "address_1": "1 High St",
                "city": "Leeds",
                "postage_cost": "5.00",
                "items": [{"title": "Widget", "price": "100.00", "quantity": 2, "tax_rate": "10"}],
            },
            format="json",
        )

        assert response.data["totals"] == {
            "subtotal": "200.00",
            "postage": "5.00",
            "tax_total": "20.00",
            "total": "225.00",
        }
        assert response.data["item_summary"] == ["2 x Widget"]
        assert response.data["billing_address"] == "1 High St,\nLeeds,\nGB"
        assert response.data["country_full"] == "United Kingdom"
        assert response.data["translated_status"] == "Incomplete"
        assert response.data["has_discount"] is False

    @pytest.mark.parametrize(
        "item",
        [
            {"title": "Bad", "price": "-1.00"},
            {"title": "Bad", "price": "1.00", "quantity": 0},
        ],
    )
    def test_invalid_items_rejected(self, api_client, item):
        response = api_client.post(ORDERS_URL, {"items": [item]}, format="json")

        assert response.status_code == 400
        assert Order.objects.count() == 0

    def test_negative_discount_rejected(self, api_client):
        response = api_client.post(ORDERS_URL, {"discount_amount": "-5"}, format="json")

        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Retrieve
# ---------------------------------------------------------------------------


class TestRetrieve:
    def test_owner_can_view(self, customer, customer_order):
        response = client_for(customer).get(order_url(customer_order.pk))

        assert response.status_code == 200
        assert response.data["order_number"] == customer_order.order_number

    def test_staff_can_view(self, clerk, admin, customer_order):
        assert client_for(clerk).get(order_url(customer_order.pk)).status_code == 200
        assert client_for(admin).get(order_url(customer_order.pk)).status_code == 200

    def test_stranger_is_forbidden(self, stranger, customer_order):
        assert client_for(stranger).get(order_url(customer_order.pk)).status_code == 403

    def test_anonymous_is_unauthorized(self, api_client, customer_order):
        assert api_client.get(order_url(customer_order.pk)).status_code == 401

    def test_missing_order(self, admin):
        assert client_for(admin).get(order_url(999999)).status_code == 404

    def test_non_numeric_id(self, admin):
        assert client_for(admin).get(order_url("abc")).status_code == 404


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------


class TestEdit:
    def test_clerk_edits_editable_order(self, clerk, customer_order):
        response = client_for(clerk).patch(
            order_url(customer_order.pk),
            {"city": "York", "items": [{"title": "Gadget", "price": "3.00", "quantity": 3}]},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["item_summary"] == ["3 x Gadget"]
        assert response.data["order_number"] == customer_order.order_number
        assert Order.objects.get(pk=customer_order.pk).city == "York"

    def test_customer_cannot_edit(self, customer, customer_order):
        response = client_for(customer).patch(
            order_url(customer_order.pk), {"city": "York"}, format="json"
        )

        assert response.status_code == 403

    def test_non_editable_status_is_forbidden(self, clerk, admin, customer_order):
        Order.objects.filter(pk=customer_order.pk).update(status="dispatched")

        for user in (clerk, admin):
            response = client_for(user).patch(
                order_url(customer_order.pk), {"city": "York"}, format="json"
            )
            assert response.status_code == 403

    def test_status_is_not_editable_through_patch(self, clerk, customer_order):
        client_for(clerk).patch(order_url(customer_order.pk), {"status": "paid"}, format="json")

        assert Order.objects.get(pk=customer_order.pk).status == "incomplete"


# ---------------------------------------------------------------------------
# Status and history
# ---------------------------------------------------------------------------


class TestStatus:
    def test_clerk_changes_status(self, clerk, customer_order):
        response = client_for(clerk).post(
            order_url(customer_order.pk, "status/"),
            {"status": "paid", "notes": "Card captured"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["status"] == "paid"
        assert OrderStatusHistory.objects.filter(
            order=customer_order, new_status="paid", notes="Card captured"
        ).exists()

    def test_change_status_allowed_after_dispatch(self, clerk, customer_order):
        Order.objects.filter(pk=customer_order.pk).update(status="dispatched")

        response = client_for(clerk).post(
            order_url(customer_order.pk, "status/"), {"status": "refunded"}, format="json"
        )

        assert response.status_code == 200

    def test_unknown_status_is_bad_request(self, clerk, customer_order):
        response = client_for(clerk).post(
            order_url(customer_order.pk, "status/"), {"status": "lost"}, format="json"
        )

        assert response.status_code == 400

    def test_customer_cannot_change_status(self, customer, customer_order):
        response = client_for(customer).post(
            order_url(customer_order.pk, "status/"), {"status": "paid"}, format="json"
        )

        assert response.status_code == 403

    def test_history(self, clerk, customer_order):
        client_for(clerk).post(
            order_url(customer_order.pk, "status/"), {"status": "paid"}, format="json"
        )

        response = client_for(clerk).get(order_url(customer_order.pk, "history/"))

        assert response.status_code == 200
        assert {(row["old_status"], row["new_status"]) for row in response.data} == {
            (None, "incomplete"),
            ("incomplete", "paid"),
        }

    def test_customer_cannot_view_history(self, customer, customer_order):
        response = client_for(customer).get(order_url(customer_order.pk, "history/"))

        assert response.status_code == 403


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDelete:
    def test_clerk_without_delete_permission_is_forbidden(self, clerk, customer_order):
        assert client_for(clerk).delete(order_url(customer_order.pk)).status_code == 403

    def test_admin_deletes_order_and_items(self, admin, customer_order):
        response = client_for(admin).delete(order_url(customer_order.pk))

        assert response.status_code == 204
        assert not Order.objects.filter(pk=customer_order.pk).exists()
        assert not OrderItem.objects.filter(order_id=customer_order.pk).exists()

    def test_delete_permission_ignores_status(self, stranger, customer_order):
        grant(stranger, "delete_order")
        Order.objects.filter(pk=customer_order.pk).update(status="dispatched")

        assert client_for(stranger).delete(order_url(customer_order.pk)).status_code == 204
