"""Order URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.orders.readiness import readiness
from modules.orders.views import OrderViewSet

router = DefaultRouter(trailing_slash=True)
router.register("orders", OrderViewSet, basename="order")

urlpatterns = [
    path("orders/ready/", readiness, name="orders_ready"),
    *router.urls,
]
