"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.  Every action
is authorized by ``OrderAccessPermission``, which delegates to
``AuthorizationGate``.  Domain exceptions are caught and translated into
appropriate HTTP status codes; the view never swallows generic
exceptions.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound
from modules.orders.models import Order
from modules.orders.permissions import OrderAccessPermission, build_authorization_gate
from modules.orders.serializers import (
    ChangeStatusSerializer,
    CreateOrderSerializer,
    OrderSerializer,
    StatusHistorySerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import build_order_service


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    permission_classes = [OrderAccessPermission]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()
        self.gate = build_authorization_gate()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Guests may create orders; an authenticated caller becomes the
        order's customer.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        customer_id = request.user.pk if request.user.is_authenticated else None
        dto = CreateOrderDTO(customer_id=customer_id, **create_serializer.validated_data)
        order = self._service.create_order(dto)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # Retrieve / Edit / Delete
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._get_authorized_order(request, pk)
        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Edits details and, optionally, replaces the items.  The status
        cannot be changed here; use ``POST /orders/{id}/status/``.
        """
        order = self._get_authorized_order(request, pk)

        update_serializer = UpdateOrderSerializer(data=request.data)
        update_serializer.is_valid(raise_exception=True)
        dto = UpdateOrderDTO(**update_serializer.validated_data)

        order = self._service.update_order(order.pk, dto)
        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        order = self._get_authorized_order(request, pk)
        self._service.delete_order(order.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/status/"""
        order = self._get_authorized_order(request, pk)

        status_serializer = ChangeStatusSerializer(data=request.data)
        status_serializer.is_valid(raise_exception=True)
        data = status_serializer.validated_data

        try:
            order = self._service.change_status(
                order_id=order.pk,
                new_status=data["status"],
                notes=data["notes"],
            )
        except InvalidOrderStatus as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        order = self._get_authorized_order(request, pk)
        history = self._service.get_history(order.pk)
        return Response(StatusHistorySerializer(history, many=True).data)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_authorized_order(self, request: Request, pk: str | None) -> Order:
        try:
            order = self._service.get_order(int(pk))
        except (TypeError, ValueError, OrderNotFound):
            raise NotFound("Order not found.") from None
        self.check_object_permissions(request, order)
        return order
