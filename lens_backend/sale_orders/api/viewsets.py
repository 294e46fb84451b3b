# sale_orders/api/viewsets.py

"""
======================================================
PATH: sale_orders/api/viewsets.py
======================================================
SALE ORDER VIEWSET

Purpose:
- CRUD for custom lens orders (soft delete).
- Status advance (PATCH {id}/status/) with optimistic concurrency.
- Dispatch block update (PATCH {id}/dispatch/).
- Pricing: saved order, draft payload, and the quick cost quote.
- Dashboard counts (GET stats/).

Security:
- Requires IsAuthenticated + a capability per action (see ACTION_CAPABILITIES).
- Status changes additionally require the capability of the target status.

Envelope:
- success: {"success": true, "data": ...}
- validation: 400 {"success": false, "errors": [{"field", "message"}]}
- not found 404 / conflict 409 / upstream 503: {"success": false, "detail"}
======================================================
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_ORDERS_DELETE,
    CAP_ORDERS_DISPATCH,
    CAP_ORDERS_EDIT,
    CAP_ORDERS_PRODUCE,
    CAP_ORDERS_VIEW,
    CAP_PRICING_VIEW,
    HasAnyCapability,
    effective_capabilities_for,
)
from sale_orders.api.serializers import (
    CostQuoteInputSerializer,
    SaleOrderSerializer,
    StatusChangeSerializer,
)
from sale_orders.models import SaleOrder
from sale_orders.services.exceptions import (
    ConflictError,
    CreditLimitExceededError,
    MasterDataError,
    RecordNotFoundError,
    SaleOrderError,
    SaleOrderNotFoundError,
    SaleOrderValidationError,
    UpstreamLookupError,
)
from sale_orders.services.sale_order_service import (
    advance_status,
    calculate_cost,
    calculate_order_pricing,
    create_sale_order,
    delete_sale_order,
    get_sale_order,
    list_sale_orders,
    sale_order_statistics,
    update_dispatch_info,
    update_sale_order,
)

logger = logging.getLogger(__name__)

DOMAIN_ERRORS = (SaleOrderError, MasterDataError)

ACTION_CAPABILITIES = {
    "list": {CAP_ORDERS_VIEW},
    "retrieve": {CAP_ORDERS_VIEW},
    "stats": {CAP_ORDERS_VIEW},
    "create": {CAP_ORDERS_EDIT},
    "update": {CAP_ORDERS_EDIT},
    "partial_update": {CAP_ORDERS_EDIT},
    "destroy": {CAP_ORDERS_DELETE},
    "change_status": {CAP_ORDERS_EDIT, CAP_ORDERS_PRODUCE, CAP_ORDERS_DISPATCH},
    "update_dispatch": {CAP_ORDERS_EDIT, CAP_ORDERS_DISPATCH},
    "pricing": {CAP_PRICING_VIEW},
    "calculate_pricing": {CAP_PRICING_VIEW},
    "calculate_cost": {CAP_PRICING_VIEW},
}

# who may move an order INTO each status
TARGET_STATUS_CAPABILITIES = {
    SaleOrder.STATUS_CONFIRMED: {CAP_ORDERS_EDIT},
    SaleOrder.STATUS_IN_PRODUCTION: {CAP_ORDERS_PRODUCE},
    SaleOrder.STATUS_READY_FOR_DISPATCH: {CAP_ORDERS_PRODUCE},
    SaleOrder.STATUS_DELIVERED: {CAP_ORDERS_DISPATCH},
}


def error_response(exc: Exception) -> Response:
    """
    Map a domain error to the API envelope + HTTP status.
    """
    if isinstance(exc, SaleOrderValidationError):
        return Response(
            {"success": False, "errors": exc.as_field_errors()},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, (SaleOrderNotFoundError, RecordNotFoundError)):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (ConflictError, CreditLimitExceededError)):
        http_status = status.HTTP_409_CONFLICT
    elif isinstance(exc, UpstreamLookupError):
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        logger.error("Unmapped sale order error", exc_info=exc)
        http_status = status.HTTP_400_BAD_REQUEST

    body = {"success": False, "detail": str(exc)}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    return Response(body, status=http_status)


class SaleOrderViewSet(viewsets.GenericViewSet):
    serializer_class = SaleOrderSerializer
    permission_classes = [IsAuthenticated, HasAnyCapability]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        self.required_any_capabilities = ACTION_CAPABILITIES.get(self.action, {CAP_ORDERS_VIEW})
        return super().get_permissions()

    def get_queryset(self):
        return list_sale_orders(self.request.query_params)

    def _ok(self, data, http_status=status.HTTP_200_OK):
        return Response({"success": True, "data": data}, status=http_status)

    # ======================================================
    # CRUD
    # ======================================================

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str),
            OpenApiParameter("customerId", int),
            OpenApiParameter("dispatchStatus", str),
            OpenApiParameter("search", str),
            OpenApiParameter("startDate", str),
            OpenApiParameter("endDate", str),
        ],
        responses={200: SaleOrderSerializer(many=True)},
    )
    def list(self, request):
        try:
            qs = self.get_queryset()
        except DOMAIN_ERRORS as exc:
            return error_response(exc)

        page = self.paginate_queryset(qs)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            response = self.get_paginated_response(serializer.data)
            response.data = {"success": True, "data": response.data}
            return response

        return self._ok(self.get_serializer(qs, many=True).data)

    @extend_schema(responses={200: SaleOrderSerializer})
    def retrieve(self, request, pk=None):
        try:
            order = get_sale_order(pk)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(self.get_serializer(order).data)

    @extend_schema(request=dict, responses={201: SaleOrderSerializer})
    def create(self, request):
        try:
            order = create_sale_order(payload=request.data, user=request.user)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(self.get_serializer(order).data, status.HTTP_201_CREATED)

    @extend_schema(request=dict, responses={200: SaleOrderSerializer})
    def update(self, request, pk=None):
        try:
            order = update_sale_order(order_id=pk, payload=request.data, user=request.user)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(self.get_serializer(order).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        try:
            delete_sale_order(order_id=pk, user=request.user)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok({"id": int(pk), "deleted": True})

    # ======================================================
    # LIFECYCLE
    # ======================================================

    @extend_schema(request=StatusChangeSerializer, responses={200: SaleOrderSerializer})
    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        body = StatusChangeSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        target = body.validated_data["status"]

        caps = effective_capabilities_for(request, request.user)
        if not caps & TARGET_STATUS_CAPABILITIES.get(target, set()):
            return Response(
                {"success": False, "detail": f"You may not move orders to {target}"},
                status=status.HTTP_403_FORBIDDEN,
            )

        try:
            order = advance_status(
                order_id=pk,
                target_status=target,
                user=request.user,
                expected_current_status=body.validated_data.get("expectedCurrentStatus"),
            )
        except DOMAIN_ERRORS as exc:
            return error_response(exc)

        return self._ok(self.get_serializer(order).data)

    @extend_schema(request=dict, responses={200: SaleOrderSerializer})
    @action(detail=True, methods=["patch"], url_path="dispatch")
    def update_dispatch(self, request, pk=None):
        try:
            order = update_dispatch_info(order_id=pk, payload=request.data, user=request.user)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(self.get_serializer(order).data)

    # ======================================================
    # PRICING
    # ======================================================

    @extend_schema(responses={200: dict})
    @action(detail=True, methods=["get"], url_path="pricing")
    def pricing(self, request, pk=None):
        try:
            quote = calculate_order_pricing(order_id=pk)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(quote.as_dict())

    @extend_schema(request=dict, responses={200: dict})
    @action(detail=False, methods=["post"], url_path="calculate-pricing")
    def calculate_pricing(self, request):
        try:
            quote = calculate_order_pricing(payload=request.data)
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(quote.as_dict())

    @extend_schema(request=CostQuoteInputSerializer, responses={200: dict})
    @action(detail=False, methods=["post"], url_path="calculate-cost")
    def calculate_cost(self, request):
        body = CostQuoteInputSerializer(data=request.data)
        body.is_valid(raise_exception=True)

        try:
            quote = calculate_cost(
                customer_id=body.validated_data["customerId"],
                price_record_id=body.validated_data["priceRecordId"],
                fitting_id=body.validated_data["fittingId"],
                quantity=body.validated_data["quantity"],
            )
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(quote.as_dict())

    # ======================================================
    # STATS
    # ======================================================

    @extend_schema(
        parameters=[OpenApiParameter("startDate", str), OpenApiParameter("endDate", str)],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        try:
            data = sale_order_statistics(
                start_date=request.query_params.get("startDate"),
                end_date=request.query_params.get("endDate"),
            )
        except DOMAIN_ERRORS as exc:
            return error_response(exc)
        return self._ok(data)
