# masters/views.py

"""
MASTER DATA API (READ-ONLY)

Purpose:
- Dropdown population for the sale-order form.
- (lens, coating) price lookup.
- Customer credit standing.

Write-side master maintenance lives in Django admin.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from masters.models import (
    Customer,
    LensBrand,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensPrice,
    LensProduct,
    LensTinting,
    LensType,
)
from masters.serializers import (
    CustomerSerializer,
    LensBrandSerializer,
    LensCategorySerializer,
    LensCoatingSerializer,
    LensDiaSerializer,
    LensFittingSerializer,
    LensPriceLookupQuerySerializer,
    LensPriceSerializer,
    LensProductSerializer,
    LensTintingSerializer,
    LensTypeSerializer,
)
from masters.services.customer_standing import get_customer_standing
from masters.services.exceptions import (
    PriceNotConfiguredError,
    RecordNotFoundError,
    UpstreamLookupError,
)
from masters.services.price_lookup import lookup_lens_coating_price
from permissions.roles import (
    CAP_CREDIT_VIEW,
    CAP_MASTERS_VIEW,
    CAP_PRICING_VIEW,
    HasAnyCapability,
)


class MasterDropdownViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Active rows only, unpaginated (dropdowns need the full list).
    """

    pagination_class = None
    required_any_capabilities = {CAP_MASTERS_VIEW}
    permission_classes = [IsAuthenticated, HasAnyCapability]

    model = None

    def get_queryset(self):
        return self.model.objects.filter(is_active=True).order_by("name")


class LensBrandViewSet(MasterDropdownViewSet):
    model = LensBrand
    serializer_class = LensBrandSerializer


class LensCategoryViewSet(MasterDropdownViewSet):
    model = LensCategory
    serializer_class = LensCategorySerializer


class LensTypeViewSet(MasterDropdownViewSet):
    model = LensType
    serializer_class = LensTypeSerializer


class LensDiaViewSet(MasterDropdownViewSet):
    model = LensDia
    serializer_class = LensDiaSerializer


class LensCoatingViewSet(MasterDropdownViewSet):
    model = LensCoating
    serializer_class = LensCoatingSerializer


class LensFittingViewSet(MasterDropdownViewSet):
    model = LensFitting
    serializer_class = LensFittingSerializer


class LensTintingViewSet(MasterDropdownViewSet):
    model = LensTinting
    serializer_class = LensTintingSerializer


class LensProductViewSet(MasterDropdownViewSet):
    model = LensProduct
    serializer_class = LensProductSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        category_id = self.request.query_params.get("categoryId")
        if category_id:
            qs = qs.filter(category_id=category_id)
        return qs


class CustomerViewSet(MasterDropdownViewSet):
    model = Customer
    serializer_class = CustomerSerializer

    def get_permissions(self):
        if self.action == "standing":
            self.required_any_capabilities = {CAP_CREDIT_VIEW}
        return super().get_permissions()

    @extend_schema(responses={200: dict})
    @action(detail=True, methods=["get"], url_path="standing")
    def standing(self, request, pk=None):
        try:
            standing = get_customer_standing(pk)
        except RecordNotFoundError as exc:
            return Response(
                {"success": False, "detail": str(exc)},
                status=status.HTTP_404_NOT_FOUND,
            )
        except UpstreamLookupError as exc:
            return Response(
                {"success": False, "detail": str(exc)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response({"success": True, "data": standing.as_dict()})


class LensPriceViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = LensPrice.objects.filter(is_active=True).select_related("lens", "coating")
    serializer_class = LensPriceSerializer
    required_any_capabilities = {CAP_PRICING_VIEW}
    permission_classes = [IsAuthenticated, HasAnyCapability]

    @extend_schema(
        parameters=[
            OpenApiParameter("lensId", int, required=True),
            OpenApiParameter("coatingId", int, required=True),
        ],
        responses={200: LensPriceSerializer},
    )
    @action(detail=False, methods=["get"], url_path="lookup")
    def lookup(self, request):
        query = LensPriceLookupQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            price = lookup_lens_coating_price(
                lens_id=query.validated_data["lensId"],
                coating_id=query.validated_data["coatingId"],
            )
        except PriceNotConfiguredError as exc:
            return Response(
                {"success": False, "detail": str(exc)},
                status=status.HTTP_404_NOT_FOUND,
            )
        except UpstreamLookupError as exc:
            return Response(
                {"success": False, "detail": str(exc)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response({"success": True, "data": LensPriceSerializer(price).data})
