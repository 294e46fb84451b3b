# masters/urls.py

"""
MASTERS URLS

Mounted at /api/masters/:
    customers/, customers/<id>/standing/
    lens-products/, categories/, types/, dias/, coatings/, tintings/, fittings/, brands/
    lens-prices/, lens-prices/lookup/?lensId=&coatingId=
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from masters.views import (
    CustomerViewSet,
    LensBrandViewSet,
    LensCategoryViewSet,
    LensCoatingViewSet,
    LensDiaViewSet,
    LensFittingViewSet,
    LensPriceViewSet,
    LensProductViewSet,
    LensTintingViewSet,
    LensTypeViewSet,
)

router = DefaultRouter()

router.register(r"customers", CustomerViewSet, basename="customers")
router.register(r"lens-products", LensProductViewSet, basename="lens-products")
router.register(r"categories", LensCategoryViewSet, basename="lens-categories")
router.register(r"types", LensTypeViewSet, basename="lens-types")
router.register(r"dias", LensDiaViewSet, basename="lens-dias")
router.register(r"coatings", LensCoatingViewSet, basename="lens-coatings")
router.register(r"tintings", LensTintingViewSet, basename="lens-tintings")
router.register(r"fittings", LensFittingViewSet, basename="lens-fittings")
router.register(r"brands", LensBrandViewSet, basename="lens-brands")
router.register(r"lens-prices", LensPriceViewSet, basename="lens-prices")

urlpatterns = [
    path("", include(router.urls)),
]
