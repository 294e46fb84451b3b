# sale_orders/api/urls.py

"""
SALE ORDERS API URLS

Mounted at /api/ by backend/urls.py:

    GET/POST          /api/sale-orders/
    GET/PUT/PATCH/DEL /api/sale-orders/<id>/
    PATCH             /api/sale-orders/<id>/status/
    PATCH             /api/sale-orders/<id>/dispatch/
    GET               /api/sale-orders/<id>/pricing/
    POST              /api/sale-orders/calculate-pricing/
    POST              /api/sale-orders/calculate-cost/
    GET               /api/sale-orders/stats/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sale_orders.api.viewsets import SaleOrderViewSet

router = DefaultRouter()
router.register(r"sale-orders", SaleOrderViewSet, basename="sale-orders")

urlpatterns = [
    path("", include(router.urls)),
]
