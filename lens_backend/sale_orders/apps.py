# sale_orders/apps.py

"""
SALE ORDERS APP CONFIG

Custom lens orders:
- prescription capture (left / right eye blocks)
- pricing (lens by coating, fitting, tinting, waivers, discount, extra charges)
- status lifecycle DRAFT -> ... -> DELIVERED
"""

from django.apps import AppConfig


class SaleOrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sale_orders"
    verbose_name = "Sale Orders"
