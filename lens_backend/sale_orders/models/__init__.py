"""
SALE ORDERS MODELS PACKAGE EXPORTS
"""

from .sale_order import SaleOrder

__all__ = [
    "SaleOrder",
]
