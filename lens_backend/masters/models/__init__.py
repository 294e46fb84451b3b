"""
MASTERS MODELS PACKAGE EXPORTS

Read-side collaborators of the sale-order engine:
customers, lens attributes, lens products and their prices.
"""

from .customer import Customer
from .lens_attributes import (
    LensBrand,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensTinting,
    LensType,
)
from .lens_product import LensPrice, LensProduct, PriceMapping

__all__ = [
    "Customer",
    "LensBrand",
    "LensCategory",
    "LensType",
    "LensDia",
    "LensCoating",
    "LensTinting",
    "LensFitting",
    "LensProduct",
    "LensPrice",
    "PriceMapping",
]
