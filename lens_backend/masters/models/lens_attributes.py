# masters/models/lens_attributes.py

"""
LENS ATTRIBUTE MASTERS

Small lookup tables that populate the sale-order form dropdowns:
brand, category, type, dia, coating, tinting, fitting.

Fitting and tinting carry their own service price, which the
sale-order pricing flow reads on every calculation (never cached).
"""

from decimal import Decimal

from django.db import models


class MasterRecord(models.Model):
    name = models.CharField(max_length=255, db_index=True)
    short_name = models.CharField(max_length=64, blank=True)
    description = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name


class LensBrand(MasterRecord):
    class Meta(MasterRecord.Meta):
        verbose_name = "lens brand"


class LensCategory(MasterRecord):
    class Meta(MasterRecord.Meta):
        verbose_name = "lens category"
        verbose_name_plural = "lens categories"


class LensType(MasterRecord):
    class Meta(MasterRecord.Meta):
        verbose_name = "lens type"


class LensDia(MasterRecord):
    class Meta(MasterRecord.Meta):
        verbose_name = "lens dia"


class LensCoating(MasterRecord):
    class Meta(MasterRecord.Meta):
        verbose_name = "lens coating"


class LensTinting(MasterRecord):
    tinting_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    class Meta(MasterRecord.Meta):
        verbose_name = "lens tinting"


class LensFitting(MasterRecord):
    fitting_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    class Meta(MasterRecord.Meta):
        verbose_name = "lens fitting"
