# masters/models/lens_product.py

from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import models

from .customer import Customer
from .lens_attributes import LensBrand, LensCategory, LensCoating, LensType


class LensProduct(models.Model):
    product_code = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, db_index=True)

    brand = models.ForeignKey(
        LensBrand,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="lenses",
    )
    category = models.ForeignKey(
        LensCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="lenses",
    )
    lens_type = models.ForeignKey(
        LensType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="lenses",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.product_code})"


class LensPrice(models.Model):
    """
    Price of a lens pair for one coating.

    Exactly one price row per (lens, coating). The sale-order flow
    looks this up on every calculation; a missing row blocks pricing.
    """

    lens = models.ForeignKey(
        LensProduct,
        on_delete=models.CASCADE,
        related_name="prices",
    )
    coating = models.ForeignKey(
        LensCoating,
        on_delete=models.PROTECT,
        related_name="prices",
    )

    price = models.DecimalField(max_digits=12, decimal_places=2)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["lens__name", "coating__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["lens", "coating"],
                name="uniq_lens_price_per_coating",
            )
        ]

    def clean(self):
        if self.price is None or Decimal(self.price) <= 0:
            raise ValidationError("price must be greater than zero")

    def __str__(self):
        return f"{self.lens_id}/{self.coating_id} @ {self.price}"


class PriceMapping(models.Model):
    """
    Customer-specific discount on a lens price.

    discount_price is derived on save: price - price * rate / 100
    """

    customer = models.ForeignKey(
        Customer,
        on_delete=models.CASCADE,
        related_name="price_mappings",
    )
    lens_price = models.ForeignKey(
        LensPrice,
        on_delete=models.CASCADE,
        related_name="customer_mappings",
    )

    discount_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    discount_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "lens_price"],
                name="uniq_price_mapping_per_customer",
            )
        ]

    def clean(self):
        rate = Decimal(self.discount_rate or 0)
        if rate < 0 or rate > 100:
            raise ValidationError("discount_rate must be between 0 and 100")

    def save(self, *args, **kwargs):
        base = Decimal(self.lens_price.price)
        rate = Decimal(self.discount_rate or 0)
        self.discount_price = (base - base * rate / Decimal("100")).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.customer_id} -> {self.lens_price_id} ({self.discount_rate}%)"
