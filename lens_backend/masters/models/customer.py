# masters/models/customer.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Customer(models.Model):
    """
    Customer master (optical shops buying from us).

    CREDIT:
    - credit_limit: configured ceiling for unpaid balance (0 = no limit configured)
    - outstanding_credit: current unpaid balance, maintained by billing
    The sale-order credit gate only reads these two figures.
    """

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255, db_index=True)
    shop_name = models.CharField(max_length=255, blank=True)

    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)

    credit_limit = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    outstanding_credit = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["code"], name="masters_cus_code_6f1a2b_idx"),
            models.Index(fields=["name"], name="masters_cus_name_3c9d4e_idx"),
        ]

    def clean(self):
        if self.credit_limit is not None and Decimal(self.credit_limit) < 0:
            raise ValidationError("credit_limit cannot be negative")

    def __str__(self):
        return f"{self.name} ({self.code})"
