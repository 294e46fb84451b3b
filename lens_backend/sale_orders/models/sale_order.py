# sale_orders/models/sale_order.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from masters.models import (
    Customer,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensProduct,
    LensTinting,
    LensType,
)

User = settings.AUTH_USER_MODEL


class SaleOrder(models.Model):
    """
    A customer's order for a custom pair (or single lens) with full
    optical and commercial specification.

    GUARANTEES:
    - order_no is system-generated (SO-<year>-<NNN>) and never reassigned
    - status only moves forward (see services/order_lifecycle.py)
    - DELIVERED orders are locked against edits and deletion
    - pricing fields hold the component figures quoted by the pricing calculator

    Field validation lives in services/order_validation.py so the same
    rules run for create, update and status transitions.
    """

    STATUS_DRAFT = "DRAFT"
    STATUS_CONFIRMED = "CONFIRMED"
    STATUS_IN_PRODUCTION = "IN_PRODUCTION"
    STATUS_READY_FOR_DISPATCH = "READY_FOR_DISPATCH"
    STATUS_DELIVERED = "DELIVERED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_IN_PRODUCTION, "In Production"),
        (STATUS_READY_FOR_DISPATCH, "Ready for Dispatch"),
        (STATUS_DELIVERED, "Delivered"),
    ]

    DISPATCH_PENDING = "Pending"
    DISPATCH_ASSIGNED = "Assigned"
    DISPATCH_IN_TRANSIT = "In Transit"
    DISPATCH_DELIVERED = "Delivered"

    DISPATCH_STATUS_CHOICES = [
        (DISPATCH_PENDING, "Pending"),
        (DISPATCH_ASSIGNED, "Assigned"),
        (DISPATCH_IN_TRANSIT, "In Transit"),
        (DISPATCH_DELIVERED, "Delivered"),
    ]

    ORDER_TYPE_CHOICES = [
        ("Normal Processing", "Normal Processing"),
        ("Rush Processing", "Rush Processing"),
        ("Premium Processing", "Premium Processing"),
    ]

    # ---------------- identity ----------------
    order_no = models.CharField(
        max_length=32,
        unique=True,
        blank=True,
        help_text="System-generated order number",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="sale_orders",
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
    )

    # ---------------- order info ----------------
    customer_ref_no = models.CharField(max_length=100, blank=True)
    order_date = models.DateField(default=timezone.localdate)
    order_type = models.CharField(
        max_length=100,
        blank=True,
        choices=ORDER_TYPE_CHOICES,
        help_text="Processing tier",
    )
    delivery_schedule = models.DateTimeField(null=True, blank=True)
    remark = models.TextField(blank=True)
    item_ref_no = models.CharField(max_length=100, blank=True)

    urgent_order = models.BooleanField(default=False)
    free_lens = models.BooleanField(default=False)
    free_fitting = models.BooleanField(default=False)

    # ---------------- lens configuration ----------------
    lens = models.ForeignKey(
        LensProduct, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )
    category = models.ForeignKey(
        LensCategory, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )
    lens_type = models.ForeignKey(
        LensType, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )
    dia = models.ForeignKey(
        LensDia, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )
    fitting = models.ForeignKey(
        LensFitting, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )
    coating = models.ForeignKey(
        LensCoating, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )
    tinting = models.ForeignKey(
        LensTinting, on_delete=models.PROTECT, null=True, blank=True, related_name="sale_orders"
    )

    # ---------------- eye selection ----------------
    right_eye = models.BooleanField(default=False)
    left_eye = models.BooleanField(default=False)

    # ---------------- right eye block ----------------
    right_spherical = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    right_cylindrical = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    right_axis = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    right_add = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    right_dia = models.CharField(max_length=50, blank=True)
    right_base = models.CharField(max_length=50, blank=True)
    right_base_size = models.CharField(max_length=50, blank=True)
    right_bled = models.CharField(max_length=50, blank=True)

    # ---------------- left eye block ----------------
    left_spherical = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    left_cylindrical = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    left_axis = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    left_add = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    left_dia = models.CharField(max_length=50, blank=True)
    left_base = models.CharField(max_length=50, blank=True)
    left_base_size = models.CharField(max_length=50, blank=True)
    left_bled = models.CharField(max_length=50, blank=True)

    # ---------------- dispatch block ----------------
    dispatch_status = models.CharField(
        max_length=32,
        choices=DISPATCH_STATUS_CHOICES,
        default=DISPATCH_PENDING,
    )
    assigned_person = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_sale_orders",
    )
    dispatch_id = models.CharField(max_length=100, blank=True)
    estimated_date = models.DateField(null=True, blank=True)
    estimated_time = models.CharField(max_length=20, blank=True)
    actual_date = models.DateField(null=True, blank=True)
    actual_time = models.CharField(max_length=20, blank=True)
    dispatch_notes = models.TextField(blank=True)

    # ---------------- pricing (computed) ----------------
    lens_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    fitting_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tinting_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Discount percentage (0-100)",
    )
    additional_price = models.JSONField(
        default=list,
        blank=True,
        help_text='Ordered ad-hoc charges: [{"name": ..., "value": ...}]',
    )

    # ---------------- audit ----------------
    is_deleted = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_sale_orders",
    )
    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="updated_sale_orders",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="sale_orders_status_idx"),
            models.Index(fields=["order_date"], name="sale_orders_order_date_idx"),
            models.Index(fields=["order_no"], name="sale_orders_order_no_idx"),
        ]

    @classmethod
    def next_order_no(cls, *, year: int | None = None) -> str:
        conf = getattr(settings, "SALE_ORDERS", {}) or {}
        year = year or timezone.localdate().year
        prefix = f"{conf.get('ORDER_NO_PREFIX', 'SO')}-{year}-"

        # latest by id, not by text: "SO-2025-1000" sorts before "SO-2025-999"
        last = (
            cls.objects.filter(order_no__startswith=prefix)
            .order_by("-id")
            .values_list("order_no", flat=True)
            .first()
        )

        if not last:
            return f"{prefix}001"

        try:
            last_number = int(last.rsplit("-", 1)[1])
        except (IndexError, ValueError):
            last_number = cls.objects.filter(order_no__startswith=prefix).count()

        return f"{prefix}{last_number + 1:03d}"

    @property
    def is_locked(self) -> bool:
        return self.status == self.STATUS_DELIVERED

    def save(self, *args, **kwargs):
        if not self.order_no:
            self.order_no = self.next_order_no()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_no} | {self.status}"
