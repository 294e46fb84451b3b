"""
PATH: sale_orders/migrations/0001_initial.py

MIGRATION: CREATE SaleOrder
- order info, lens configuration (master FKs), eye blocks
- dispatch block, computed pricing, audit fields
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def _eye_fields(side):
    return [
        (
            f"{side}_{name}",
            models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True),
        )
        for name in ("spherical", "cylindrical", "axis", "add")
    ] + [
        (f"{side}_{name}", models.CharField(blank=True, max_length=50))
        for name in ("dia", "base", "base_size", "bled")
    ]


def _master_fk(model):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.PROTECT,
        related_name="sale_orders",
        to=model,
    )


def _money():
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("masters", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SaleOrder",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "order_no",
                    models.CharField(
                        blank=True,
                        help_text="System-generated order number",
                        max_length=32,
                        unique=True,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_orders",
                        to="masters.customer",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("CONFIRMED", "Confirmed"),
                            ("IN_PRODUCTION", "In Production"),
                            ("READY_FOR_DISPATCH", "Ready for Dispatch"),
                            ("DELIVERED", "Delivered"),
                        ],
                        default="DRAFT",
                        max_length=32,
                    ),
                ),
                ("customer_ref_no", models.CharField(blank=True, max_length=100)),
                ("order_date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "order_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Normal Processing", "Normal Processing"),
                            ("Rush Processing", "Rush Processing"),
                            ("Premium Processing", "Premium Processing"),
                        ],
                        help_text="Processing tier",
                        max_length=100,
                    ),
                ),
                ("delivery_schedule", models.DateTimeField(blank=True, null=True)),
                ("remark", models.TextField(blank=True)),
                ("item_ref_no", models.CharField(blank=True, max_length=100)),
                ("urgent_order", models.BooleanField(default=False)),
                ("free_lens", models.BooleanField(default=False)),
                ("free_fitting", models.BooleanField(default=False)),
                ("lens", _master_fk("masters.lensproduct")),
                ("category", _master_fk("masters.lenscategory")),
                ("lens_type", _master_fk("masters.lenstype")),
                ("dia", _master_fk("masters.lensdia")),
                ("fitting", _master_fk("masters.lensfitting")),
                ("coating", _master_fk("masters.lenscoating")),
                ("tinting", _master_fk("masters.lenstinting")),
                ("right_eye", models.BooleanField(default=False)),
                ("left_eye", models.BooleanField(default=False)),
                *_eye_fields("right"),
                *_eye_fields("left"),
                (
                    "dispatch_status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Assigned", "Assigned"),
                            ("In Transit", "In Transit"),
                            ("Delivered", "Delivered"),
                        ],
                        default="Pending",
                        max_length=32,
                    ),
                ),
                (
                    "assigned_person",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_sale_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                ("dispatch_id", models.CharField(blank=True, max_length=100)),
                ("estimated_date", models.DateField(blank=True, null=True)),
                ("estimated_time", models.CharField(blank=True, max_length=20)),
                ("actual_date", models.DateField(blank=True, null=True)),
                ("actual_time", models.CharField(blank=True, max_length=20)),
                ("dispatch_notes", models.TextField(blank=True)),
                ("lens_price", _money()),
                ("fitting_price", _money()),
                ("tinting_price", _money()),
                (
                    "discount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Discount percentage (0-100)",
                        max_digits=5,
                    ),
                ),
                (
                    "additional_price",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text='Ordered ad-hoc charges: [{"name": ..., "value": ...}]',
                    ),
                ),
                ("is_deleted", models.BooleanField(default=False)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_sale_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="updated_sale_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="sale_orders_status_idx"),
                    models.Index(fields=["order_date"], name="sale_orders_order_date_idx"),
                    models.Index(fields=["order_no"], name="sale_orders_order_no_idx"),
                ],
            },
        ),
    ]
