"""
PATH: masters/migrations/0001_initial.py

MIGRATION: CREATE lens master data
- Customer (credit figures)
- Lens attribute lookups (brand, category, type, dia, coating, tinting, fitting)
- LensProduct, LensPrice (per coating), PriceMapping (customer discount)
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


def _master_fields(*extra):
    return [
        (
            "id",
            models.BigAutoField(
                auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
            ),
        ),
        ("name", models.CharField(db_index=True, max_length=255)),
        ("short_name", models.CharField(blank=True, max_length=64)),
        ("description", models.TextField(blank=True)),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        *extra,
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
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
                ("code", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("shop_name", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("address", models.TextField(blank=True)),
                (
                    "credit_limit",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
                (
                    "outstanding_credit",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["code"], name="masters_cus_code_6f1a2b_idx"),
                    models.Index(fields=["name"], name="masters_cus_name_3c9d4e_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LensBrand",
            fields=_master_fields(),
            options={"ordering": ["name"], "verbose_name": "lens brand"},
        ),
        migrations.CreateModel(
            name="LensCategory",
            fields=_master_fields(),
            options={
                "ordering": ["name"],
                "verbose_name": "lens category",
                "verbose_name_plural": "lens categories",
            },
        ),
        migrations.CreateModel(
            name="LensCoating",
            fields=_master_fields(),
            options={"ordering": ["name"], "verbose_name": "lens coating"},
        ),
        migrations.CreateModel(
            name="LensDia",
            fields=_master_fields(),
            options={"ordering": ["name"], "verbose_name": "lens dia"},
        ),
        migrations.CreateModel(
            name="LensFitting",
            fields=_master_fields(
                (
                    "fitting_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
            ),
            options={"ordering": ["name"], "verbose_name": "lens fitting"},
        ),
        migrations.CreateModel(
            name="LensTinting",
            fields=_master_fields(
                (
                    "tinting_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
            ),
            options={"ordering": ["name"], "verbose_name": "lens tinting"},
        ),
        migrations.CreateModel(
            name="LensType",
            fields=_master_fields(),
            options={"ordering": ["name"], "verbose_name": "lens type"},
        ),
        migrations.CreateModel(
            name="LensProduct",
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
                ("product_code", models.CharField(max_length=64, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "brand",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="lenses",
                        to="masters.lensbrand",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="lenses",
                        to="masters.lenscategory",
                    ),
                ),
                (
                    "lens_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="lenses",
                        to="masters.lenstype",
                    ),
                ),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="LensPrice",
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
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "coating",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="prices",
                        to="masters.lenscoating",
                    ),
                ),
                (
                    "lens",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="prices",
                        to="masters.lensproduct",
                    ),
                ),
            ],
            options={
                "ordering": ["lens__name", "coating__name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("lens", "coating"),
                        name="uniq_lens_price_per_coating",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PriceMapping",
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
                    "discount_rate",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=5
                    ),
                ),
                (
                    "discount_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="price_mappings",
                        to="masters.customer",
                    ),
                ),
                (
                    "lens_price",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="customer_mappings",
                        to="masters.lensprice",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("customer", "lens_price"),
                        name="uniq_price_mapping_per_customer",
                    )
                ],
            },
        ),
    ]
