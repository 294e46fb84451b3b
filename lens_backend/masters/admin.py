# masters/admin.py

"""
MASTERS ADMIN

Master data maintenance (create / edit / deactivate) happens here;
the API only exposes read endpoints.
"""

from django.contrib import admin

from masters.models import (
    Customer,
    LensBrand,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensPrice,
    LensProduct,
    LensTinting,
    LensType,
    PriceMapping,
)


class MasterRecordAdmin(admin.ModelAdmin):
    list_display = ("name", "short_name", "is_active", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("name", "short_name")


for _model in (LensBrand, LensCategory, LensType, LensDia, LensCoating):
    admin.site.register(_model, MasterRecordAdmin)


@admin.register(LensFitting)
class LensFittingAdmin(MasterRecordAdmin):
    list_display = ("name", "short_name", "fitting_price", "is_active")


@admin.register(LensTinting)
class LensTintingAdmin(MasterRecordAdmin):
    list_display = ("name", "short_name", "tinting_price", "is_active")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "shop_name", "credit_limit", "outstanding_credit", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name", "shop_name", "phone")


@admin.register(LensProduct)
class LensProductAdmin(admin.ModelAdmin):
    list_display = ("product_code", "name", "brand", "category", "lens_type", "is_active")
    list_filter = ("is_active", "brand", "category")
    search_fields = ("product_code", "name")


@admin.register(LensPrice)
class LensPriceAdmin(admin.ModelAdmin):
    list_display = ("lens", "coating", "price", "is_active")
    list_filter = ("is_active", "coating")
    search_fields = ("lens__name", "lens__product_code")


@admin.register(PriceMapping)
class PriceMappingAdmin(admin.ModelAdmin):
    list_display = ("customer", "lens_price", "discount_rate", "discount_price")
    readonly_fields = ("discount_price",)
    search_fields = ("customer__name", "customer__code")
