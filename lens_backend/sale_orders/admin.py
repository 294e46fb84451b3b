# sale_orders/admin.py

from django.contrib import admin

from sale_orders.models import SaleOrder


# ======================================================
# SALE ORDER ADMIN
# ======================================================


@admin.register(SaleOrder)
class SaleOrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_no",
        "customer",
        "status",
        "dispatch_status",
        "order_date",
        "urgent_order",
        "lens_price",
        "is_deleted",
        "created_at",
    )
    # status moves only through the API lifecycle endpoint
    readonly_fields = (
        "order_no",
        "status",
        "created_by",
        "updated_by",
        "created_at",
        "updated_at",
    )
    search_fields = ("order_no", "customer_ref_no", "item_ref_no", "customer__name")
    list_filter = ("status", "dispatch_status", "urgent_order", "is_deleted", "order_date")
    raw_id_fields = ("customer", "lens", "assigned_person")
