# users/admin.py

"""
Staff accounts in Django Admin.

Role is the only field the sale-order API looks at
(see permissions/roles.py); groups stay available for admin-site access.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from users.models import User


@admin.register(User)
class StaffUserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "first_name", "last_name", "role", "is_active")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "username", "first_name", "last_name")
    readonly_fields = ("last_login", "created_at")

    fieldsets = (
        (None, {"fields": ("email", "username", "password")}),
        ("Staff", {"fields": ("first_name", "last_name", "role")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        ("History", {"fields": ("last_login", "created_at")}),
    )

    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "role", "password1", "password2")}),
    )
