# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_SALES = "sales"
ROLE_PRODUCTION = "production"
ROLE_DISPATCH = "dispatch"


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ORDERS_VIEW = "orders.view"
CAP_ORDERS_EDIT = "orders.edit"          # create / update order form
CAP_ORDERS_DELETE = "orders.delete"
CAP_ORDERS_PRODUCE = "orders.produce"    # Start Production / Ready for Dispatch
CAP_ORDERS_DISPATCH = "orders.dispatch"  # dispatch block + Mark as Delivered

CAP_PRICING_VIEW = "pricing.view"        # price lookup / cost calculation
CAP_CREDIT_VIEW = "credit.view"          # customer outstanding vs limit

CAP_MASTERS_VIEW = "masters.view"

ALL_CAPABILITIES = {
    CAP_ORDERS_VIEW,
    CAP_ORDERS_EDIT,
    CAP_ORDERS_DELETE,
    CAP_ORDERS_PRODUCE,
    CAP_ORDERS_DISPATCH,
    CAP_PRICING_VIEW,
    CAP_CREDIT_VIEW,
    CAP_MASTERS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_EDIT,
        CAP_ORDERS_DELETE,
        CAP_ORDERS_PRODUCE,
        CAP_ORDERS_DISPATCH,
        CAP_PRICING_VIEW,
        CAP_CREDIT_VIEW,
        CAP_MASTERS_VIEW,
    },
    ROLE_SALES: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_EDIT,
        CAP_PRICING_VIEW,
        CAP_CREDIT_VIEW,
        CAP_MASTERS_VIEW,
    },
    ROLE_PRODUCTION: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_PRODUCE,
        CAP_MASTERS_VIEW,
    },
    ROLE_DISPATCH: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_DISPATCH,
        CAP_MASTERS_VIEW,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(request, user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)

    role = get_user_role(user)
    return set(ROLE_CAPABILITIES.get(role, set()))


# =========================================================
# Capability Permission
# =========================================================
class HasAnyCapability(BasePermission):
    """
    Require ANY capability from the view's set.

    Usage:
        permission_classes = [IsAuthenticated, HasAnyCapability]
        view.required_any_capabilities = {CAP_ORDERS_PRODUCE, CAP_ORDERS_DISPATCH}

    A view that sets nothing is closed.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(request, user)
        return bool(caps & set(required))
