"""
SALE ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions
for SaleOrder entities.

    DRAFT -> CONFIRMED -> IN_PRODUCTION -> READY_FOR_DISPATCH -> DELIVERED
    DRAFT -> IN_PRODUCTION  (confirmation may be skipped)

DESIGN PRINCIPLES:
- No database writes
- Forward-only, no skipping past production
- DELIVERED is terminal
- Single source of truth
"""

from sale_orders.models import SaleOrder
from sale_orders.services.exceptions import InvalidStatusTransitionError

# ============================================================
# STATE DEFINITIONS
# ============================================================

STATUSES = [value for value, _label in SaleOrder.STATUS_CHOICES]

TERMINAL_STATES = {
    SaleOrder.STATUS_DELIVERED,
}

ALLOWED_TRANSITIONS = {
    SaleOrder.STATUS_DRAFT: {
        SaleOrder.STATUS_CONFIRMED,
        SaleOrder.STATUS_IN_PRODUCTION,
    },
    SaleOrder.STATUS_CONFIRMED: {
        SaleOrder.STATUS_IN_PRODUCTION,
    },
    SaleOrder.STATUS_IN_PRODUCTION: {
        SaleOrder.STATUS_READY_FOR_DISPATCH,
    },
    SaleOrder.STATUS_READY_FOR_DISPATCH: {
        SaleOrder.STATUS_DELIVERED,
    },
}

# UI labels for the single-step "next action" buttons
ACTION_LABELS = {
    SaleOrder.STATUS_CONFIRMED: "Confirm Order",
    SaleOrder.STATUS_IN_PRODUCTION: "Start Production",
    SaleOrder.STATUS_READY_FOR_DISPATCH: "Ready for Dispatch",
    SaleOrder.STATUS_DELIVERED: "Mark as Delivered",
}


# ============================================================
# DOMAIN RULES
# ============================================================


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: SaleOrder, target_status: str):
    if target_status not in STATUSES:
        raise InvalidStatusTransitionError(
            f"Unknown status '{target_status}'. Must be one of: {', '.join(STATUSES)}"
        )

    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidStatusTransitionError(
            f"Sale order {order.order_no or order.pk} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )


def next_actions(status: str) -> list[dict]:
    """
    Transitions offered from `status`, in lifecycle order.
    """
    targets = ALLOWED_TRANSITIONS.get(status, set())
    return [
        {"status": target, "label": ACTION_LABELS[target]}
        for target in STATUSES
        if target in targets
    ]
