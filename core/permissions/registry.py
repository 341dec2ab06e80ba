"""
Handover Permissions — Operation/Role Policy Table
==================================================
The single authorization table, keyed by (operation, role).

The value is the party scope the actor must satisfy against the
target record. A missing key means the role may never perform the
operation.
"""

from __future__ import annotations

from core.context.actor_context import (
    ROLE_ADMIN,
    ROLE_CONTRACTOR,
    ROLE_DRIVER,
    ROLE_SUPPLIER,
    ROLE_SYSTEM,
)


# ══════════════════════════════════════════════════════════════
# PARTY SCOPES
# ══════════════════════════════════════════════════════════════

SCOPE_ANY = "ANY"                       # no party relation required
SCOPE_CONTRACTOR = "CONTRACTOR"         # actor is the order's contractor
SCOPE_SUPPLIER = "SUPPLIER"             # actor is the order's supplier
SCOPE_DRIVER = "DRIVER"                 # actor is the assigned driver
SCOPE_PARTICIPANT = "PARTICIPANT"       # actor is in the dispute participant set
SCOPE_RECIPIENT = "RECIPIENT"           # actor owns the notification

VALID_SCOPES = frozenset({
    SCOPE_ANY,
    SCOPE_CONTRACTOR,
    SCOPE_SUPPLIER,
    SCOPE_DRIVER,
    SCOPE_PARTICIPANT,
    SCOPE_RECIPIENT,
})


# ══════════════════════════════════════════════════════════════
# POLICY TABLE
# ══════════════════════════════════════════════════════════════

OPERATION_ROLE_POLICY = {
    # ── Order lifecycle ───────────────────────────────────────
    ("orders.order.create", ROLE_SYSTEM): SCOPE_ANY,
    ("orders.order.create", ROLE_ADMIN): SCOPE_ANY,
    ("orders.order.create", ROLE_CONTRACTOR): SCOPE_CONTRACTOR,
    ("orders.order.advance", ROLE_SUPPLIER): SCOPE_SUPPLIER,
    ("orders.order.advance", ROLE_ADMIN): SCOPE_ANY,
    ("orders.order.cancel", ROLE_CONTRACTOR): SCOPE_CONTRACTOR,
    ("orders.order.cancel", ROLE_SUPPLIER): SCOPE_SUPPLIER,
    ("orders.order.cancel", ROLE_ADMIN): SCOPE_ANY,
    ("orders.delivery.complete", ROLE_DRIVER): SCOPE_DRIVER,
    ("orders.delivery.complete", ROLE_SUPPLIER): SCOPE_SUPPLIER,
    ("orders.delivery.complete", ROLE_ADMIN): SCOPE_ANY,
    ("orders.dispute.settle", ROLE_ADMIN): SCOPE_ANY,
    # ── Delivery ──────────────────────────────────────────────
    ("delivery.driver.assign", ROLE_SUPPLIER): SCOPE_SUPPLIER,
    ("delivery.driver.assign", ROLE_ADMIN): SCOPE_ANY,
    ("delivery.assistant.ask", ROLE_CONTRACTOR): SCOPE_CONTRACTOR,
    ("delivery.assistant.ask", ROLE_SUPPLIER): SCOPE_SUPPLIER,
    ("delivery.assistant.ask", ROLE_DRIVER): SCOPE_DRIVER,
    ("delivery.assistant.ask", ROLE_ADMIN): SCOPE_ANY,
    # ── Disputes ──────────────────────────────────────────────
    ("disputes.dispute.open", ROLE_CONTRACTOR): SCOPE_CONTRACTOR,
    ("disputes.dispute.open", ROLE_SUPPLIER): SCOPE_SUPPLIER,
    ("disputes.message.add", ROLE_CONTRACTOR): SCOPE_PARTICIPANT,
    ("disputes.message.add", ROLE_SUPPLIER): SCOPE_PARTICIPANT,
    ("disputes.message.add", ROLE_ADMIN): SCOPE_ANY,
    ("disputes.suggestion.request", ROLE_CONTRACTOR): SCOPE_PARTICIPANT,
    ("disputes.suggestion.request", ROLE_SUPPLIER): SCOPE_PARTICIPANT,
    ("disputes.suggestion.request", ROLE_ADMIN): SCOPE_ANY,
    ("disputes.suggestion.accept", ROLE_CONTRACTOR): SCOPE_PARTICIPANT,
    ("disputes.suggestion.accept", ROLE_SUPPLIER): SCOPE_PARTICIPANT,
    ("disputes.suggestion.accept", ROLE_ADMIN): SCOPE_ANY,
    ("disputes.dispute.escalate", ROLE_ADMIN): SCOPE_ANY,
    ("disputes.dispute.resolve", ROLE_ADMIN): SCOPE_ANY,
    # ── Reviews ───────────────────────────────────────────────
    ("reviews.review.submit", ROLE_CONTRACTOR): SCOPE_CONTRACTOR,
    # ── Notifications ─────────────────────────────────────────
    ("notifications.notification.mark_read", ROLE_CONTRACTOR): SCOPE_RECIPIENT,
    ("notifications.notification.mark_read", ROLE_SUPPLIER): SCOPE_RECIPIENT,
    ("notifications.notification.mark_read", ROLE_DRIVER): SCOPE_RECIPIENT,
    ("notifications.notification.mark_read", ROLE_ADMIN): SCOPE_RECIPIENT,
}


def resolve_required_scope(operation: str, role: str) -> str | None:
    """Resolve the party scope a role needs for an operation."""
    return OPERATION_ROLE_POLICY.get((operation, role))


def roles_allowed_for(operation: str) -> frozenset[str]:
    """All roles that appear in the table for an operation."""
    return frozenset(
        role for (op, role) in OPERATION_ROLE_POLICY if op == operation
    )
