"""
Handover Order Store — ORM Models
===================================
Row shapes for the StoreProtocol records. Nested value objects
(order lines, delivery details, proof of delivery, resolution) are
stored as JSON; dispute messages get their own append-only table.

This file contains NO business logic.
"""

from django.db import models

from core.primitives.dispute import DisputeReason, DisputeStatus
from core.primitives.notification import NotificationType
from core.primitives.order import OrderStatus


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.name.replace("_", " ").title()) for member in enum_cls]


# ══════════════════════════════════════════════════════════════
# ORDERS
# ══════════════════════════════════════════════════════════════

class OrderRecord(models.Model):
    order_id = models.CharField(max_length=64, primary_key=True)
    order_number = models.CharField(max_length=64)
    contractor_id = models.CharField(max_length=255)
    supplier_id = models.CharField(max_length=255)
    driver_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Denormalised from delivery for party lookups.",
    )
    lines = models.JSONField(default=list)
    total = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=32, choices=_choices(OrderStatus))
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()
    delivery = models.JSONField(null=True, blank=True)
    proof_of_delivery = models.JSONField(null=True, blank=True)
    delivery_address = models.TextField(blank=True, default="")
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "handover_orders"
        ordering = ["-created_at", "order_id"]
        indexes = [
            models.Index(fields=["contractor_id"], name="idx_order_contractor"),
            models.Index(fields=["supplier_id"], name="idx_order_supplier"),
            models.Index(fields=["driver_id"], name="idx_order_driver"),
            models.Index(fields=["status"], name="idx_order_status"),
        ]

    def __str__(self):
        return f"Order {self.order_number} [{self.status}]"


# ══════════════════════════════════════════════════════════════
# DISPUTES
# ══════════════════════════════════════════════════════════════

class DisputeRecord(models.Model):
    dispute_id = models.CharField(max_length=64, primary_key=True)
    order_id = models.CharField(max_length=64)
    order_number = models.CharField(max_length=64)
    contractor_id = models.CharField(max_length=255)
    supplier_id = models.CharField(max_length=255)
    raised_by = models.CharField(max_length=255)
    reason = models.CharField(max_length=32, choices=_choices(DisputeReason))
    status = models.CharField(max_length=32, choices=_choices(DisputeStatus))
    created_at = models.DateTimeField()
    order_status_at_opening = models.CharField(
        max_length=32, choices=_choices(OrderStatus),
    )
    participant_ids = models.JSONField(default=list)
    resolution = models.JSONField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "handover_disputes"
        ordering = ["-created_at", "dispute_id"]
        indexes = [
            models.Index(fields=["order_id", "created_at"], name="idx_dispute_order"),
            models.Index(fields=["contractor_id"], name="idx_dispute_contractor"),
            models.Index(fields=["supplier_id"], name="idx_dispute_supplier"),
        ]

    def __str__(self):
        return f"Dispute {self.dispute_id} on {self.order_number} [{self.status}]"


class DisputeMessageRecord(models.Model):
    """Append-only. Rows are inserted, never updated or deleted."""

    message_id = models.CharField(max_length=64, primary_key=True)
    dispute = models.ForeignKey(
        DisputeRecord,
        on_delete=models.PROTECT,
        related_name="messages",
    )
    sequence = models.PositiveIntegerField()
    author_id = models.CharField(max_length=255)
    author_name = models.CharField(max_length=255, blank=True, default="")
    text = models.TextField()
    sent_at = models.DateTimeField()

    class Meta:
        db_table = "handover_dispute_messages"
        ordering = ["dispute_id", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=("dispute", "sequence"),
                name="uq_dispute_message_sequence",
            ),
        ]


# ══════════════════════════════════════════════════════════════
# REVIEWS
# ══════════════════════════════════════════════════════════════

class ReviewRecord(models.Model):
    review_id = models.CharField(max_length=64, primary_key=True)
    order_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="At most one review per order.",
    )
    contractor_id = models.CharField(max_length=255)
    supplier_id = models.CharField(max_length=255)
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField(blank=True, default="")
    created_at = models.DateTimeField()

    class Meta:
        db_table = "handover_reviews"
        ordering = ["-created_at", "review_id"]
        indexes = [
            models.Index(fields=["supplier_id"], name="idx_review_supplier"),
        ]


# ══════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ══════════════════════════════════════════════════════════════

class NotificationRecord(models.Model):
    notification_id = models.CharField(max_length=64, primary_key=True)
    recipient_id = models.CharField(max_length=255)
    notification_type = models.CharField(
        max_length=32, choices=_choices(NotificationType),
    )
    message = models.TextField()
    created_at = models.DateTimeField()
    is_read = models.BooleanField(default=False)
    source_event_id = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        db_table = "handover_notifications"
        ordering = ["-created_at", "notification_id"]
        indexes = [
            models.Index(
                fields=["recipient_id", "is_read"],
                name="idx_notif_recipient_read",
            ),
        ]
