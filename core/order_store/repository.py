"""
Handover Order Store — Django Repository
==========================================
StoreProtocol backed by the Django ORM.

Guarded updates lock the row with select_for_update() inside
transaction.atomic(), compare the version column, apply the mutation
and bump the version. A mismatch raises StaleWriteError before
anything is written.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q

from core.order_store.models import (
    DisputeMessageRecord,
    DisputeRecord,
    NotificationRecord,
    OrderRecord,
    ReviewRecord,
)
from core.primitives.dispute import (
    Dispute,
    DisputeMessage,
    DisputeReason,
    DisputeResolution,
    DisputeStatus,
    ResolutionOutcome,
)
from core.primitives.notification import Notification, NotificationType
from core.primitives.order import (
    DeliveryDetails,
    Order,
    OrderLine,
    OrderStatus,
    ProofOfDelivery,
)
from core.primitives.review import Review
from core.repository.errors import (
    DuplicateRecordError,
    RecordNotFound,
    RepositoryError,
    StaleWriteError,
)
from core.repository.protocol import DisputeMutation, OrderMutation


# ══════════════════════════════════════════════════════════════
# ROW ↔ RECORD MAPPING
# ══════════════════════════════════════════════════════════════

def _order_from_row(row: OrderRecord) -> Order:
    return Order(
        order_id=row.order_id,
        order_number=row.order_number,
        contractor_id=row.contractor_id,
        supplier_id=row.supplier_id,
        lines=tuple(OrderLine.from_dict(line) for line in row.lines),
        total=Decimal(row.total),
        status=OrderStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        delivery=(
            DeliveryDetails.from_dict(row.delivery) if row.delivery else None
        ),
        proof_of_delivery=(
            ProofOfDelivery.from_dict(row.proof_of_delivery)
            if row.proof_of_delivery else None
        ),
        delivery_address=row.delivery_address,
        version=row.version,
    )


def _order_fields(order: Order) -> dict:
    return {
        "order_number": order.order_number,
        "contractor_id": order.contractor_id,
        "supplier_id": order.supplier_id,
        "driver_id": order.driver_id,
        "lines": [line.to_dict() for line in order.lines],
        "total": order.total,
        "status": order.status.value,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "delivery": order.delivery.to_dict() if order.delivery else None,
        "proof_of_delivery": (
            order.proof_of_delivery.to_dict()
            if order.proof_of_delivery else None
        ),
        "delivery_address": order.delivery_address,
    }


def _resolution_from_json(data: Optional[dict]) -> Optional[DisputeResolution]:
    if not data:
        return None
    return DisputeResolution(
        outcome=ResolutionOutcome(data["outcome"]),
        resolved_by=data["resolved_by"],
        resolved_at=datetime.fromisoformat(data["resolved_at"]),
        note=data.get("note", ""),
    )


def _dispute_from_row(row: DisputeRecord) -> Dispute:
    messages = tuple(
        DisputeMessage(
            message_id=m.message_id,
            author_id=m.author_id,
            author_name=m.author_name,
            text=m.text,
            sent_at=m.sent_at,
        )
        for m in row.messages.order_by("sequence")
    )
    return Dispute(
        dispute_id=row.dispute_id,
        order_id=row.order_id,
        order_number=row.order_number,
        contractor_id=row.contractor_id,
        supplier_id=row.supplier_id,
        raised_by=row.raised_by,
        reason=DisputeReason(row.reason),
        status=DisputeStatus(row.status),
        created_at=row.created_at,
        order_status_at_opening=OrderStatus(row.order_status_at_opening),
        messages=messages,
        participant_ids=frozenset(row.participant_ids),
        resolution=_resolution_from_json(row.resolution),
        version=row.version,
    )


def _insert_messages(row: DisputeRecord, messages, start: int) -> None:
    DisputeMessageRecord.objects.bulk_create([
        DisputeMessageRecord(
            message_id=m.message_id,
            dispute=row,
            sequence=start + offset,
            author_id=m.author_id,
            author_name=m.author_name,
            text=m.text,
            sent_at=m.sent_at,
        )
        for offset, m in enumerate(messages)
    ])


def _review_from_row(row: ReviewRecord) -> Review:
    return Review(
        review_id=row.review_id,
        order_id=row.order_id,
        contractor_id=row.contractor_id,
        supplier_id=row.supplier_id,
        rating=row.rating,
        comment=row.comment,
        created_at=row.created_at,
    )


def _notification_from_row(row: NotificationRecord) -> Notification:
    return Notification(
        notification_id=row.notification_id,
        recipient_id=row.recipient_id,
        notification_type=NotificationType(row.notification_type),
        message=row.message,
        created_at=row.created_at,
        is_read=row.is_read,
        source_event_id=row.source_event_id,
    )


# ══════════════════════════════════════════════════════════════
# STORE
# ══════════════════════════════════════════════════════════════

class DjangoStore:

    def atomic(self):
        return transaction.atomic()

    # ── Orders ────────────────────────────────────────────────

    def create_order(self, order: Order) -> Order:
        try:
            with transaction.atomic():
                OrderRecord.objects.create(
                    order_id=order.order_id,
                    version=order.version,
                    **_order_fields(order),
                )
        except IntegrityError as exc:
            raise DuplicateRecordError("Order", order.order_id) from exc
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        row = OrderRecord.objects.filter(order_id=order_id).first()
        return _order_from_row(row) if row else None

    def update_order(
        self,
        order_id: str,
        expected_version: int,
        mutation: OrderMutation,
    ) -> Order:
        with transaction.atomic():
            row = (
                OrderRecord.objects.select_for_update()
                .filter(order_id=order_id)
                .first()
            )
            if row is None:
                raise RecordNotFound("Order", order_id)
            if row.version != expected_version:
                raise StaleWriteError(
                    "Order", order_id, expected_version, row.version,
                )
            updated = mutation(_order_from_row(row))
            for name, value in _order_fields(updated).items():
                setattr(row, name, value)
            row.version = expected_version + 1
            row.save()
        return _order_from_row(row)

    def list_orders_for_party(self, party_id: str) -> list[Order]:
        rows = OrderRecord.objects.filter(
            Q(contractor_id=party_id)
            | Q(supplier_id=party_id)
            | Q(driver_id=party_id)
        ).order_by("-created_at", "order_id")
        return [_order_from_row(row) for row in rows]

    # ── Disputes ──────────────────────────────────────────────

    def create_dispute(self, dispute: Dispute) -> Dispute:
        try:
            with transaction.atomic():
                row = DisputeRecord.objects.create(
                    dispute_id=dispute.dispute_id,
                    order_id=dispute.order_id,
                    order_number=dispute.order_number,
                    contractor_id=dispute.contractor_id,
                    supplier_id=dispute.supplier_id,
                    raised_by=dispute.raised_by,
                    reason=dispute.reason.value,
                    status=dispute.status.value,
                    created_at=dispute.created_at,
                    order_status_at_opening=dispute.order_status_at_opening.value,
                    participant_ids=sorted(dispute.participant_ids),
                    resolution=(
                        dispute.resolution.to_dict()
                        if dispute.resolution else None
                    ),
                    version=dispute.version,
                )
                _insert_messages(row, dispute.messages, start=0)
        except IntegrityError as exc:
            raise DuplicateRecordError("Dispute", dispute.dispute_id) from exc
        return dispute

    def get_dispute(self, dispute_id: str) -> Optional[Dispute]:
        row = DisputeRecord.objects.filter(dispute_id=dispute_id).first()
        return _dispute_from_row(row) if row else None

    def get_dispute_for_order(self, order_id: str) -> Optional[Dispute]:
        row = (
            DisputeRecord.objects.filter(order_id=order_id)
            .order_by("-created_at")
            .first()
        )
        return _dispute_from_row(row) if row else None

    def update_dispute(
        self,
        dispute_id: str,
        expected_version: int,
        mutation: DisputeMutation,
    ) -> Dispute:
        with transaction.atomic():
            row = (
                DisputeRecord.objects.select_for_update()
                .filter(dispute_id=dispute_id)
                .first()
            )
            if row is None:
                raise RecordNotFound("Dispute", dispute_id)
            if row.version != expected_version:
                raise StaleWriteError(
                    "Dispute", dispute_id, expected_version, row.version,
                )
            current = _dispute_from_row(row)
            updated = mutation(current)
            existing = len(current.messages)
            if updated.messages[:existing] != current.messages:
                raise RepositoryError(
                    f"Dispute '{dispute_id}' messages are append-only."
                )
            _insert_messages(row, updated.messages[existing:], start=existing)
            row.status = updated.status.value
            row.participant_ids = sorted(updated.participant_ids)
            row.resolution = (
                updated.resolution.to_dict() if updated.resolution else None
            )
            row.version = expected_version + 1
            row.save(update_fields=[
                "status", "participant_ids", "resolution", "version",
            ])
        return _dispute_from_row(row)

    def list_disputes_for_party(self, party_id: str) -> list[Dispute]:
        rows = DisputeRecord.objects.filter(
            Q(contractor_id=party_id) | Q(supplier_id=party_id)
        ).order_by("-created_at", "dispute_id")
        return [_dispute_from_row(row) for row in rows]

    # ── Reviews ───────────────────────────────────────────────

    def create_review(self, review: Review) -> Review:
        try:
            with transaction.atomic():
                ReviewRecord.objects.create(
                    review_id=review.review_id,
                    order_id=review.order_id,
                    contractor_id=review.contractor_id,
                    supplier_id=review.supplier_id,
                    rating=review.rating,
                    comment=review.comment,
                    created_at=review.created_at,
                )
        except IntegrityError as exc:
            raise DuplicateRecordError("Review", review.order_id) from exc
        return review

    def get_review_for_order(self, order_id: str) -> Optional[Review]:
        row = ReviewRecord.objects.filter(order_id=order_id).first()
        return _review_from_row(row) if row else None

    def list_reviews_for_supplier(self, supplier_id: str) -> list[Review]:
        rows = ReviewRecord.objects.filter(supplier_id=supplier_id)
        return [_review_from_row(row) for row in rows]

    # ── Notifications ─────────────────────────────────────────

    def create_notification(
        self, notification: Notification,
    ) -> tuple[Notification, bool]:
        with transaction.atomic():
            row, created = NotificationRecord.objects.get_or_create(
                notification_id=notification.notification_id,
                defaults={
                    "recipient_id": notification.recipient_id,
                    "notification_type": notification.notification_type.value,
                    "message": notification.message,
                    "created_at": notification.created_at,
                    "is_read": notification.is_read,
                    "source_event_id": notification.source_event_id,
                },
            )
        return _notification_from_row(row), created

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        row = NotificationRecord.objects.filter(
            notification_id=notification_id,
        ).first()
        return _notification_from_row(row) if row else None

    def list_notifications(
        self, recipient_id: str, unread_only: bool = False,
    ) -> list[Notification]:
        rows = NotificationRecord.objects.filter(recipient_id=recipient_id)
        if unread_only:
            rows = rows.filter(is_read=False)
        return [_notification_from_row(row) for row in rows]

    def mark_notification_read(self, notification_id: str) -> Notification:
        updated = NotificationRecord.objects.filter(
            notification_id=notification_id,
        ).update(is_read=True)
        if not updated:
            raise RecordNotFound("Notification", notification_id)
        return self.get_notification(notification_id)

    def mark_all_notifications_read(self, recipient_id: str) -> int:
        return NotificationRecord.objects.filter(
            recipient_id=recipient_id, is_read=False,
        ).update(is_read=True)
