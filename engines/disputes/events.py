"""
Handover Disputes Engine — Event Types and Payload Builders
=============================================================
Disputes owns: opening (which also flips the order to DISPUTED),
the message thread, mediation acceptance, escalation and resolution.
"""

from __future__ import annotations

from core.primitives.dispute import Dispute, DisputeMessage


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

DISPUTES_DISPUTE_OPENED_V1 = "disputes.dispute.opened.v1"
DISPUTES_MESSAGE_ADDED_V1 = "disputes.message.added.v1"
DISPUTES_SUGGESTION_ACCEPTED_V1 = "disputes.suggestion.accepted.v1"
DISPUTES_DISPUTE_ESCALATED_V1 = "disputes.dispute.escalated.v1"
DISPUTES_DISPUTE_RESOLVED_V1 = "disputes.dispute.resolved.v1"

DISPUTES_EVENT_TYPES = (
    DISPUTES_DISPUTE_OPENED_V1,
    DISPUTES_MESSAGE_ADDED_V1,
    DISPUTES_SUGGESTION_ACCEPTED_V1,
    DISPUTES_DISPUTE_ESCALATED_V1,
    DISPUTES_DISPUTE_RESOLVED_V1,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def _base_payload(dispute: Dispute) -> dict:
    return {
        "dispute_id": dispute.dispute_id,
        "order_id": dispute.order_id,
        "order_number": dispute.order_number,
        "contractor_id": dispute.contractor_id,
        "supplier_id": dispute.supplier_id,
        "participant_ids": sorted(dispute.participant_ids),
        "status": dispute.status.value,
        "version": dispute.version,
    }


def build_dispute_opened_payload(dispute: Dispute) -> dict:
    payload = _base_payload(dispute)
    payload.update({
        "raised_by": dispute.raised_by,
        "reason": dispute.reason.value,
        "order_status_at_opening": dispute.order_status_at_opening.value,
        "order_status": "DISPUTED",
        "created_at": dispute.created_at.isoformat(),
    })
    return payload


def build_message_added_payload(dispute: Dispute, message: DisputeMessage) -> dict:
    payload = _base_payload(dispute)
    payload["message"] = message.to_dict()
    return payload


def build_dispute_escalated_payload(dispute: Dispute, previous: str) -> dict:
    payload = _base_payload(dispute)
    payload["previous_status"] = previous
    return payload


def build_dispute_resolved_payload(dispute: Dispute) -> dict:
    payload = _base_payload(dispute)
    payload["resolution"] = dispute.resolution.to_dict()
    return payload
