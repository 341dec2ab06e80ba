"""
Handover Disputes Engine — Policies
=====================================
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.dispute import Dispute, DisputeStatus
from core.primitives.workflow import DISPUTE_WORKFLOW


def dispute_must_exist_policy(
    dispute: Optional[Dispute], dispute_id: str,
) -> Optional[RejectionReason]:
    if dispute is None:
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=f"Dispute '{dispute_id}' not found.",
            policy_name="dispute_must_exist_policy",
        )
    return None


def no_open_dispute_policy(
    existing: Optional[Dispute], order_id: str,
) -> Optional[RejectionReason]:
    """Only one unresolved dispute per order."""
    if existing is not None and not existing.is_resolved:
        return RejectionReason(
            code=ReasonCode.DUPLICATE_DISPUTE,
            message=(
                f"Order '{order_id}' already has open dispute "
                f"'{existing.dispute_id}'."
            ),
            policy_name="no_open_dispute_policy",
        )
    return None


def dispute_must_be_open_policy(dispute: Dispute) -> Optional[RejectionReason]:
    if dispute.is_resolved:
        return RejectionReason(
            code=ReasonCode.INVALID_TRANSITION,
            message=f"Dispute '{dispute.dispute_id}' is already resolved.",
            policy_name="dispute_must_be_open_policy",
        )
    return None


def dispute_expected_status_policy(
    dispute: Dispute, expected_status: Optional[DisputeStatus],
) -> Optional[RejectionReason]:
    if expected_status is None or dispute.status == expected_status:
        return None
    return RejectionReason(
        code=ReasonCode.STALE_STATE,
        message=(
            f"Dispute '{dispute.dispute_id}' is {dispute.status.value}, "
            f"caller expected {expected_status.value}."
        ),
        policy_name="dispute_expected_status_policy",
    )


def dispute_transition_policy(
    dispute: Dispute, target: DisputeStatus,
) -> Optional[RejectionReason]:
    if DISPUTE_WORKFLOW.is_valid_transition(dispute.status.value, target.value):
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_TRANSITION,
        message=(
            f"Dispute '{dispute.dispute_id}' cannot move "
            f"{dispute.status.value} → {target.value}."
        ),
        policy_name="dispute_transition_policy",
    )


def is_mediation_eligible(dispute: Dispute) -> bool:
    """Both the contractor and the supplier have spoken."""
    return (
        dispute.has_message_from(dispute.contractor_id)
        and dispute.has_message_from(dispute.supplier_id)
    )


def mediation_must_be_eligible_policy(
    dispute: Dispute,
) -> Optional[RejectionReason]:
    if is_mediation_eligible(dispute):
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_TRANSITION,
        message=(
            f"Dispute '{dispute.dispute_id}' needs a message from both the "
            f"contractor and the supplier before mediation."
        ),
        policy_name="mediation_must_be_eligible_policy",
    )


_RESPONDABLE = frozenset({
    DisputeStatus.NEW,
    DisputeStatus.CONTRACTOR_RESPONDED,
    DisputeStatus.SUPPLIER_RESPONDED,
})


def status_after_message(dispute: Dispute, author_id: str) -> DisputeStatus:
    """
    A contractor or supplier message moves the thread to that party's
    *_RESPONDED state. Anyone else, or a dispute already under admin
    review, leaves the status as it is.
    """
    if dispute.status not in _RESPONDABLE:
        return dispute.status
    if author_id == dispute.contractor_id:
        return DisputeStatus.CONTRACTOR_RESPONDED
    if author_id == dispute.supplier_id:
        return DisputeStatus.SUPPLIER_RESPONDED
    return dispute.status
