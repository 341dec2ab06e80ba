"""
Handover AI Advisory — Dispute Mediation
==========================================
Asks the advisory service for a resolution draft once both parties
have spoken. The draft is returned to the caller; it only enters the
dispute thread if a participant accepts it through
DisputeResolutionService.accept_suggestion.
"""

from __future__ import annotations

from typing import Any, Dict

from ai.advisory.gateway import AdvisoryGateway
from core.commands.outcomes import OperationOutcome
from core.context.actor_context import ActorContext
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.primitives.dispute import Dispute
from core.repository.protocol import StoreProtocol
from engines.disputes.commands import DISPUTES_SUGGESTION_REQUEST
from engines.disputes.policies import (
    dispute_must_be_open_policy,
    dispute_must_exist_policy,
    mediation_must_be_eligible_policy,
)


def build_dispute_context(dispute: Dispute) -> Dict[str, Any]:
    return {
        "dispute_id": dispute.dispute_id,
        "order_number": dispute.order_number,
        "reason": dispute.reason.value,
        "status": dispute.status.value,
        "contractor_id": dispute.contractor_id,
        "supplier_id": dispute.supplier_id,
        "messages": [
            {
                "author_id": m.author_id,
                "author_name": m.author_name,
                "text": m.text,
                "sent_at": m.sent_at.isoformat(),
            }
            for m in dispute.messages
        ],
    }


class MediationAdvisor:

    def __init__(self, *, store: StoreProtocol, gateway: AdvisoryGateway):
        self._store = store
        self._gateway = gateway

    def request_suggestion(
        self, dispute_id: str, *, actor: ActorContext,
    ) -> OperationOutcome:
        """
        Accepted outcomes carry an AdvisoryResult, which may itself be a
        failure (timeout, error, blank text). Rejections mean the port
        was never called.
        """
        operation = DISPUTES_SUGGESTION_REQUEST
        dispute = self._store.get_dispute(dispute_id)
        rejection = dispute_must_exist_policy(dispute, dispute_id)
        if rejection is None:
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_dispute(dispute),
            )
        if rejection is None:
            rejection = (
                dispute_must_be_open_policy(dispute)
                or mediation_must_be_eligible_policy(dispute)
            )
        if rejection is not None:
            return OperationOutcome.rejected(operation, rejection)

        result = self._gateway.suggest_resolution(build_dispute_context(dispute))
        return OperationOutcome.accepted(operation, result)
